"""Tests for prior construction."""

import pytest

from metre_inference.core import MetreCategory, PriorError
from metre_inference.inference import PriorBuilder

A = MetreCategory(96, 4)
B = MetreCategory(72, 3)
C = MetreCategory(48, 2)


class TestEmpiricalPrior:
    """Prior from category masses."""

    def test_single_phase_matches_category_frequencies(self):
        # Resolution 1: one interpretation per category
        prior = PriorBuilder(resolution=1).empirical({A.key: 6, B.key: 3, C.key: 1})

        assert prior.keys() == ["96/4@0", "72/3@0", "48/2@0"]
        assert prior["96/4@0"] == pytest.approx(0.6)
        assert prior["72/3@0"] == pytest.approx(0.3)
        assert prior["48/2@0"] == pytest.approx(0.1)
        assert prior.is_normalized()

    def test_phases_share_category_probability_before_renormalization(self):
        # 96/4 has 4 phases at resolution 4, 72/3 has 3
        prior = PriorBuilder(resolution=4).empirical({A.key: 1, B.key: 1})

        assert len(prior) == 7
        assert prior.is_normalized()
        # Every phase gets the same mass, so 96/4 ends up with 4/7 of the total
        assert prior["96/4@0"] == pytest.approx(1 / 7)
        a_total = sum(v for k, v in prior.items() if k.startswith("96/4"))
        assert a_total == pytest.approx(4 / 7)

    def test_listed_category_without_counts_gets_zero(self):
        prior = PriorBuilder(resolution=1).empirical({A.key: 2}, categories=[A, B])
        assert prior["72/3@0"] == 0.0
        assert prior["96/4@0"] == pytest.approx(1.0)

    def test_no_mass_rejected(self):
        with pytest.raises(PriorError):
            PriorBuilder(resolution=1).empirical({A.key: 0})


class TestFlatPrior:
    """Uniform prior over interpretations."""

    def test_uniform(self):
        prior = PriorBuilder(resolution=4).flat([A, B])
        assert len(prior) == 7
        assert all(v == pytest.approx(1 / 7) for v in prior.values())
        assert prior.is_normalized()

    def test_empty_rejected(self):
        with pytest.raises(PriorError):
            PriorBuilder(resolution=4).flat([])


class TestCustomPrior:
    """Empirical procedure on caller-supplied counts."""

    def test_custom_equals_empirical(self):
        builder = PriorBuilder(resolution=8)
        counts = {A.key: 5, B.key: 2}
        assert builder.custom(counts) == builder.empirical(counts)

    def test_custom_restricted_to_categories(self):
        builder = PriorBuilder(resolution=1)
        prior = builder.custom({A.key: 1, B.key: 3}, [A])
        assert list(prior.keys()) == ["96/4@0"]
        assert prior["96/4@0"] == pytest.approx(1.0)


class TestBuild:
    """Mode dispatch."""

    def test_dispatch(self):
        builder = PriorBuilder(resolution=1)
        assert builder.build("flat", [A, B]) == builder.flat([A, B])
        assert builder.build("empirical", [A, B], {A.key: 1, B.key: 3})["72/3@0"] == pytest.approx(0.75)
        assert builder.build("custom", [], {A.key: 1})["96/4@0"] == pytest.approx(1.0)

    def test_empirical_needs_counts(self):
        with pytest.raises(PriorError):
            PriorBuilder(resolution=1).build("empirical", [A])

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="prior mode"):
            PriorBuilder(resolution=1).build("informed", [A])
