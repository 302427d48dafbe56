"""Tests for posterior aggregation."""

import numpy as np
import pytest

from metre_inference.core import Distribution
from metre_inference.inference import (
    marginalize_phase,
    most_probable,
    position_slice,
    time_average,
)


@pytest.fixture
def posterior():
    """Time-varying posterior over two metres with 2 and 1 phases."""
    return Distribution(
        {
            "96/4@0": [0.5, 0.7, 0.9],
            "96/4@1": [0.25, 0.1, 0.05],
            "72/3@0": [0.25, 0.2, 0.05],
        }
    )


class TestTimeAverage:
    def test_mean_per_key(self, posterior):
        averaged = time_average(posterior)
        assert averaged["96/4@0"] == pytest.approx(0.7)
        assert averaged["72/3@0"] == pytest.approx(0.5 / 3)
        assert averaged.is_normalized()


class TestPositionSlice:
    def test_cross_section(self, posterior):
        sliced = position_slice(posterior, 1)
        assert sliced.to_dict() == pytest.approx({"96/4@0": 0.7, "96/4@1": 0.1, "72/3@0": 0.2})

    def test_last_position(self, posterior):
        assert position_slice(posterior, -1)["96/4@0"] == pytest.approx(0.9)


class TestMarginalizePhase:
    def test_average_over_phases_then_renormalize(self, posterior):
        marginal = marginalize_phase(position_slice(posterior, 0))
        # 96/4: mean(0.5, 0.25) = 0.375; 72/3: 0.25
        assert marginal["96/4"] == pytest.approx(0.375 / 0.625)
        assert marginal["72/3"] == pytest.approx(0.25 / 0.625)

    @pytest.mark.parametrize("seed", range(5))
    def test_always_sums_to_one(self, seed):
        rng = np.random.default_rng(seed)
        values = rng.random(7) ** 4  # heavily skewed
        keys = [f"96/4@{p}" for p in range(4)] + [f"72/3@{p}" for p in range(3)]
        marginal = marginalize_phase(Distribution(zip(keys, values)).normalize())
        assert marginal.is_normalized(tolerance=1e-9)

    def test_custom_grouping(self):
        dist = Distribution({"a1": 0.2, "a2": 0.4, "b1": 0.4})
        marginal = marginalize_phase(dist, category_of=lambda key: key[0])
        assert marginal.keys() == ["a", "b"]

    def test_time_varying_rejected(self, posterior):
        with pytest.raises(ValueError):
            marginalize_phase(posterior)


class TestMostProbable:
    def test_argmax(self, posterior):
        key, value = most_probable(position_slice(posterior, 2))
        assert key == "96/4@0"
        assert value == pytest.approx(0.9)
