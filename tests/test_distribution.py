"""Tests for the Distribution type."""

import numpy as np
import pytest

from metre_inference.core import Distribution


class TestConstruction:
    """Key uniqueness and static/time-varying shape rules."""

    def test_preserves_insertion_order(self):
        dist = Distribution([("b", 0.5), ("a", 0.5)])
        assert dist.keys() == ["b", "a"]

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Distribution([("a", 0.5), ("a", 0.5)])

    def test_from_mapping(self):
        dist = Distribution({"a": 0.25, "b": 0.75})
        assert dist["b"] == 0.75
        assert not dist.is_time_varying
        assert dist.length is None

    def test_time_varying(self):
        dist = Distribution({"a": [0.1, 0.2], "b": [0.9, 0.8]})
        assert dist.is_time_varying
        assert dist.length == 2
        assert isinstance(dist["a"], np.ndarray)

    def test_mixed_values_rejected(self):
        with pytest.raises(ValueError, match="mix"):
            Distribution([("a", 0.5), ("b", [0.5, 0.5])])

    def test_unequal_series_rejected(self):
        with pytest.raises(ValueError, match="length"):
            Distribution({"a": [0.5, 0.5], "b": [1.0]})


class TestLookup:
    """Absent keys need an explicit fallback."""

    def test_missing_key_raises(self):
        dist = Distribution({"a": 1.0})
        with pytest.raises(KeyError):
            dist["b"]

    def test_probability_fallback(self):
        dist = Distribution({"a": 1.0})
        assert dist.probability("b") == 0.0
        assert dist.probability("b", default=0.5) == 0.5
        assert dist.probability("a") == 1.0

    def test_contains(self):
        dist = Distribution({"a": 1.0})
        assert "a" in dist
        assert "b" not in dist


class TestOperations:
    """normalize, average, slice, marginalize."""

    def test_normalize_static(self):
        dist = Distribution({"a": 2.0, "b": 6.0}).normalize()
        assert dist["a"] == pytest.approx(0.25)
        assert dist.is_normalized()

    def test_normalize_time_varying(self):
        dist = Distribution({"a": [1.0, 3.0], "b": [3.0, 1.0]}).normalize()
        assert dist.is_normalized()
        np.testing.assert_allclose(dist["a"], [0.25, 0.75])

    def test_normalize_zero_mass_rejected(self):
        with pytest.raises(ValueError):
            Distribution({"a": 0.0, "b": 0.0}).normalize()

    def test_average(self):
        dist = Distribution({"a": [0.2, 0.4], "b": [0.8, 0.6]}).average()
        assert not dist.is_time_varying
        assert dist["a"] == pytest.approx(0.3)
        assert dist.is_normalized()

    def test_slice(self):
        dist = Distribution({"a": [0.2, 0.4], "b": [0.8, 0.6]})
        assert dist.slice(1)["b"] == pytest.approx(0.6)
        assert dist.slice(-1)["a"] == pytest.approx(0.4)

    def test_slice_out_of_range(self):
        dist = Distribution({"a": [0.2, 0.4]})
        with pytest.raises(IndexError):
            dist.slice(2)

    def test_slice_static_rejected(self):
        with pytest.raises(ValueError):
            Distribution({"a": 1.0}).slice(0)

    def test_marginalize_groups_and_renormalizes(self):
        dist = Distribution({"x@0": 0.4, "x@1": 0.2, "y@0": 0.4})
        marginal = dist.marginalize(lambda key: key.split("@")[0])
        # Means: x = 0.3, y = 0.4
        assert marginal.keys() == ["x", "y"]
        assert marginal["x"] == pytest.approx(0.3 / 0.7)
        assert marginal["y"] == pytest.approx(0.4 / 0.7)

    def test_argmax(self):
        assert Distribution({"a": 0.1, "b": 0.9}).argmax() == ("b", 0.9)

    def test_matrix_round_trip(self):
        dist = Distribution({"a": [0.1, 0.2], "b": [0.9, 0.8]})
        keys, matrix = dist.as_matrix()
        assert matrix.shape == (2, 2)
        assert Distribution.from_matrix(keys, matrix) == dist

    def test_to_dict(self):
        dist = Distribution({"a": [0.5], "b": [0.5]})
        assert dist.to_dict() == {"a": [0.5], "b": [0.5]}
