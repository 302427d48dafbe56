"""Distribution - ordered mapping from interpretation keys to probabilities.

A distribution is either static (one float per key) or time-varying (one
1-D array per key, indexed by test-sequence position). Keys are unique:
building a distribution from pairs that repeat a key raises ``ValueError``
instead of silently shadowing the earlier value.
"""

from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from .constants import NORMALIZATION_TOLERANCE

Value = Union[float, np.ndarray]


class Distribution:
    """Ordered map of key -> probability (static) or key -> series."""

    def __init__(self, items: Union[Mapping[str, Value], Iterable[Tuple[str, Value]]] = ()):
        pairs = items.items() if isinstance(items, Mapping) else items
        self._data: Dict[str, Value] = {}
        self._length: Optional[int] = None
        time_varying: Optional[bool] = None

        for key, value in pairs:
            if key in self._data:
                raise ValueError(f"Duplicate distribution key: {key!r}")
            if np.ndim(value) == 0:
                value = float(value)
                is_series = False
            else:
                value = np.asarray(value, dtype=np.float64)
                if value.ndim != 1:
                    raise ValueError(f"Series for {key!r} must be 1-D, got shape {value.shape}")
                is_series = True
                if self._length is None:
                    self._length = len(value)
                elif len(value) != self._length:
                    raise ValueError(
                        f"Series for {key!r} has length {len(value)}, expected {self._length}"
                    )
            if time_varying is None:
                time_varying = is_series
            elif time_varying != is_series:
                raise ValueError("Cannot mix static and time-varying values")
            self._data[key] = value

        self._time_varying = bool(time_varying)

    # ------------------------------------------------------------------
    # Mapping behaviour
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> Value:
        return self._data[key]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Distribution):
            return NotImplemented
        if self.keys() != other.keys() or self._time_varying != other._time_varying:
            return False
        return all(np.array_equal(self._data[k], other._data[k]) for k in self._data)

    def __repr__(self) -> str:
        kind = f"time-varying[{self._length}]" if self._time_varying else "static"
        return f"Distribution({kind}, {len(self)} keys)"

    def keys(self) -> List[str]:
        return list(self._data)

    def values(self) -> List[Value]:
        return list(self._data.values())

    def items(self) -> List[Tuple[str, Value]]:
        return list(self._data.items())

    def probability(self, key: str, default: Value = 0.0) -> Value:
        """Look up a key, falling back to ``default`` when it is absent."""
        return self._data.get(key, default)

    @property
    def is_time_varying(self) -> bool:
        return self._time_varying

    @property
    def length(self) -> Optional[int]:
        """Number of time positions, or None for a static distribution."""
        return self._length if self._time_varying else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def total(self) -> Value:
        """Sum over keys (per position for time-varying distributions)."""
        if self._time_varying:
            return self.as_matrix()[1].sum(axis=0)
        return float(sum(self._data.values()))

    def is_normalized(self, tolerance: float = NORMALIZATION_TOLERANCE) -> bool:
        """Check that values sum to 1 (at every position)."""
        if not self._data:
            return False
        return bool(np.all(np.abs(np.asarray(self.total()) - 1.0) <= tolerance))

    def normalize(self) -> "Distribution":
        """Return a copy whose values sum to 1 (at every position)."""
        total = self.total()
        if np.any(np.asarray(total) <= 0) or not np.all(np.isfinite(total)):
            raise ValueError(f"Cannot normalize distribution with total {total!r}")
        return Distribution((k, v / total) for k, v in self._data.items())

    def average(self) -> "Distribution":
        """Arithmetic mean of each key's series (static copy if already static)."""
        if not self._time_varying:
            return Distribution(self._data)
        if not self._length:
            raise ValueError("Cannot average a distribution with no positions")
        return Distribution((k, float(np.mean(v))) for k, v in self._data.items())

    def slice(self, position: int) -> "Distribution":
        """Cross-section of a time-varying distribution at one position."""
        if not self._time_varying:
            raise ValueError("Cannot slice a static distribution")
        if not -self._length <= position < self._length:
            raise IndexError(f"Position {position} out of range for length {self._length}")
        return Distribution((k, float(v[position])) for k, v in self._data.items())

    def marginalize(self, category_of: Callable[[str], str]) -> "Distribution":
        """Average member values per group and renormalize over groups."""
        if self._time_varying:
            raise ValueError("Marginalize a static distribution (slice or average first)")

        groups: Dict[str, List[float]] = {}
        for key, value in self._data.items():
            groups.setdefault(category_of(key), []).append(value)

        return Distribution(
            (group, float(np.mean(values))) for group, values in groups.items()
        ).normalize()

    def argmax(self) -> Tuple[str, float]:
        """Key and value of the most probable entry of a static distribution."""
        if self._time_varying:
            raise ValueError("argmax needs a static distribution")
        if not self._data:
            raise ValueError("argmax of an empty distribution")
        key = max(self._data, key=lambda k: self._data[k])
        return key, self._data[key]

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def as_matrix(self) -> Tuple[List[str], np.ndarray]:
        """Keys and a (keys x positions) array, or a 1-D array if static."""
        keys = self.keys()
        if self._time_varying:
            if not keys:
                return keys, np.zeros((0, 0))
            return keys, np.vstack([self._data[k] for k in keys])
        return keys, np.array([self._data[k] for k in keys], dtype=np.float64)

    @classmethod
    def from_matrix(cls, keys: List[str], matrix: np.ndarray) -> "Distribution":
        """Build a distribution from keys and an array with one row per key."""
        matrix = np.asarray(matrix, dtype=np.float64)
        if len(keys) != matrix.shape[0]:
            raise ValueError(f"{len(keys)} keys for {matrix.shape[0]} rows")
        return cls(zip(keys, matrix))

    def to_dict(self) -> Dict[str, Union[float, List[float]]]:
        """Plain-Python form for JSON output."""
        return {
            k: (v.tolist() if isinstance(v, np.ndarray) else v)
            for k, v in self._data.items()
        }
