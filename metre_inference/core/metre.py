"""Metre taxonomy - categories, interpretations and their string keys.

A category is a coarse metrical family (bar length and pulse count). An
interpretation fixes a category together with a phase: the position of the
barline grid relative to the start of the sequence. Every interpretation has
a canonical key ``"<barlength>/<pulses>@<phase>"``; no two interpretations
share a key.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional

from .constants import DEFAULT_TIMEBASE
from .event import Event

KEY_SEPARATOR = "@"
CATEGORY_SEPARATOR = "/"


@dataclass(frozen=True, order=True)
class MetreCategory:
    """A metrical category (time-signature family)."""

    barlength: int  # Bar length in ticks
    pulses: int  # Beats per bar

    def __post_init__(self):
        if self.barlength <= 0 or self.pulses <= 0:
            raise ValueError(
                f"Invalid metre category: barlength={self.barlength}, pulses={self.pulses}"
            )

    @property
    def key(self) -> str:
        return f"{self.barlength}{CATEGORY_SEPARATOR}{self.pulses}"

    @property
    def beat_length(self) -> int:
        """Length of one pulse in ticks."""
        return max(1, self.barlength // self.pulses)

    def phase_count(self, resolution: int, timebase: int = DEFAULT_TIMEBASE) -> int:
        """Number of phases of this category at a resolution."""
        return max(1, self.barlength * resolution // timebase)

    def time_signature(self, timebase: int = DEFAULT_TIMEBASE) -> str:
        """Render as a time signature, e.g. '3/4', for display."""
        ratio = Fraction(self.barlength, timebase)
        if ratio.numerator == 0:
            return self.key
        # Scale so that the numerator matches the pulse count where possible
        if (self.pulses * ratio.denominator) % ratio.numerator == 0:
            denominator = self.pulses * ratio.denominator // ratio.numerator
            return f"{self.pulses}/{denominator}"
        return f"{ratio.numerator}/{ratio.denominator}"

    @classmethod
    def from_key(cls, key: str) -> "MetreCategory":
        """Parse a category key such as '72/3'."""
        try:
            barlength, pulses = key.split(CATEGORY_SEPARATOR)
            return cls(int(barlength), int(pulses))
        except ValueError as e:
            raise ValueError(f"Invalid category key: {key!r}") from e

    @classmethod
    def from_event(cls, event: Event) -> Optional["MetreCategory"]:
        """Category of an event, or None if its metre is undefined."""
        if not event.has("barlength", "pulses"):
            return None
        try:
            return cls(int(event["barlength"]), int(event["pulses"]))
        except ValueError:
            return None

    @classmethod
    def from_time_signature(
        cls, numerator: int, denominator: int, timebase: int = DEFAULT_TIMEBASE
    ) -> "MetreCategory":
        """Build a category from a time signature, e.g. (6, 8)."""
        return cls(timebase * numerator // denominator, numerator)


@dataclass(frozen=True, order=True)
class Interpretation:
    """A fully specified hidden state: a category and a phase."""

    category: MetreCategory
    phase: int

    @property
    def key(self) -> str:
        return f"{self.category.key}{KEY_SEPARATOR}{self.phase}"

    def phase_offset(self, resolution: int, timebase: int = DEFAULT_TIMEBASE) -> int:
        """Tick position of the first barline implied by the phase."""
        return self.phase * timebase // resolution


def enumerate_interpretations(
    category: MetreCategory,
    resolution: int,
    timebase: int = DEFAULT_TIMEBASE,
) -> List[Interpretation]:
    """Enumerate the interpretations of a category at a resolution."""
    if resolution <= 0:
        raise ValueError(f"Resolution must be positive, got {resolution}")
    if resolution > timebase:
        raise ValueError(
            f"Resolution {resolution} is finer than the timebase ({timebase} ticks per semibreve)"
        )
    return [
        Interpretation(category, phase)
        for phase in range(category.phase_count(resolution, timebase))
    ]


def interpretation_key(interpretation: Interpretation) -> str:
    return interpretation.key


def category_of(interpretation: Interpretation) -> MetreCategory:
    return interpretation.category


def parse_key(key: str) -> Interpretation:
    """Invert ``interpretation_key``."""
    category_key, sep, phase = key.partition(KEY_SEPARATOR)
    if not sep:
        raise ValueError(f"Invalid interpretation key: {key!r}")
    try:
        return Interpretation(MetreCategory.from_key(category_key), int(phase))
    except ValueError as e:
        raise ValueError(f"Invalid interpretation key: {key!r}") from e


def category_key_of(key: str) -> str:
    """Category part of an interpretation key."""
    return key.partition(KEY_SEPARATOR)[0]

