"""Viewpoints - attribute values observed or derived from events.

A viewpoint is a named function of an event and its predecessors. Raw
attributes are read directly from the event; metrical viewpoints are derived
from the onset and a metrical frame (bar length, pulses, phase). During
inference the frame comes from the interpretation under test, so the same
sequence reads differently under each hypothesis; during training it comes
from the events' own metrical fields.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence as SequenceType, Tuple

from ..core import Event, Interpretation, Sequence
from ..core.constants import DEFAULT_RESOLUTION, DEFAULT_TIMEBASE


@dataclass(frozen=True)
class MetricalFrame:
    """Barline grid against which onsets are read."""

    barlength: int
    pulses: int
    phase: int = 0  # Tick position of a barline

    @property
    def beat_length(self) -> int:
        return max(1, self.barlength // self.pulses)

    @classmethod
    def for_event(
        cls,
        event: Event,
        interpretation: Optional[Interpretation] = None,
        resolution: int = DEFAULT_RESOLUTION,
        timebase: int = DEFAULT_TIMEBASE,
    ) -> Optional["MetricalFrame"]:
        """Frame implied by an interpretation, else by the event itself."""
        if interpretation is not None:
            category = interpretation.category
            return cls(
                category.barlength,
                category.pulses,
                interpretation.phase_offset(resolution, timebase),
            )
        if not event.has("barlength", "pulses"):
            return None
        return cls(int(event["barlength"]), int(event["pulses"]), int(event.get("phase", 0)))


ViewpointFunction = Callable[[Sequence, int, Optional[MetricalFrame]], Any]


def _onset(sequence: Sequence, index: int, frame: Optional[MetricalFrame]) -> Any:
    return sequence[index].get("onset")


def _ioi(sequence: Sequence, index: int, frame: Optional[MetricalFrame]) -> Any:
    if index == 0:
        return None
    onset = sequence[index].get("onset")
    previous = sequence[index - 1].get("onset")
    if onset is None or previous is None:
        return None
    return onset - previous


def _metpos(sequence: Sequence, index: int, frame: Optional[MetricalFrame]) -> Any:
    onset = sequence[index].get("onset")
    if onset is None or frame is None:
        return None
    return (onset - frame.phase) % frame.barlength


def _beatpos(sequence: Sequence, index: int, frame: Optional[MetricalFrame]) -> Any:
    metpos = _metpos(sequence, index, frame)
    if metpos is None:
        return None
    return metpos // frame.beat_length


def _barnumber(sequence: Sequence, index: int, frame: Optional[MetricalFrame]) -> Any:
    onset = sequence[index].get("onset")
    if onset is None or frame is None:
        return None
    return (onset - frame.phase) // frame.barlength


VIEWPOINTS: Dict[str, ViewpointFunction] = {
    "onset": _onset,
    "ioi": _ioi,
    "metpos": _metpos,
    "beatpos": _beatpos,
    "barnumber": _barnumber,
}

# Viewpoints whose value depends on the metrical frame
METRICAL_VIEWPOINTS = frozenset({"metpos", "beatpos", "barnumber"})


def derive(
    name: str,
    sequence: Sequence,
    index: int,
    frame: Optional[MetricalFrame] = None,
) -> Any:
    """Value of a viewpoint at ``sequence[index]`` (None if undefined)."""
    function = VIEWPOINTS.get(name)
    if function is None:
        return sequence[index].get(name)
    return function(sequence, index, frame)


def derive_tuple(
    names: SequenceType[str],
    sequence: Sequence,
    index: int,
    frame: Optional[MetricalFrame] = None,
) -> Optional[Tuple[Any, ...]]:
    """Values of several viewpoints, or None if any is undefined."""
    values = tuple(derive(name, sequence, index, frame) for name in names)
    if any(v is None for v in values):
        return None
    return values
