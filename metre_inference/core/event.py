"""Event data class - the fundamental unit of an observed sequence."""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Event:
    """Represents one observed musical event.

    Times are integer ticks of the corpus timebase (96 per semibreve by
    default). Attributes beyond the metrical fields live in ``attributes``.
    """

    onset: Optional[int] = None  # Start time in ticks
    duration: Optional[int] = None  # Duration in ticks
    barlength: Optional[int] = None  # Bar length in ticks
    pulses: Optional[int] = None  # Pulses (beats) per bar
    phase: Optional[int] = None  # Offset of the first barline in ticks
    attributes: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def offset(self) -> Optional[int]:
        """End time in ticks."""
        if self.onset is None or self.duration is None:
            return None
        return self.onset + self.duration

    def get(self, name: str, default: Any = None) -> Any:
        """Get a named attribute, or ``default`` if it is absent."""
        if name in _FIELD_NAMES:
            value = getattr(self, name)
            return default if value is None else value
        return self.attributes.get(name, default)

    def __getitem__(self, name: str) -> Any:
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def has(self, *names: str) -> bool:
        """Check that every named attribute is present and not None."""
        return all(self.get(name) is not None for name in names)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Build an event from a flat attribute dictionary."""
        known = {k: v for k, v in data.items() if k in _FIELD_NAMES}
        extra = {k: v for k, v in data.items() if k not in _FIELD_NAMES}
        return cls(**known, attributes=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to a dictionary (inverse of ``from_dict``)."""
        data = {
            name: getattr(self, name)
            for name in _FIELD_NAMES
            if getattr(self, name) is not None
        }
        data.update(self.attributes)
        return data


_FIELD_NAMES = tuple(f.name for f in fields(Event) if f.name != "attributes")

# One composition
Sequence = List[Event]
