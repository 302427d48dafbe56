"""Core types and constants for metre inference."""

from .event import Event, Sequence
from .metre import (
    MetreCategory,
    Interpretation,
    enumerate_interpretations,
    interpretation_key,
    category_of,
    parse_key,
    category_key_of,
)
from .distribution import Distribution
from .errors import (
    InferenceError,
    ZeroEvidenceError,
    KeyMismatchError,
    PriorError,
    MissingAttributeWarning,
    CacheCorruptionWarning,
)
from .constants import (
    DEFAULT_TIMEBASE,
    DEFAULT_RESOLUTION,
    DEFAULT_ORDER,
    TEXTURES,
    PRIOR_MODES,
)

__all__ = [
    "Event",
    "Sequence",
    "MetreCategory",
    "Interpretation",
    "enumerate_interpretations",
    "interpretation_key",
    "category_of",
    "parse_key",
    "category_key_of",
    "Distribution",
    "InferenceError",
    "ZeroEvidenceError",
    "KeyMismatchError",
    "PriorError",
    "MissingAttributeWarning",
    "CacheCorruptionWarning",
    "DEFAULT_TIMEBASE",
    "DEFAULT_RESOLUTION",
    "DEFAULT_ORDER",
    "TEXTURES",
    "PRIOR_MODES",
]
