"""Global constants for metre inference."""

# Ticks per semibreve (whole note)
DEFAULT_TIMEBASE = 96

# Phase steps per semibreve
DEFAULT_RESOLUTION = 16  # 16th notes

# Order of the n-gram context
DEFAULT_ORDER = 2

# Corpus textures understood by the category counter
TEXTURE_MELODY = "melody"
TEXTURE_HARMONY = "harmony"
TEXTURE_GRID = "grid"
TEXTURES = (TEXTURE_MELODY, TEXTURE_HARMONY, TEXTURE_GRID)

# Prior construction modes
PRIOR_EMPIRICAL = "empirical"
PRIOR_FLAT = "flat"
PRIOR_CUSTOM = "custom"
PRIOR_MODES = (PRIOR_EMPIRICAL, PRIOR_FLAT, PRIOR_CUSTOM)

# Default viewpoints
DEFAULT_TARGET_ATTRS = ("metpos",)
DEFAULT_SOURCE_ATTRS = ("metpos",)

# Tolerance used when checking that a distribution is normalized
NORMALIZATION_TOLERANCE = 1e-9
