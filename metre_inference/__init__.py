"""Metre Inference - corpus-based probabilistic inference of musical metre.

Architecture Layers:
    1. core/       - Events, metre taxonomy, distributions, errors
    2. corpus/     - Corpus sources and memoisation caches
    3. prediction/ - Sequence predictors and viewpoints
    4. inference/  - Segmentation, priors, ensemble, Bayesian filter, aggregation
    5. cli         - Command-line front end
"""

__version__ = "0.1.0"

# Core types
from .core import Event, MetreCategory, Interpretation, Distribution

# Corpus layer
from .corpus import SequenceList, JSONCorpusLoader, DiskCache

# Prediction layer
from .prediction import SequencePredictor, MarkovPredictor

# Inference layer
from .inference import (
    CategorySegmenter,
    PriorBuilder,
    EnsemblePredictor,
    BayesianFilter,
    InferenceConfig,
    MetreInference,
    evaluate,
)

__all__ = [
    # Core
    "Event",
    "MetreCategory",
    "Interpretation",
    "Distribution",
    # Corpus
    "SequenceList",
    "JSONCorpusLoader",
    "DiskCache",
    # Prediction
    "SequencePredictor",
    "MarkovPredictor",
    # Inference
    "CategorySegmenter",
    "PriorBuilder",
    "EnsemblePredictor",
    "BayesianFilter",
    "InferenceConfig",
    "MetreInference",
    "evaluate",
]
