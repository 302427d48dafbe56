"""Inference layer - metre inference from corpus statistics.

This layer turns a training corpus and a test sequence into beliefs about
the test sequence's metre:
- Category segmentation and counting (with memoised counts)
- Prior construction (empirical, flat, custom)
- Ensemble of per-category sequence models
- Bayesian filtering with per-event information content
- Aggregation of (metre x phase) posteriors into per-metre summaries
- Resampling (k-fold) evaluation

Pipeline: Corpus → [Segmenter → Ensemble, Counts → Prior] → Filter → Aggregates
"""

from .segmenter import CategorySegmenter
from .prior import PriorBuilder
from .ensemble import CategoryModel, EnsemblePredictor, check_keys
from .bayes_filter import BayesianFilter, FilterResult
from .aggregate import time_average, position_slice, marginalize_phase, most_probable
from .engine import InferenceConfig, InferenceResult, MetreInference, resolve_categories
from .resampling import make_folds, evaluate, EvaluationReport, SequenceEvaluation

__all__ = [
    # Segmentation
    "CategorySegmenter",
    # Prior
    "PriorBuilder",
    # Ensemble
    "CategoryModel",
    "EnsemblePredictor",
    "check_keys",
    # Filtering
    "BayesianFilter",
    "FilterResult",
    # Aggregation
    "time_average",
    "position_slice",
    "marginalize_phase",
    "most_probable",
    # Engine
    "InferenceConfig",
    "InferenceResult",
    "MetreInference",
    "resolve_categories",
    # Evaluation
    "make_folds",
    "evaluate",
    "EvaluationReport",
    "SequenceEvaluation",
]
