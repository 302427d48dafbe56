"""Prediction layer - statistical sequence predictors.

Provides the predictor interface used by the inference ensemble, the
viewpoint functions that read (or derive) event attributes under a metrical
interpretation, and an interpolated n-gram implementation.
"""

from .base import SequencePredictor
from .markov import MarkovPredictor
from .viewpoints import MetricalFrame, VIEWPOINTS, derive, derive_tuple

__all__ = [
    "SequencePredictor",
    "MarkovPredictor",
    "MetricalFrame",
    "VIEWPOINTS",
    "derive",
    "derive_tuple",
]
