"""Ensemble prediction - one sequence model per metrical category.

Each category model is trained only on the runs of the corpus written in
that category. At inference time every model scores the test sequence under
each interpretation of its category, giving one likelihood series per
interpretation key.
"""

import warnings
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence as SequenceType

from ..core import (
    CacheCorruptionWarning,
    Distribution,
    InferenceError,
    KeyMismatchError,
    MetreCategory,
    Sequence,
    enumerate_interpretations,
)
from ..core.constants import DEFAULT_RESOLUTION, DEFAULT_TIMEBASE
from ..corpus import CacheProvider, NullCache, cache_key, resolve_corpus
from ..prediction import MarkovPredictor, SequencePredictor
from .segmenter import CategorySegmenter, CorpusLike


@dataclass
class CategoryModel:
    """A trained predictor bound to one category."""

    category: MetreCategory
    predictor: SequencePredictor
    n_segments: int = 0


class EnsemblePredictor:
    """Train and query one predictor per category."""

    def __init__(
        self,
        segmenter: Optional[CategorySegmenter] = None,
        predictor_factory: Optional[Callable[[], SequencePredictor]] = None,
        resolution: int = DEFAULT_RESOLUTION,
        timebase: int = DEFAULT_TIMEBASE,
        model_cache: Optional[CacheProvider] = None,
    ):
        """
        Initialize EnsemblePredictor.

        Args:
            segmenter: Segmenter used to extract training runs
            predictor_factory: Builds an untrained predictor (default: MarkovPredictor)
            resolution: Phase steps per semibreve
            timebase: Ticks per semibreve
            model_cache: Cache provider for trained models (default: none)
        """
        self.segmenter = segmenter or CategorySegmenter(timebase=timebase)
        self.resolution = resolution
        self.timebase = timebase
        self.predictor_factory = predictor_factory or (
            lambda: MarkovPredictor(resolution=resolution, timebase=timebase)
        )
        self.model_cache = model_cache if model_cache is not None else NullCache()

    def build(
        self,
        corpus: CorpusLike,
        categories: SequenceType[MetreCategory],
        target_attrs: SequenceType[str],
        source_attrs: SequenceType[str],
        resampling_fold: Optional[int] = None,
        resampling_count: Optional[int] = None,
    ) -> List[CategoryModel]:
        """
        Train one model per category.

        Cached models are keyed by the corpus signature, the predictor's
        ``tag`` and the training settings.

        Args:
            corpus: Training corpus
            categories: Categories to model
            target_attrs: Viewpoints to predict
            source_attrs: Viewpoints used as context
            resampling_fold: Held-out fold index, selects consistent model caches
            resampling_count: Number of resampling folds

        Returns:
            Trained category models, in category order
        """
        source = resolve_corpus(corpus)
        signature = source.signature
        models = []

        warned = False
        for category in categories:
            predictor = self.predictor_factory()
            key = cache_key(
                signature,
                "model",
                predictor.tag,
                category.key,
                ",".join(target_attrs),
                ",".join(source_attrs),
                resampling_fold,
                resampling_count,
                self.resolution,
                self.timebase,
            )
            if self.model_cache.exists(key):
                cached = self.model_cache.read(key)
                if (
                    isinstance(cached, CategoryModel)
                    and cached.category == category
                    and cached.predictor.is_trained
                ):
                    models.append(cached)
                    continue
                warnings.warn(
                    f"Cached model {key} for {category.key} failed validation; retraining",
                    CacheCorruptionWarning,
                )

            # Metre-less events are reported on the first scan only
            segments = self.segmenter.segment(source, category, warn=not warned)
            warned = True
            if not segments:
                raise InferenceError("No training data for category", category=category.key)

            predictor.train(
                segments,
                source_attrs=source_attrs,
                target_attrs=target_attrs,
                resampling_fold=resampling_fold,
                resampling_count=resampling_count,
            )
            model = CategoryModel(category, predictor, n_segments=len(segments))
            self.model_cache.write(key, model)
            models.append(model)

        return models

    def predict(
        self,
        models: List[CategoryModel],
        test_sequence: Sequence,
        resolution: Optional[int] = None,
    ) -> Dict[str, List[float]]:
        """
        Likelihood series of the test sequence under every interpretation.

        Only the first target attribute's probabilities are kept; further
        target attributes are scored by the predictor but not combined.

        Args:
            models: Trained category models
            test_sequence: Sequence to score (never learnt from)
            resolution: Phase steps per semibreve; must match the resolution
                the predictors place phases at (default: the ensemble's)

        Returns:
            Interpretation key -> one probability per test event
        """
        resolution = resolution or self.resolution
        if resolution != self.resolution:
            raise ValueError(
                f"Models place phases at resolution {self.resolution}, got {resolution}"
            )
        likelihoods: Dict[str, List[float]] = {}

        for model in models:
            for interpretation in enumerate_interpretations(model.category, resolution, self.timebase):
                if interpretation.key in likelihoods:
                    raise InferenceError(
                        f"Duplicate interpretation key {interpretation.key!r}",
                        category=model.category.key,
                    )
                scores = model.predictor.predict(test_sequence, interpretation, predict_only=True)
                if not scores:
                    raise InferenceError("Predictor returned no target scores", category=model.category.key)
                first = next(iter(scores.values()))
                if len(first) != len(test_sequence):
                    raise InferenceError(
                        f"Predictor returned {len(first)} probabilities for "
                        f"{len(test_sequence)} events",
                        category=model.category.key,
                    )
                likelihoods[interpretation.key] = list(first)

        return likelihoods


def check_keys(prior: Distribution, likelihoods: Dict[str, List[float]]) -> None:
    """Raise KeyMismatchError unless prior and likelihoods share their keys."""
    prior_keys = set(prior.keys())
    likelihood_keys = set(likelihoods)
    if prior_keys != likelihood_keys:
        raise KeyMismatchError(
            missing=prior_keys - likelihood_keys,
            extra=likelihood_keys - prior_keys,
        )
