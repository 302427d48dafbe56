"""Metre inference engine - ties segmentation, priors, models and filtering.

Pipeline: corpus -> [category counts -> prior] + [category runs -> models]
          test sequence -> likelihoods -> Bayesian filter -> summaries
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..core import Distribution, InferenceError, MetreCategory, Sequence
from ..core.constants import (
    DEFAULT_ORDER,
    DEFAULT_RESOLUTION,
    DEFAULT_SOURCE_ATTRS,
    DEFAULT_TARGET_ATTRS,
    DEFAULT_TIMEBASE,
    PRIOR_CUSTOM,
    PRIOR_EMPIRICAL,
    PRIOR_MODES,
    TEXTURE_MELODY,
    TEXTURES,
)
from ..corpus import CorpusSource, make_cache, resolve_corpus
from ..prediction import MarkovPredictor, SequencePredictor
from .aggregate import marginalize_phase, most_probable, position_slice, time_average
from .bayes_filter import BayesianFilter, FilterResult
from .ensemble import CategoryModel, EnsemblePredictor
from .prior import PriorBuilder
from .segmenter import CategorySegmenter


@dataclass
class InferenceConfig:
    """Configuration for a metre inference run.

    Attributes:
        resolution: Phase steps per semibreve (default: 16)
        timebase: Ticks per semibreve (default: 96)
        texture: Corpus texture for category counting (default: "melody")
        prior_mode: "empirical", "flat" or "custom" (default: "empirical")
        custom_counts: Category key -> mass, for the custom prior
        per_composition: Count one unit per composition for last-event textures
        target_attrs: Viewpoints to predict (only the first is used for inference)
        source_attrs: Viewpoints used as predictive context
        order: Longest n-gram context (default: 2)
        resampling_fold: Held-out fold index when cross-validating
        resampling_count: Number of folds when cross-validating
        cache_dir: Directory for count and model caches (None disables caching)
        categories: Category keys to consider (default: all found in the corpus)
    """

    resolution: int = DEFAULT_RESOLUTION
    timebase: int = DEFAULT_TIMEBASE
    texture: str = TEXTURE_MELODY
    prior_mode: str = PRIOR_EMPIRICAL
    custom_counts: Optional[Dict[str, float]] = None
    per_composition: bool = True
    target_attrs: Tuple[str, ...] = DEFAULT_TARGET_ATTRS
    source_attrs: Tuple[str, ...] = DEFAULT_SOURCE_ATTRS
    order: int = DEFAULT_ORDER
    resampling_fold: Optional[int] = None
    resampling_count: Optional[int] = None
    cache_dir: Optional[str] = None
    categories: Optional[List[str]] = None

    def __post_init__(self):
        self.target_attrs = tuple(self.target_attrs)
        self.source_attrs = tuple(self.source_attrs)
        self.validate()

    def validate(self) -> None:
        """Raise ValueError on inconsistent settings."""
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")
        if self.timebase <= 0:
            raise ValueError(f"timebase must be positive, got {self.timebase}")
        if self.resolution > self.timebase:
            raise ValueError(
                f"resolution {self.resolution} exceeds timebase {self.timebase}; "
                "phases would share barline positions"
            )
        if self.texture not in TEXTURES:
            raise ValueError(f"texture must be one of {TEXTURES}, got {self.texture!r}")
        if self.prior_mode not in PRIOR_MODES:
            raise ValueError(f"prior_mode must be one of {PRIOR_MODES}, got {self.prior_mode!r}")
        if self.prior_mode == PRIOR_CUSTOM and not self.custom_counts:
            raise ValueError("prior_mode 'custom' requires custom_counts")
        if not self.target_attrs:
            raise ValueError("At least one target attribute is required")
        if self.order < 0:
            raise ValueError(f"order must be non-negative, got {self.order}")
        if (self.resampling_fold is None) != (self.resampling_count is None):
            raise ValueError("resampling_fold and resampling_count must be set together")
        if self.resampling_fold is not None and not 0 <= self.resampling_fold < self.resampling_count:
            raise ValueError(
                f"resampling_fold {self.resampling_fold} out of range for {self.resampling_count} folds"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InferenceConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InferenceConfig":
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["target_attrs"] = list(self.target_attrs)
        data["source_attrs"] = list(self.source_attrs)
        return data


@dataclass
class InferenceResult:
    """Container for the inference results on one test sequence."""

    filter_result: FilterResult
    interpretation_average: Distribution  # Time-averaged posterior per interpretation
    category_average: Distribution  # Time-averaged posterior per category
    category_final: Distribution  # Posterior per category after the last event
    best_category: str = ""
    best_interpretation: str = ""

    @property
    def information_content(self) -> List[float]:
        return self.filter_result.information_content

    @property
    def mean_information_content(self) -> Optional[float]:
        return self.filter_result.mean_information_content

    def category_at(self, position: int) -> Distribution:
        """Per-category posterior after event ``position``."""
        return marginalize_phase(position_slice(self.filter_result.posterior, position))

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python form for JSON output."""
        return {
            "best_category": self.best_category,
            "best_interpretation": self.best_interpretation,
            "mean_information_content": self.mean_information_content,
            "information_content": self.information_content,
            "category_average": self.category_average.to_dict(),
            "category_final": self.category_final.to_dict(),
            "prior": self.filter_result.prior.to_dict(),
        }


class MetreInference:
    """Infer the metre of test sequences from a training corpus.

    Usage:
        engine = MetreInference(InferenceConfig(resolution=8)).setup(corpus)
        result = engine.infer(test_sequence)
    """

    def __init__(
        self,
        config: Optional[InferenceConfig] = None,
        predictor_factory: Optional[Callable[[], SequencePredictor]] = None,
    ):
        """
        Initialize MetreInference.

        Args:
            config: Inference configuration (default: InferenceConfig())
            predictor_factory: Builds an untrained predictor per category
                (default: MarkovPredictor at the configured order)
        """
        self.config = config or InferenceConfig()
        cfg = self.config
        self.predictor_factory = predictor_factory or (
            lambda: MarkovPredictor(order=cfg.order, resolution=cfg.resolution, timebase=cfg.timebase)
        )

        self.segmenter = CategorySegmenter(
            cache=make_cache(cfg.cache_dir, prefix="counts"),
            timebase=cfg.timebase,
        )
        self.ensemble = EnsemblePredictor(
            segmenter=self.segmenter,
            predictor_factory=self.predictor_factory,
            resolution=cfg.resolution,
            timebase=cfg.timebase,
            model_cache=make_cache(cfg.cache_dir, prefix="models"),
        )
        self.prior_builder = PriorBuilder(cfg.resolution, cfg.timebase)
        self.bayes_filter = BayesianFilter()

        self.categories: List[MetreCategory] = []
        self.counts: Optional[Dict[str, float]] = None
        self.prior: Optional[Distribution] = None
        self.models: List[CategoryModel] = []

    @property
    def is_ready(self) -> bool:
        return self.prior is not None and bool(self.models)

    def setup(self, corpus: Union[CorpusSource, List[Sequence]]) -> "MetreInference":
        """
        Build the prior and train the category models.

        Args:
            corpus: Training corpus, materialized or lazily loaded

        Returns:
            self
        """
        cfg = self.config
        source = resolve_corpus(corpus)

        self.categories = resolve_categories(cfg, self.segmenter, source)
        if not self.categories:
            raise InferenceError("Training corpus has no events with a defined metre")

        if cfg.prior_mode == PRIOR_CUSTOM:
            self.counts = dict(cfg.custom_counts)
        elif cfg.prior_mode == PRIOR_EMPIRICAL:
            self.counts = self.segmenter.cached_count(
                source, cfg.texture, cfg.resolution, cfg.per_composition
            )
        else:
            self.counts = None

        self.prior = self.prior_builder.build(cfg.prior_mode, self.categories, self.counts)
        self.models = self.ensemble.build(
            source,
            self.categories,
            target_attrs=cfg.target_attrs,
            source_attrs=cfg.source_attrs,
            resampling_fold=cfg.resampling_fold,
            resampling_count=cfg.resampling_count,
        )
        return self

    def likelihoods(self, test_sequence: Sequence) -> Dict[str, List[float]]:
        """Per-interpretation likelihood series for a test sequence."""
        self._require_ready()
        return self.ensemble.predict(self.models, test_sequence)

    def infer(self, test_sequence: Sequence) -> InferenceResult:
        """
        Infer the metre of one test sequence.

        Args:
            test_sequence: Sequence of events (its metrical fields are ignored)

        Returns:
            InferenceResult with posterior, information content and summaries
        """
        self._require_ready()
        filter_result = self.bayes_filter.run(self.prior, self.likelihoods(test_sequence))

        if filter_result.n_positions:
            interpretation_average = time_average(filter_result.posterior)
        else:
            interpretation_average = filter_result.prior
        final = filter_result.final_posterior()
        category_final = marginalize_phase(final)

        return InferenceResult(
            filter_result=filter_result,
            interpretation_average=interpretation_average,
            category_average=marginalize_phase(interpretation_average),
            category_final=category_final,
            best_category=most_probable(category_final)[0],
            best_interpretation=most_probable(final)[0],
        )

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise InferenceError("MetreInference.setup() must be called before inference")


def resolve_categories(
    config: InferenceConfig, segmenter: CategorySegmenter, corpus: CorpusSource
) -> List[MetreCategory]:
    """Categories to model: the configured list, the custom count keys, or the corpus's own."""
    if config.categories:
        return [MetreCategory.from_key(key) for key in config.categories]
    if config.prior_mode == PRIOR_CUSTOM:
        return [MetreCategory.from_key(key) for key in config.custom_counts]
    return segmenter.categories(corpus)
