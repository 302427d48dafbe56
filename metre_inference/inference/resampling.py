"""Resampling evaluation - k-fold cross-validation of metre inference.

Each fold is held out in turn; the engine is trained on the remaining folds
and infers the metre of every held-out sequence. The true metre of a
sequence is read from its last event.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from ..core import MetreCategory, Sequence
from ..corpus import CorpusSource, SequenceList, resolve_corpus
from ..prediction import SequencePredictor
from .engine import InferenceConfig, MetreInference


def make_folds(n_items: int, k: int, seed: Optional[int] = None) -> List[List[int]]:
    """
    Partition item indices into k shuffled folds of near-equal size.

    Args:
        n_items: Number of items
        k: Number of folds (1 <= k <= n_items)
        seed: Seed for the shuffle (None for a random partition)

    Returns:
        k sorted lists of indices covering range(n_items) exactly once
    """
    if not 1 <= k <= n_items:
        raise ValueError(f"Cannot make {k} folds from {n_items} items")
    rng = np.random.default_rng(seed)
    permutation = rng.permutation(n_items)
    return [sorted(int(i) for i in fold) for fold in np.array_split(permutation, k)]


@dataclass
class SequenceEvaluation:
    """Inference outcome for one held-out sequence."""

    index: int
    fold: int
    n_events: int
    true_category: Optional[str]
    predicted_category: str
    mean_information_content: Optional[float]

    @property
    def correct(self) -> Optional[bool]:
        if self.true_category is None:
            return None
        return self.true_category == self.predicted_category


@dataclass
class EvaluationReport:
    """Container for cross-validation results."""

    k: int
    items: List[SequenceEvaluation] = field(default_factory=list)

    @property
    def accuracy(self) -> Optional[float]:
        """Fraction of sequences with a known metre that were classified correctly."""
        scored = [item.correct for item in self.items if item.correct is not None]
        if not scored:
            return None
        return sum(scored) / len(scored)

    @property
    def mean_information_content(self) -> Optional[float]:
        """Mean over sequences of the per-sequence mean surprisal."""
        values = [
            item.mean_information_content
            for item in self.items
            if item.mean_information_content is not None
        ]
        if not values:
            return None
        return float(np.mean(values))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "k": self.k,
            "accuracy": self.accuracy,
            "mean_information_content": self.mean_information_content,
            "items": [dataclasses.asdict(item) for item in self.items],
        }


def evaluate(
    corpus: Union[CorpusSource, List[Sequence]],
    config: Optional[InferenceConfig] = None,
    k: int = 10,
    seed: Optional[int] = None,
    predictor_factory: Optional[Callable[[], SequencePredictor]] = None,
) -> EvaluationReport:
    """
    Cross-validate metre inference over a corpus.

    Args:
        corpus: Corpus of sequences with known metres
        config: Base configuration; fold parameters are filled in per fold
        k: Number of folds (at least 2)
        seed: Seed for the fold partition
        predictor_factory: Optional predictor factory passed to the engine

    Returns:
        EvaluationReport with one entry per sequence, in corpus order
    """
    if k < 2:
        raise ValueError(f"Cross-validation needs at least 2 folds, got {k}")
    config = config or InferenceConfig()
    sequences = resolve_corpus(corpus).sequences()
    folds = make_folds(len(sequences), k, seed)

    report = EvaluationReport(k=k)
    for fold_index, test_indices in enumerate(folds):
        held_out = set(test_indices)
        training = SequenceList([s for i, s in enumerate(sequences) if i not in held_out])

        fold_config = dataclasses.replace(
            config, resampling_fold=fold_index, resampling_count=k
        )
        engine = MetreInference(fold_config, predictor_factory=predictor_factory).setup(training)

        for index in test_indices:
            sequence = sequences[index]
            result = engine.infer(sequence)
            true_category = MetreCategory.from_event(sequence[-1]) if sequence else None
            report.items.append(
                SequenceEvaluation(
                    index=index,
                    fold=fold_index,
                    n_events=len(sequence),
                    true_category=true_category.key if true_category else None,
                    predicted_category=result.best_category,
                    mean_information_content=result.mean_information_content,
                )
            )

    report.items.sort(key=lambda item: item.index)
    return report
