"""Base classes for sequence prediction."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence as SequenceType

from ..core import Interpretation, Sequence


class SequencePredictor(ABC):
    """Abstract base class for statistical sequence predictors.

    A predictor is trained once on a corpus (construct-only mode) and then
    queried for the probability of each event of a test sequence. Queries in
    predict-only mode leave the trained model untouched; the combined mode
    additionally learns from the test sequence as it goes, without modifying
    the long-term model.
    """

    @abstractmethod
    def train(
        self,
        sequences: List[Sequence],
        source_attrs: SequenceType[str],
        target_attrs: SequenceType[str],
        resampling_fold: Optional[int] = None,
        resampling_count: Optional[int] = None,
    ) -> "SequencePredictor":
        """
        Train on a list of sequences.

        Args:
            sequences: Training sequences
            source_attrs: Viewpoints used as predictive context
            target_attrs: Viewpoints whose values are predicted
            resampling_fold: Index of the held-out fold, if cross-validating
            resampling_count: Number of folds, if cross-validating

        Returns:
            self
        """
        pass

    @abstractmethod
    def predict(
        self,
        test_sequence: Sequence,
        interpretation: Optional[Interpretation] = None,
        predict_only: bool = True,
    ) -> Dict[str, List[float]]:
        """
        Score every event of a test sequence.

        Args:
            test_sequence: Sequence to score
            interpretation: Metrical interpretation to read the sequence under
            predict_only: If False, also learn from the sequence while scoring

        Returns:
            Mapping from each target attribute to one probability per event
        """
        pass

    @property
    @abstractmethod
    def is_trained(self) -> bool:
        pass

    @property
    def tag(self) -> str:
        """Identity and settings of the predictor, used in model cache keys."""
        return type(self).__name__
