"""Markov prediction - interpolated n-gram model over viewpoints.

Implements a variable-order Markov model with:
- Contexts built from source viewpoints of the preceding events
- Witten-Bell interpolation from the longest seen context down to order 0
- A uniform base distribution over the observed alphabet plus an escape
  symbol, so unseen values keep a small non-zero probability
- Predict-only and combined (short-term learning) query modes
"""

import copy
from collections import Counter, defaultdict
from typing import Any, Dict, List, Optional, Sequence as SequenceType, Set, Tuple

from ..core import InferenceError, Interpretation, Sequence
from ..core.constants import DEFAULT_ORDER, DEFAULT_RESOLUTION, DEFAULT_TIMEBASE
from .base import SequencePredictor
from .viewpoints import MetricalFrame, derive, derive_tuple

Context = Tuple[Tuple[Any, ...], ...]


class _CountTable:
    """Context -> value counts for one target viewpoint."""

    def __init__(self):
        self.counts: Dict[Context, Counter] = defaultdict(Counter)
        self.alphabet: Set[Any] = set()

    def observe(self, contexts: List[Context], value: Any) -> None:
        self.alphabet.add(value)
        for context in contexts:
            self.counts[context][value] += 1

    def probability(self, contexts: List[Context], value: Any) -> float:
        # Base: uniform over the alphabet plus one escape symbol
        p = 1.0 / (len(self.alphabet) + 1)
        for context in contexts:
            counter = self.counts.get(context)
            if not counter:
                continue
            total = sum(counter.values())
            types = len(counter)
            p = (counter.get(value, 0) + types * p) / (total + types)
        return p


class MarkovPredictor(SequencePredictor):
    """Interpolated n-gram predictor over event viewpoints."""

    def __init__(
        self,
        order: int = DEFAULT_ORDER,
        resolution: int = DEFAULT_RESOLUTION,
        timebase: int = DEFAULT_TIMEBASE,
    ):
        """
        Initialize MarkovPredictor.

        Args:
            order: Number of preceding events in the longest context
            resolution: Phase steps per semibreve, to place interpretation phases
            timebase: Ticks per semibreve
        """
        if order < 0:
            raise ValueError(f"Order must be non-negative, got {order}")
        self.order = order
        self.resolution = resolution
        self.timebase = timebase
        self.source_attrs: Tuple[str, ...] = ()
        self.target_attrs: Tuple[str, ...] = ()
        self.resampling_fold: Optional[int] = None
        self.resampling_count: Optional[int] = None
        self._tables: Optional[Dict[str, _CountTable]] = None
        self.n_training_events = 0

    @property
    def is_trained(self) -> bool:
        return self._tables is not None

    @property
    def tag(self) -> str:
        return f"markov-order{self.order}-r{self.resolution}-t{self.timebase}"

    def train(
        self,
        sequences: List[Sequence],
        source_attrs: SequenceType[str],
        target_attrs: SequenceType[str],
        resampling_fold: Optional[int] = None,
        resampling_count: Optional[int] = None,
    ) -> "MarkovPredictor":
        if not target_attrs:
            raise ValueError("At least one target attribute is required")
        self.source_attrs = tuple(source_attrs)
        self.target_attrs = tuple(target_attrs)
        self.resampling_fold = resampling_fold
        self.resampling_count = resampling_count
        self._tables = {attr: _CountTable() for attr in self.target_attrs}
        self.n_training_events = 0

        for sequence in sequences:
            frames = [MetricalFrame.for_event(event) for event in sequence]
            self._scan(sequence, frames, self._tables, learn=True, score=False)
            self.n_training_events += len(sequence)

        return self

    def predict(
        self,
        test_sequence: Sequence,
        interpretation: Optional[Interpretation] = None,
        predict_only: bool = True,
    ) -> Dict[str, List[float]]:
        if self._tables is None:
            raise InferenceError("Predictor queried before training")

        frames = [
            MetricalFrame.for_event(event, interpretation, self.resolution, self.timebase)
            for event in test_sequence
        ]
        # Combined mode learns into a short-term copy, never the trained model
        tables = self._tables if predict_only else copy.deepcopy(self._tables)
        return self._scan(test_sequence, frames, tables, learn=not predict_only, score=True)

    def _scan(
        self,
        sequence: Sequence,
        frames: List[Optional[MetricalFrame]],
        tables: Dict[str, _CountTable],
        learn: bool,
        score: bool,
    ) -> Dict[str, List[float]]:
        """Walk a sequence, optionally scoring and/or learning each event."""
        probabilities: Dict[str, List[float]] = {attr: [] for attr in self.target_attrs}
        history: List[Optional[Tuple[Any, ...]]] = []

        for index in range(len(sequence)):
            frame = frames[index]
            contexts = self._contexts(history)

            for attr in self.target_attrs:
                value = derive(attr, sequence, index, frame)
                if score:
                    # Undefined targets carry no information
                    p = 1.0 if value is None else tables[attr].probability(contexts, value)
                    probabilities[attr].append(p)
                if learn and value is not None:
                    tables[attr].observe(contexts, value)

            history.append(derive_tuple(self.source_attrs, sequence, index, frame))

        return probabilities

    def _contexts(self, history: List[Optional[Tuple[Any, ...]]]) -> List[Context]:
        """Contexts from order 0 up to the longest defined one."""
        contexts: List[Context] = [()]
        for k in range(1, min(self.order, len(history)) + 1):
            recent = history[-k:]
            if any(item is None for item in recent):
                break
            contexts.append(tuple(recent))
        return contexts
