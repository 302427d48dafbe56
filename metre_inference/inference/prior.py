"""Prior construction over metrical interpretations.

Three modes:
- empirical: category frequencies counted in the training corpus
- flat: every interpretation equally likely
- custom: the empirical procedure applied to caller-supplied counts

In the empirical modes every phase of a category receives the full category
probability before the final renormalization, so categories with more phases
receive proportionally more total prior mass.
"""

from typing import Iterable, List, Mapping, Optional

from ..core import Distribution, MetreCategory, PriorError, enumerate_interpretations
from ..core.constants import DEFAULT_TIMEBASE, PRIOR_CUSTOM, PRIOR_EMPIRICAL, PRIOR_FLAT, PRIOR_MODES


class PriorBuilder:
    """Build a static prior Distribution over interpretation keys."""

    def __init__(self, resolution: int, timebase: int = DEFAULT_TIMEBASE):
        self.resolution = resolution
        self.timebase = timebase

    def empirical(
        self,
        counts: Mapping[str, float],
        categories: Optional[Iterable[MetreCategory]] = None,
    ) -> Distribution:
        """
        Prior from category masses.

        Args:
            counts: Category key -> mass
            categories: Categories to include (default: the keys of ``counts``);
                a listed category absent from ``counts`` gets zero mass

        Returns:
            Normalized static distribution over interpretation keys
        """
        if categories is None:
            categories = [MetreCategory.from_key(key) for key in counts]
        categories = list(categories)

        total = float(sum(counts.get(c.key, 0.0) for c in categories))
        if total <= 0:
            raise PriorError(f"Category counts have no mass: {dict(counts)}")

        pairs = []
        for category in categories:
            probability = counts.get(category.key, 0.0) / total
            for interpretation in enumerate_interpretations(category, self.resolution, self.timebase):
                pairs.append((interpretation.key, probability))

        return Distribution(pairs).normalize()

    def flat(self, categories: Iterable[MetreCategory]) -> Distribution:
        """Uniform prior over every interpretation of every category."""
        keys = [
            interpretation.key
            for category in categories
            for interpretation in enumerate_interpretations(category, self.resolution, self.timebase)
        ]
        if not keys:
            raise PriorError("No interpretations to build a flat prior over")
        return Distribution((key, 1.0 / len(keys)) for key in keys)

    def custom(
        self,
        counts: Mapping[str, float],
        categories: Optional[Iterable[MetreCategory]] = None,
    ) -> Distribution:
        """Empirical prior from caller-supplied counts (over their own keys if no categories)."""
        return self.empirical(counts, categories or None)

    def build(
        self,
        mode: str,
        categories: List[MetreCategory],
        counts: Optional[Mapping[str, float]] = None,
    ) -> Distribution:
        """Dispatch on a prior mode."""
        if mode == PRIOR_FLAT:
            return self.flat(categories)
        if mode == PRIOR_EMPIRICAL:
            if counts is None:
                raise PriorError("Empirical prior needs category counts")
            return self.empirical(counts, categories or None)
        if mode == PRIOR_CUSTOM:
            if counts is None:
                raise PriorError("Custom prior needs caller-supplied counts")
            return self.custom(counts, categories)
        raise ValueError(f"Unknown prior mode {mode!r}, expected one of {PRIOR_MODES}")
