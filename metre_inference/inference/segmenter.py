"""Category segmentation - split a corpus by metrical category.

Provides:
- Contiguous per-category runs of events (training data for each model)
- Category mass counts under melody, harmony and grid textures
- Content-addressed memoisation of the counts through an injected cache
"""

import math
import warnings
from collections import defaultdict
from typing import Dict, List, Optional, Union

from ..core import Event, MetreCategory, MissingAttributeWarning, CacheCorruptionWarning, Sequence
from ..core.constants import DEFAULT_TIMEBASE, TEXTURE_MELODY, TEXTURES
from ..corpus import CacheProvider, CorpusSource, NullCache, cache_key, resolve_corpus

CorpusLike = Union[CorpusSource, List[Sequence]]


class CategorySegmenter:
    """Segment and count a corpus by metrical category."""

    def __init__(
        self,
        cache: Optional[CacheProvider] = None,
        timebase: int = DEFAULT_TIMEBASE,
    ):
        """
        Initialize CategorySegmenter.

        Args:
            cache: Cache provider for category counts (default: no caching)
            timebase: Ticks per semibreve
        """
        self.cache = cache if cache is not None else NullCache()
        self.timebase = timebase

    def segment(
        self, corpus: CorpusLike, category: MetreCategory, warn: bool = True
    ) -> List[Sequence]:
        """
        Extract the maximal runs of consecutive events in a category.

        Args:
            corpus: Corpus source or list of sequences
            category: Category to extract
            warn: Warn about events without a metre

        Returns:
            One sequence per run, in corpus order
        """
        segments: List[Sequence] = []

        for seq_index, sequence in enumerate(resolve_corpus(corpus).sequences()):
            run: Sequence = []
            for event_index, event in enumerate(sequence):
                event_category = MetreCategory.from_event(event)
                if event_category is None and warn:
                    _warn_missing(event, seq_index, event_index, ("barlength", "pulses"))
                if event_category == category:
                    run.append(event)
                elif run:
                    segments.append(run)
                    run = []
            if run:
                segments.append(run)

        return segments

    def categories(self, corpus: CorpusLike) -> List[MetreCategory]:
        """Distinct categories present in a corpus, sorted."""
        found = set()
        for sequence in resolve_corpus(corpus).sequences():
            for event in sequence:
                category = MetreCategory.from_event(event)
                if category is not None:
                    found.add(category)
        return sorted(found)

    def count(
        self,
        corpus: CorpusLike,
        texture: str,
        resolution: int,
        per_composition: bool = True,
    ) -> Dict[str, float]:
        """
        Count the mass of each category in a corpus.

        Args:
            corpus: Corpus source or list of sequences
            texture: "melody" weighs every event by its duration in grid
                steps; "harmony" and "grid" count the last event of each
                sequence only
            resolution: Grid steps per semibreve
            per_composition: For last-event textures, add 1 per sequence
                instead of the number of bars it spans

        Returns:
            Mapping from category key to mass (absent keys have zero mass)
        """
        if texture not in TEXTURES:
            raise ValueError(f"Unknown texture {texture!r}, expected one of {TEXTURES}")

        counts: Dict[str, float] = defaultdict(float)

        for seq_index, sequence in enumerate(resolve_corpus(corpus).sequences()):
            if texture == TEXTURE_MELODY:
                for event_index, event in enumerate(sequence):
                    category = MetreCategory.from_event(event)
                    if category is None or not event.has("duration"):
                        _warn_missing(event, seq_index, event_index, ("barlength", "pulses", "duration"))
                        continue
                    counts[category.key] += event["duration"] * resolution / self.timebase
            elif sequence:
                event = sequence[-1]
                category = MetreCategory.from_event(event)
                if category is None:
                    _warn_missing(event, seq_index, len(sequence) - 1, ("barlength", "pulses"))
                    continue
                if per_composition:
                    counts[category.key] += 1
                elif event.has("onset", "duration"):
                    counts[category.key] += event.offset / category.barlength
                else:
                    _warn_missing(event, seq_index, len(sequence) - 1, ("onset", "duration"))

        return dict(counts)

    def cached_count(
        self,
        corpus: CorpusLike,
        texture: str,
        resolution: int,
        per_composition: bool = True,
    ) -> Dict[str, float]:
        """``count`` memoised in the cache under the corpus signature."""
        source = resolve_corpus(corpus)
        key = cache_key(source.signature, texture, resolution, per_composition, self.timebase)

        if self.cache.exists(key):
            cached = self.cache.read(key)
            if _valid_counts(cached):
                return cached
            warnings.warn(
                f"Cached category counts {key} failed validation; recomputing",
                CacheCorruptionWarning,
            )

        counts = self.count(source, texture, resolution, per_composition)
        self.cache.write(key, counts)
        return counts


def _valid_counts(value) -> bool:
    """Shape check for a cached count mapping."""
    if not isinstance(value, dict):
        return False
    for key, mass in value.items():
        if not isinstance(key, str) or isinstance(mass, bool):
            return False
        if not isinstance(mass, (int, float)) or not math.isfinite(mass) or mass < 0:
            return False
    return True


def _warn_missing(event: Event, seq_index: int, event_index: int, required) -> None:
    missing = [name for name in required if not event.has(name)]
    warnings.warn(
        f"Skipping event {event_index} of sequence {seq_index}: missing {missing}",
        MissingAttributeWarning,
    )
