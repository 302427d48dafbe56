"""Corpus sources - materialized sequence lists and lazy on-disk loaders.

The engine accepts anything that can be resolved to a list of sequences and
that exposes a stable signature of its identity (used as a cache key).
"""

import hashlib
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence as SequenceType, Union

from ..core import Event, Sequence


class CorpusSource(ABC):
    """Something that resolves to an ordered list of sequences."""

    @abstractmethod
    def sequences(self) -> List[Sequence]:
        """Return the corpus sequences, in corpus order."""
        pass

    @property
    @abstractmethod
    def signature(self) -> str:
        """Stable content-derived identity of the corpus."""
        pass

    def __len__(self) -> int:
        return len(self.sequences())


class SequenceList(CorpusSource):
    """An already materialized corpus."""

    def __init__(self, sequences: List[Sequence], name: Optional[str] = None):
        self._sequences = list(sequences)
        self.name = name
        self._signature: Optional[str] = None

    def sequences(self) -> List[Sequence]:
        return self._sequences

    @property
    def signature(self) -> str:
        if self._signature is None:
            payload = json.dumps(
                [[event.to_dict() for event in seq] for seq in self._sequences],
                sort_keys=True,
                default=str,
            )
            self._signature = hashlib.md5(payload.encode()).hexdigest()[:16]
        return self._signature

    def subset(self, indices: SequenceType[int]) -> "SequenceList":
        """Corpus made of the sequences at ``indices``."""
        return SequenceList([self._sequences[i] for i in indices], name=self.name)


class JSONCorpusLoader(CorpusSource):
    """Lazily load a corpus from a JSON file.

    Accepted layouts:
    - ``{"datasets": {"<id>": [[event, ...], ...], ...}}``
    - ``[[event, ...], ...]`` (a single anonymous dataset)

    Each event is a flat object of attributes (see ``Event.from_dict``).
    Nothing is read until ``sequences()`` is first called.
    """

    def __init__(self, path: Union[str, Path], dataset_ids: Optional[List[str]] = None):
        self.path = Path(path)
        self.dataset_ids = [str(d) for d in dataset_ids] if dataset_ids else None
        self._sequences: Optional[List[Sequence]] = None
        self._signature: Optional[str] = None

    def sequences(self) -> List[Sequence]:
        if self._sequences is None:
            self._sequences = self._load()
        return self._sequences

    @property
    def signature(self) -> str:
        """File content hash and selected dataset ids, computed on first access."""
        if self._signature is None:
            if not self.path.exists():
                raise FileNotFoundError(f"Corpus file not found: {self.path}")
            content_hash = hashlib.md5(self.path.read_bytes()).hexdigest()
            ids = ",".join(sorted(self.dataset_ids)) if self.dataset_ids else "*"
            ids_hash = hashlib.md5(ids.encode()).hexdigest()
            self._signature = f"{content_hash}_{ids_hash}"
        return self._signature

    def _load(self) -> List[Sequence]:
        if not self.path.exists():
            raise FileNotFoundError(f"Corpus file not found: {self.path}")

        with open(self.path, "r") as f:
            data = json.load(f)

        if isinstance(data, list):
            if self.dataset_ids:
                raise ValueError(f"{self.path} has no datasets to select from")
            raw_sequences = data
        elif isinstance(data, dict) and isinstance(data.get("datasets"), dict):
            datasets: Dict[str, Any] = data["datasets"]
            ids = self.dataset_ids or list(datasets)
            missing = [d for d in ids if d not in datasets]
            if missing:
                raise ValueError(f"Unknown dataset ids in {self.path}: {missing}")
            raw_sequences = [seq for d in ids for seq in datasets[d]]
        else:
            raise ValueError(
                f"Unrecognized corpus layout in {self.path}: "
                "expected a list of sequences or a 'datasets' object"
            )

        return [[Event.from_dict(event) for event in seq] for seq in raw_sequences]


def resolve_corpus(corpus: Union[CorpusSource, List[Sequence]]) -> CorpusSource:
    """Accept a corpus source or a materialized list of sequences."""
    if isinstance(corpus, CorpusSource):
        return corpus
    return SequenceList(list(corpus))
