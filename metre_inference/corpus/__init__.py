"""Corpus layer - sequence sources and memoisation of corpus computations."""

from .source import CorpusSource, SequenceList, JSONCorpusLoader, resolve_corpus
from .cache import CacheProvider, DiskCache, NullCache, cache_key, make_cache

__all__ = [
    "CorpusSource",
    "SequenceList",
    "JSONCorpusLoader",
    "resolve_corpus",
    "CacheProvider",
    "DiskCache",
    "NullCache",
    "cache_key",
    "make_cache",
]
