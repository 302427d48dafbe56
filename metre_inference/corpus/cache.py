"""Content-addressed caching of expensive corpus computations.

Category counts and trained category models are memoised on disk, keyed by a
hash of the corpus signature and the settings that produced them. The cache
is pure memoisation: a hit returns exactly what a recomputation would.
Population is check-then-write; concurrent writers to one key may race.
"""

import hashlib
import pickle
import warnings
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union


def cache_key(signature: str, *settings: Any) -> str:
    """Build a cache key from a corpus signature and settings.

    Returns:
        ``<12 hex chars of the signature hash>_<full md5 of the settings>``
    """
    content_hash = hashlib.md5(signature.encode()).hexdigest()[:12]
    settings_str = "|".join(repr(s) for s in settings)
    settings_hash = hashlib.md5(settings_str.encode()).hexdigest()
    return f"{content_hash}_{settings_hash}"


class CacheProvider(ABC):
    """Key-value store used for memoisation."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def read(self, key: str) -> Any:
        """Read a stored value; None if it cannot be read back."""
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        pass


class NullCache(CacheProvider):
    """Cache that stores nothing."""

    def exists(self, key: str) -> bool:
        return False

    def read(self, key: str) -> Any:
        raise KeyError(key)

    def write(self, key: str, value: Any) -> None:
        return None


class DiskCache(CacheProvider):
    """Pickle files in a cache directory, one per key."""

    def __init__(self, cache_dir: Union[str, Path], prefix: str = "counts"):
        self.cache_dir = Path(cache_dir)
        self.prefix = prefix
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_cache_path(self, key: str) -> Path:
        return self.cache_dir / f"{self.prefix}_{key}.pkl"

    def exists(self, key: str) -> bool:
        return self._get_cache_path(key).exists()

    def read(self, key: str) -> Any:
        cache_path = self._get_cache_path(key)
        if not cache_path.exists():
            raise KeyError(key)
        try:
            with open(cache_path, "rb") as f:
                return pickle.load(f)
        except (pickle.PickleError, EOFError, AttributeError, ValueError, KeyError, IOError):
            # Unreadable entry, drop it
            cache_path.unlink(missing_ok=True)
            return None

    def write(self, key: str, value: Any) -> None:
        cache_path = self._get_cache_path(key)
        try:
            with open(cache_path, "wb") as f:
                pickle.dump(value, f)
        except (pickle.PickleError, IOError) as e:
            warnings.warn(f"Failed to save cache: {e}")

    def clear(self) -> int:
        """Remove every entry with this cache's prefix.

        Returns:
            Number of cache entries removed
        """
        removed = 0
        for path in self.cache_dir.glob(f"{self.prefix}_*.pkl"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed


def make_cache(cache_dir: Optional[Union[str, Path]], prefix: str = "counts") -> CacheProvider:
    """DiskCache under ``cache_dir``, or a NullCache when it is None."""
    if cache_dir is None:
        return NullCache()
    return DiskCache(cache_dir, prefix=prefix)
