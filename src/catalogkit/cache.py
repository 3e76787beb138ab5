"""Path-keyed cache of loaded catalogs.

The cache belongs to whatever resolves domains and locales to catalog
files; the catalog core never caches on its own. How long a catalog stays
cached is decided by an injectable :class:`EvictionPolicy`.

Usage:
    from catalogkit.cache import CatalogCache, LRUPolicy, MtimePolicy

    cache = CatalogCache(policy=LRUPolicy(max_size=32))
    catalog = cache.get("locale/de/LC_MESSAGES/messages.mo")

    # Reload catalogs whose file changed on disk
    cache = CatalogCache(policy=MtimePolicy())
"""

from __future__ import annotations

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from catalogkit.api import load_catalog
from catalogkit.catalog import Catalog

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cache entry with metadata.

    Attributes:
        catalog: The cached catalog
        created_at: Creation timestamp
        accessed_at: Last access timestamp
        mtime: Modification time of the file when it was loaded
    """

    catalog: Catalog
    created_at: float = field(default_factory=time.time)
    accessed_at: float = field(default_factory=time.time)
    mtime: float | None = None


# =============================================================================
# Eviction Policies
# =============================================================================


class EvictionPolicy(ABC):
    """Decides when cached catalogs become stale or must make room."""

    def is_stale(self, path: str, entry: CacheEntry, now: float) -> bool:
        """Check whether a cached entry must be reloaded.

        ``now`` comes from the same clock that stamped ``entry``.
        """
        return False

    @abstractmethod
    def select_victims(self, entries: "OrderedDict[str, CacheEntry]", now: float) -> list[str]:
        """Return the paths to evict after an insertion.

        ``entries`` is ordered from least to most recently used.
        """


class UnboundedPolicy(EvictionPolicy):
    """Never evicts; entries stay until invalidated."""

    def select_victims(self, entries: "OrderedDict[str, CacheEntry]", now: float) -> list[str]:
        return []


class LRUPolicy(EvictionPolicy):
    """Keeps at most ``max_size`` catalogs, dropping the least recently used."""

    def __init__(self, max_size: int = 100) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size

    def select_victims(self, entries: "OrderedDict[str, CacheEntry]", now: float) -> list[str]:
        excess = len(entries) - self.max_size
        if excess <= 0:
            return []
        return list(entries)[:excess]


class TTLPolicy(EvictionPolicy):
    """Reloads catalogs older than ``ttl`` seconds."""

    def __init__(self, ttl: float = 3600.0) -> None:
        self.ttl = ttl

    def is_stale(self, path: str, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl

    def select_victims(self, entries: "OrderedDict[str, CacheEntry]", now: float) -> list[str]:
        return [path for path, entry in entries.items() if now - entry.created_at > self.ttl]


class MtimePolicy(EvictionPolicy):
    """Reloads catalogs whose file modification time has changed."""

    def is_stale(self, path: str, entry: CacheEntry, now: float) -> bool:
        try:
            return os.stat(path).st_mtime != entry.mtime
        except OSError:
            return True

    def select_victims(self, entries: "OrderedDict[str, CacheEntry]", now: float) -> list[str]:
        return []


# =============================================================================
# Cache
# =============================================================================


class CatalogCache:
    """Thread-safe cache mapping catalog file paths to loaded catalogs.

    Load failures propagate to the caller and are never cached.
    """

    def __init__(
        self,
        loader: Callable[[str], Catalog] = load_catalog,
        policy: EvictionPolicy | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._loader = loader
        self._policy = policy or UnboundedPolicy()
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def policy(self) -> EvictionPolicy:
        return self._policy

    @staticmethod
    def _normalize(path: str | Path) -> str:
        return os.path.abspath(os.fspath(path))

    def get(self, path: str | Path) -> Catalog:
        """Return the catalog for ``path``, loading it on a miss.

        Raises:
            CatalogError: Whatever the loader raises for this path.
        """
        key = self._normalize(path)
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is not None and not self._policy.is_stale(key, entry, now):
                entry.accessed_at = now
                self._entries.move_to_end(key)
                return entry.catalog

            if entry is not None:
                logger.debug("Reloading stale catalog %s", key)
                del self._entries[key]

            try:
                mtime: float | None = os.stat(key).st_mtime
            except OSError:
                mtime = None
            catalog = self._loader(key)

            now = self._clock()
            self._entries[key] = CacheEntry(
                catalog=catalog, created_at=now, accessed_at=now, mtime=mtime
            )
            for victim in self._policy.select_victims(self._entries, now):
                if victim != key:
                    logger.debug("Evicting catalog %s", victim)
                    self._entries.pop(victim, None)
            return catalog

    def invalidate(self, path: str | Path) -> bool:
        """Drop the cached catalog for ``path``.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            return self._entries.pop(self._normalize(path), None) is not None

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return self._normalize(path) in self._entries
