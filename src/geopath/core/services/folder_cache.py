from __future__ import annotations

"""
Folder Index Cache Service.

Thread-safe, explicitly owned cache of grouped folder indexes per
collection. Callers pass an instance to whatever needs it instead of
relying on module-level state. Entries expire after a TTL and the least
recently used entry is evicted once the size limit is reached.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from geopath.core.hierarchy.grouping import FolderIndex, group_by_folder

logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    index: FolderIndex
    created_at: float


class FolderIndexCache:
    """
    Caches FolderIndex objects keyed by collection id.

    Args:
        ttl_seconds: Lifetime of an entry; 0 disables expiry.
        max_entries: Maximum number of collections kept; 0 disables caching.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
            self,
            ttl_seconds: float = 300.0,
            max_entries: int = 16,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._max_entries = max(0, int(max_entries))
        self._clock = clock
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, collection_id: str) -> Optional[FolderIndex]:
        """
        Return the cached index for a collection, or None on miss/expiry.
        """
        with self._lock:
            entry = self._entries.get(collection_id)
            if entry is None:
                return None
            if self._is_expired(entry):
                del self._entries[collection_id]
                logger.debug(f"FolderIndexCache: '{collection_id}' expired.")
                return None
            self._entries.move_to_end(collection_id)
            return entry.index

    def put(self, collection_id: str, index: FolderIndex) -> None:
        """Store an index, evicting the least recently used entry when full."""
        if self._max_entries == 0:
            return
        with self._lock:
            self._entries[collection_id] = _CacheEntry(index, self._clock())
            self._entries.move_to_end(collection_id)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"FolderIndexCache: evicted '{evicted}'.")

    def get_or_build(
            self,
            collection_id: str,
            loader: Callable[[], Iterable[Any]],
            *,
            refresh: bool = False,
    ) -> FolderIndex:
        """
        Return the cached index or group the records produced by `loader`.

        Args:
            collection_id: Cache key (e.g. a face collection id).
            loader: Zero-argument callable returning records to group.
            refresh: Ignore any cached entry and rebuild.

        Returns:
            FolderIndex: The cached or freshly built index.
        """
        if not refresh:
            cached = self.get(collection_id)
            if cached is not None:
                return cached

        index = group_by_folder(loader())
        self.put(collection_id, index)
        logger.info(f"FolderIndexCache: index for '{collection_id}' rebuilt ({len(index)} folders).")
        return index

    def invalidate(self, collection_id: str) -> bool:
        """Drop one collection; returns True if an entry was removed."""
        with self._lock:
            return self._entries.pop(collection_id, None) is not None

    def clear(self) -> None:
        """Drop every cached index."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, entry: _CacheEntry) -> bool:
        return self._ttl > 0 and (self._clock() - entry.created_at) >= self._ttl
