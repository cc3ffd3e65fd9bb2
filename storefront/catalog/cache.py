"""
In-memory TTL cache for fetched catalogue collections.

Process-lifetime only. A stale entry is reported as absent so callers always
re-fetch instead of serving old data; an optional ``max_entries`` bound adds
least-recently-used eviction on top of the TTL.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry:
    query_key: QueryKey
    items: Tuple[CatalogItem, ...]
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[QueryKey, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._expirations = 0
        self._evictions = 0

    def get(self, query_key: QueryKey) -> Optional[CacheEntry]:
        entry = self._entries.get(query_key)
        if entry is None:
            self._misses += 1
            return None
        if entry.age(self._clock()) >= self.ttl_seconds:
            # Stale entries are dropped so they can never be served again.
            del self._entries[query_key]
            self._expirations += 1
            self._misses += 1
            logger.debug("Cache entry expired for %s", query_key)
            return None
        self._entries.move_to_end(query_key)
        self._hits += 1
        return entry

    def put(self, query_key: QueryKey, items: Sequence[CatalogItem]) -> CacheEntry:
        entry = CacheEntry(query_key=query_key, items=tuple(items), fetched_at=self._clock())
        self._entries[query_key] = entry
        self._entries.move_to_end(query_key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted least recently used entry %s", evicted)
        return entry

    def invalidate(self, query_key: QueryKey) -> bool:
        return self._entries.pop(query_key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query_key: object) -> bool:
        entry = self._entries.get(query_key)  # type: ignore[arg-type]
        return entry is not None and entry.age(self._clock()) < self.ttl_seconds

    def stats(self) -> Dict[str, float]:
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "expirations": self._expirations,
            "evictions": self._evictions,
            "ttl_seconds": self.ttl_seconds,
        }
