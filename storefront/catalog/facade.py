"""
Catalogue service: the single entry point UI collaborators call.

cache check -> coalesced fetch (cache write on success) -> current-item
exclusion and cap -> filter/sort pipeline.
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional, Sequence

from storefront.catalog import pipeline
from storefront.catalog.cache import TTLCache
from storefront.catalog.coalescer import RequestCoalescer
from storefront.catalog.criteria import FilterCriteria, SortSpec
from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem
from storefront.integrations.contracts.errors import FetchError
from storefront.integrations.contracts.interfaces import CatalogSource

logger = logging.getLogger(__name__)

RELATED_MAX_ITEMS = 8
RELATED_FETCH_LIMIT = 9


def exclude_current(items: Sequence[CatalogItem], current_id: Any, cap: int) -> List[CatalogItem]:
    """Drop the item being viewed from its own collection and cap the rest."""
    current = str(current_id)
    return [item for item in items if item.id != current][:cap]


class CatalogService:
    def __init__(
        self,
        source: CatalogSource,
        cache: Optional[TTLCache] = None,
        coalescer: Optional[RequestCoalescer] = None,
        related_limit: int = RELATED_MAX_ITEMS,
        related_fetch_limit: int = RELATED_FETCH_LIMIT,
    ) -> None:
        self.source = source
        self.cache = cache if cache is not None else TTLCache()
        self.coalescer = coalescer if coalescer is not None else RequestCoalescer()
        self.related_limit = related_limit
        self.related_fetch_limit = related_fetch_limit

    async def _fetch_and_store(self, query_key: QueryKey) -> List[CatalogItem]:
        start_ts = time.monotonic()
        try:
            items = await self.source.fetch(query_key)
        except FetchError as e:
            logger.warning("Fetch from %s failed for %s: %s (%s)", self.source.name, query_key, e.message, e.kind.value)
            raise
        # Stored before the pending entry clears, so the next caller hits the cache.
        self.cache.put(query_key, items)
        logger.info(
            "Fetched %s items from %s for %s in %.1f ms",
            len(items),
            self.source.name,
            query_key,
            (time.monotonic() - start_ts) * 1000,
        )
        return items

    async def load(self, query_key: QueryKey) -> List[CatalogItem]:
        """Raw collection for ``query_key`` from the cache or a coalesced fetch."""
        entry = self.cache.get(query_key)
        if entry is not None:
            logger.info("Using cached collection for %s", query_key)
            return list(entry.items)
        return list(await self.coalescer.coalesce(query_key, self._fetch_and_store))

    async def get_collection(
        self,
        query_key: QueryKey,
        criteria: Optional[FilterCriteria] = None,
        sort: Optional[SortSpec] = None,
        exclude_id: Any = None,
    ) -> List[CatalogItem]:
        items = await self.load(query_key)
        if exclude_id is not None and str(exclude_id).strip():
            items = exclude_current(items, exclude_id, self.related_limit)
        return pipeline.apply(items, criteria, sort)

    async def get_related(
        self,
        category_id: Any,
        current_item_id: Any,
        criteria: Optional[FilterCriteria] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[CatalogItem]:
        """Items from the same category, minus the one being viewed."""
        query_key = QueryKey.for_category(category_id, limit=self.related_fetch_limit)
        return await self.get_collection(query_key, criteria, sort, exclude_id=current_item_id)

    def invalidate(self, query_key: QueryKey) -> bool:
        return self.cache.invalidate(query_key)

    def stats(self) -> dict:
        return {"cache": self.cache.stats(), "coalescer": self.coalescer.stats()}
