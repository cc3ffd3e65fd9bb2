"""
In-flight request deduplication.

At most one fetch runs per ``QueryKey``. The first caller schedules the fetch
as a task and registers it; everyone arriving while it is pending awaits the
same task. There is no ``await`` between looking up the pending index and
registering a new entry, so interleaved coroutines cannot both start a fetch.

The task removes its own entry before its outcome is delivered, which means a
caller arriving right after settlement starts fresh work instead of rejoining
a finished fetch. Waiters listen through ``asyncio.shield``: a cancelled
waiter stops listening, the shared fetch keeps running for the others.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem

logger = logging.getLogger(__name__)

FetchFn = Callable[[QueryKey], Awaitable[List[CatalogItem]]]


@dataclass
class PendingRequest:
    query_key: QueryKey
    task: Optional["asyncio.Task[List[CatalogItem]]"] = None
    subscriber_count: int = 0


class RequestCoalescer:
    def __init__(self) -> None:
        self._pending: Dict[QueryKey, PendingRequest] = {}
        self._started = 0
        self._joined = 0

    async def coalesce(self, query_key: QueryKey, fetch_fn: FetchFn) -> List[CatalogItem]:
        entry = self._pending.get(query_key)
        if entry is None:
            entry = PendingRequest(query_key=query_key)
            entry.task = asyncio.get_running_loop().create_task(self._run(entry, fetch_fn))
            entry.task.add_done_callback(lambda task, e=entry: self._on_done(e, task))
            self._pending[query_key] = entry
            self._started += 1
            logger.debug("Started fetch for %s", query_key)
        else:
            self._joined += 1
            logger.info("Request %s already pending, reusing", query_key)

        entry.subscriber_count += 1
        try:
            return await asyncio.shield(entry.task)
        finally:
            entry.subscriber_count -= 1

    async def _run(self, entry: PendingRequest, fetch_fn: FetchFn) -> List[CatalogItem]:
        try:
            return await fetch_fn(entry.query_key)
        finally:
            self._release(entry)

    def _release(self, entry: PendingRequest) -> None:
        if self._pending.get(entry.query_key) is entry:
            del self._pending[entry.query_key]

    def _on_done(self, entry: PendingRequest, task: "asyncio.Task[List[CatalogItem]]") -> None:
        # Covers a task cancelled before its coroutine ever ran.
        self._release(entry)
        if task.cancelled():
            logger.warning("Fetch for %s was cancelled", entry.query_key)
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(
                "Fetch for %s failed with %s subscriber(s) waiting: %s",
                entry.query_key,
                entry.subscriber_count,
                exc,
            )

    def is_pending(self, query_key: QueryKey) -> bool:
        return query_key in self._pending

    def get_pending(self, query_key: QueryKey) -> Optional[PendingRequest]:
        return self._pending.get(query_key)

    def pending_keys(self) -> List[QueryKey]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def stats(self) -> Dict[str, int]:
        return {"pending": len(self._pending), "started": self._started, "joined": self._joined}
