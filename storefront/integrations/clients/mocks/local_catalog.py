"""
Local Product Catalogue Client (Mock/Local).

Purpose:
- Development-time catalogue source when the storefront API is not running.
- Serves records from a JSON file (or an in-memory list) through the same
  payload normalisation as the HTTP client.

Only the ``category`` and ``limit`` parts of the query key are applied here,
like the products endpoint does; filtering and sorting stay in the pipeline.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem, first_present
from storefront.integrations.contracts.errors import FetchError, FetchErrorKind
from storefront.integrations.contracts.interfaces import CatalogSource
from storefront.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    normalize_collection_response,
)

logger = logging.getLogger(__name__)


def _record_category(record: Dict[str, Any]) -> List[str]:
    category = first_present(record, ("category", "categoryId"))
    if isinstance(category, dict):
        return [str(v) for v in (category.get("_id"), category.get("id"), category.get("slug")) if v]
    return [str(category)] if category else []


class LocalCatalogClient(CatalogSource):
    def __init__(
        self,
        path: Optional[Path] = None,
        records: Optional[Sequence[Dict[str, Any]]] = None,
        latency_seconds: float = 0.0,
    ) -> None:
        if path is None and records is None:
            raise ValueError("LocalCatalogClient needs a path or records")
        self.path = Path(path) if path is not None else None
        self._records = list(records) if records is not None else None
        self.latency_seconds = latency_seconds
        self.calls: List[QueryKey] = []

    @property
    def name(self) -> str:
        return "local"

    def _load_payload(self) -> Any:
        if self._records is not None:
            return self._records
        assert self.path is not None
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as exc:
            raise FetchError(FetchErrorKind.NOT_FOUND, f"Catalogue file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise FetchError(
                FetchErrorKind.INVALID_RESPONSE_SHAPE,
                f"Catalogue file is not valid JSON: {self.path}",
            ) from exc

    async def fetch(self, query_key: QueryKey) -> List[CatalogItem]:
        self.calls.append(query_key)
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        payload = self._load_payload()
        try:
            items = normalize_collection_response(payload)
        except IntegrationResponseError as exc:
            raise FetchError(FetchErrorKind.INVALID_RESPONSE_SHAPE, str(exc)) from exc

        if query_key.category is not None:
            wanted = query_key.category
            items = [
                item for item in items
                if wanted in _record_category(item.raw) or wanted == item.category_id
            ]
        if query_key.limit is not None:
            items = items[: query_key.limit]

        logger.debug("Local catalogue served %s items for %s", len(items), query_key)
        return items
