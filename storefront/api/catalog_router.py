"""
Route definitions for the catalogue API.

Endpoints under /api/v1/catalog:
- GET /collections                          : filtered/sorted collection for a query
- GET /related/{category_id}/{item_id}      : same-category items minus the one being viewed
- GET /stats                                : cache and coalescer counters
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from storefront.catalog.criteria import FilterCriteria, SortSpec
from storefront.catalog.facade import CatalogService
from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])

_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Process-wide service built from config on first use; tests override this dependency."""
    global _service
    if _service is None:
        from storefront.integrations import build_catalog_source
        from storefront.catalog.cache import TTLCache
        from storefront.utils.config_loader import load_catalog_config

        cfg = load_catalog_config()
        _service = CatalogService(
            source=build_catalog_source(cfg),
            cache=TTLCache(ttl_seconds=cfg.cache.ttl_seconds, max_entries=cfg.cache.max_entries),
            related_limit=cfg.related.max_items,
            related_fetch_limit=cfg.related.fetch_limit,
        )
        logger.info("Catalogue service initialised with %s source", cfg.source.provider)
    return _service


class CollectionResponse(BaseModel):
    query_key: str
    filters: List[str] = Field(default_factory=list)
    sort: Optional[str] = None
    count: int
    items: List[Dict[str, Any]]


def _serialize(items: List[CatalogItem]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json", exclude={"raw"}) for item in items]


def _parse_sort(sort: Optional[str]) -> Optional[SortSpec]:
    try:
        return SortSpec.parse(sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _criteria(
    search: Optional[str],
    price_range: Optional[str],
    availability: Optional[str],
    rating: Optional[str],
    weight: Optional[str],
) -> FilterCriteria:
    return FilterCriteria.from_params(
        {
            "search": search,
            "priceRange": price_range,
            "availability": availability,
            "rating": rating,
            "weight": weight,
        }
    )


@router.get("/collections", response_model=CollectionResponse)
async def get_collection(
    category: Optional[str] = Query(default=None, description="Category identifier"),
    search: Optional[str] = Query(default=None, description="Text search (name/description)"),
    limit: Optional[int] = Query(default=None, ge=1, le=200, description="Result-count limit sent upstream"),
    price_range: Optional[str] = Query(default=None, alias="priceRange", description="e.g. 100-200 or 500+"),
    availability: Optional[str] = Query(default=None, description="in-stock, on-sale or bestseller"),
    rating: Optional[str] = Query(default=None, description="4+, 4.5+ or 5"),
    weight: Optional[str] = Query(default=None, description="Package size, e.g. 250"),
    sort: Optional[str] = Query(default=None, description="name-asc, price-desc, newest, popular, ..."),
    exclude: Optional[str] = Query(default=None, description="Item id to leave out (caps result at 8)"),
    service: CatalogService = Depends(get_catalog_service),
) -> CollectionResponse:
    sort_spec = _parse_sort(sort)
    criteria = _criteria(search, price_range, availability, rating, weight)
    # Search is part of the upstream request so different searches never share an entry.
    query_key = QueryKey.from_params(category=category, search=search, limit=limit)

    items = await service.get_collection(query_key, criteria, sort_spec, exclude_id=exclude)
    return CollectionResponse(
        query_key=str(query_key),
        filters=list(criteria.active_names()),
        sort=str(sort_spec) if sort_spec else None,
        count=len(items),
        items=_serialize(items),
    )


@router.get("/related/{category_id}/{item_id}", response_model=CollectionResponse)
async def get_related(
    category_id: str,
    item_id: str,
    sort: Optional[str] = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> CollectionResponse:
    sort_spec = _parse_sort(sort)
    items = await service.get_related(category_id, item_id, sort=sort_spec)
    query_key = QueryKey.for_category(category_id, limit=service.related_fetch_limit)
    return CollectionResponse(
        query_key=str(query_key),
        sort=str(sort_spec) if sort_spec else None,
        count=len(items),
        items=_serialize(items),
    )


@router.get("/stats")
def get_stats(service: CatalogService = Depends(get_catalog_service)) -> Dict[str, Any]:
    return service.stats()
