"""
Filter/sort pipeline applied to a materialised catalogue collection.

Both stages are pure: the input sequence is never modified and identical
inputs always produce the same output list.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from storefront.catalog.criteria import Availability, FilterCriteria, SortField, SortSpec
from storefront.integrations.contracts.catalog_items import CatalogItem

logger = logging.getLogger(__name__)

Predicate = Callable[[CatalogItem], bool]


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().casefold()


def _matches_text(needle: str) -> Predicate:
    def predicate(item: CatalogItem) -> bool:
        return any(
            needle in _norm(field)
            for field in (item.name, item.description, item.short_description)
        )
    return predicate


def _matches_availability(wanted: Sequence[Availability]) -> Predicate:
    checks: Dict[Availability, Predicate] = {
        Availability.IN_STOCK: lambda item: item.in_stock,
        Availability.ON_SALE: lambda item: item.on_sale,
        Availability.BESTSELLER: lambda item: item.bestseller,
    }
    selected = [checks[a] for a in wanted]
    return lambda item: all(check(item) for check in selected)


def _matches_category(category: str) -> Predicate:
    wanted = _norm(category)
    return lambda item: wanted in (_norm(item.category_id), _norm(item.category_name))


def build_predicates(criteria: FilterCriteria) -> List[Predicate]:
    """One predicate per active criterion, in a fixed order."""
    predicates: List[Predicate] = []
    if criteria.search:
        predicates.append(_matches_text(_norm(criteria.search)))
    if criteria.price_range is not None:
        bracket = criteria.price_range
        predicates.append(lambda item: bracket.contains(item.price))
    if criteria.availability:
        predicates.append(_matches_availability(criteria.availability))
    if criteria.min_rating is not None:
        threshold = criteria.min_rating
        predicates.append(lambda item: item.rating >= threshold)
    if criteria.weight:
        weight = criteria.weight.strip()
        predicates.append(lambda item: item.weight == weight)
    if criteria.category:
        predicates.append(_matches_category(criteria.category))
    return predicates


def filter_items(items: Sequence[CatalogItem], criteria: Optional[FilterCriteria]) -> List[CatalogItem]:
    """Keep items satisfying every active predicate (logical AND)."""
    if criteria is None:
        return list(items)
    predicates = build_predicates(criteria)
    if not predicates:
        return list(items)
    return [item for item in items if all(p(item) for p in predicates)]


SORT_KEYS: Dict[SortField, Callable[[CatalogItem], object]] = {
    SortField.NAME: lambda item: _norm(item.name),
    SortField.PRICE: lambda item: item.price,
    SortField.RATING: lambda item: item.rating,
    SortField.RECENCY: lambda item: item.created_at,
    SortField.POPULARITY: lambda item: item.sales,
}


def sort_items(items: Sequence[CatalogItem], sort: Optional[SortSpec]) -> List[CatalogItem]:
    """Stable sort; equal keys keep their input order in both directions."""
    if sort is None:
        return list(items)
    # sorted() keeps equal elements in input order even with reverse=True.
    return sorted(items, key=SORT_KEYS[sort.field], reverse=sort.descending)


def apply(
    items: Sequence[CatalogItem],
    criteria: Optional[FilterCriteria] = None,
    sort: Optional[SortSpec] = None,
) -> List[CatalogItem]:
    filtered = filter_items(items, criteria)
    result = sort_items(filtered, sort)
    logger.debug(
        "Pipeline: %s in, %s out (filters=%s, sort=%s)",
        len(items),
        len(result),
        criteria.active_names() if criteria else (),
        sort,
    )
    return result
