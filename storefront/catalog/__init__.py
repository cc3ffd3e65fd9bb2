"""
Catalogue core: TTL cache, request coalescer, filter/sort pipeline and the
``CatalogService`` facade that composes them.
"""

from .cache import CacheEntry, TTLCache
from .coalescer import PendingRequest, RequestCoalescer
from .criteria import Availability, FilterCriteria, PriceBracket, SortField, SortSpec
from .facade import CatalogService
from .pipeline import apply
from .query_key import QueryKey

__all__ = [
    "Availability", "CacheEntry", "CatalogService", "FilterCriteria",
    "PendingRequest", "PriceBracket", "QueryKey", "RequestCoalescer",
    "SortField", "SortSpec", "TTLCache", "apply",
]
