"""
Integrations layer.
This package contains all code used to communicate with catalogue sources:
- the storefront products API (real HTTP)
- local JSON product files (development and tests)

Key rule:
- The catalogue core MUST NOT call external APIs directly.
- It talks to a ``CatalogSource`` client; which one is chosen happens in ONE
  place (``build_catalog_source`` below).
"""

from __future__ import annotations

from pathlib import Path

from .contracts.catalog_items import FIELD_CHAINS, CatalogItem
from .contracts.errors import FetchError, FetchErrorKind
from .contracts.interfaces import CatalogSource


def build_catalog_source(cfg) -> CatalogSource:
    """Pick the real HTTP or local client from a ``CatalogConfig``."""
    if cfg.source.provider == "http":
        from .clients.real_http.catalog_http import HttpCatalogClient
        from storefront.utils.rate_limiter import AsyncRateLimiter

        throttle = AsyncRateLimiter(cfg.throttle.requests_per_minute) if cfg.throttle.enabled else None
        return HttpCatalogClient(
            base_url=cfg.source.base_url,
            products_path=cfg.source.products_path,
            api_key=cfg.api_key(),
            timeout_seconds=cfg.source.timeout_seconds,
            throttle=throttle,
        )

    from .clients.mocks.local_catalog import LocalCatalogClient

    path = Path(cfg.source.local_path)
    if not path.is_absolute():
        path = Path(__file__).parent.parent.parent / path
    return LocalCatalogClient(path=path)


__all__ = [
    "CatalogItem", "CatalogSource", "FIELD_CHAINS",
    "FetchError", "FetchErrorKind", "build_catalog_source",
]
