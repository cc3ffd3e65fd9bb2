from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from .catalog_items import CatalogItem

if TYPE_CHECKING:
    from storefront.catalog.query_key import QueryKey


# ---------------------------------------------------------------------------
# Abstract catalogue source
# ---------------------------------------------------------------------------

class CatalogSource(ABC):
    """Every catalogue client (real HTTP or local) must implement this interface."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label used in logs."""

    @abstractmethod
    async def fetch(self, query_key: "QueryKey") -> List[CatalogItem]:
        """Perform exactly one request for ``query_key``.

        Returns the ordered collection or raises ``FetchError``. No caching
        and no retries happen here.
        """
