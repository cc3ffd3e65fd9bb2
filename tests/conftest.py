"""Pytest fixtures for the catalogue layer tests."""

import asyncio
from typing import Any, Dict, List

import pytest

from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.catalog_items import CatalogItem
from storefront.integrations.contracts.errors import FetchError
from storefront.integrations.contracts.interfaces import CatalogSource


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSource(CatalogSource):
    """In-memory source that counts calls and can delay or fail on demand."""

    def __init__(self, records: List[Dict[str, Any]], delay: float = 0.0) -> None:
        self.records = records
        self.delay = delay
        self.calls: List[QueryKey] = []
        self.failures: List[FetchError] = []

    @property
    def name(self) -> str:
        return "recording"

    def fail_next(self, error: FetchError) -> None:
        self.failures.append(error)

    async def fetch(self, query_key: QueryKey) -> List[CatalogItem]:
        self.calls.append(query_key)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        return [CatalogItem.from_record(r) for r in self.records]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tea_records() -> List[Dict[str, Any]]:
    return [
        {"_id": f"t-{i}", "name": f"Tea {i}", "defaultPrice": 100 + i * 10, "category": "black-tea"}
        for i in range(1, 10)
    ]


@pytest.fixture
def source(tea_records) -> RecordingSource:
    return RecordingSource(tea_records, delay=0.01)


@pytest.fixture
def make_source():
    def _make(records: List[Dict[str, Any]], delay: float = 0.0) -> RecordingSource:
        return RecordingSource(records, delay=delay)

    return _make


@pytest.fixture
def build_items():
    """Factory turning raw records into CatalogItem objects."""

    def _build(*records: Dict[str, Any]) -> List[CatalogItem]:
        return [CatalogItem.from_record(r) for r in records]

    return _build


@pytest.fixture
def key() -> QueryKey:
    return QueryKey.for_category("black-tea", limit=9)
