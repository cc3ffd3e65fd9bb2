import asyncio

import pytest

from storefront.catalog.coalescer import RequestCoalescer
from storefront.catalog.query_key import QueryKey
from storefront.integrations.contracts.errors import FetchError, FetchErrorKind


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch(source, key):
    coalescer = RequestCoalescer()

    results = await asyncio.gather(*(coalescer.coalesce(key, source.fetch) for _ in range(10)))

    assert len(source.calls) == 1
    assert all(r == results[0] for r in results)
    assert len(results[0]) == 9
    assert coalescer.stats() == {"pending": 0, "started": 1, "joined": 9}


@pytest.mark.asyncio
async def test_second_call_launched_10ms_later_joins_pending_fetch(make_source, tea_records, key):
    slow = make_source(tea_records, delay=0.05)
    coalescer = RequestCoalescer()

    first = asyncio.ensure_future(coalescer.coalesce(key, slow.fetch))
    await asyncio.sleep(0.01)
    assert coalescer.is_pending(key)
    second = asyncio.ensure_future(coalescer.coalesce(key, slow.fetch))

    assert await first == await second
    assert len(slow.calls) == 1


@pytest.mark.asyncio
async def test_distinct_keys_fetch_independently(source):
    coalescer = RequestCoalescer()
    a, b = QueryKey.for_category("a"), QueryKey.for_category("b")

    await asyncio.gather(coalescer.coalesce(a, source.fetch), coalescer.coalesce(b, source.fetch))

    assert sorted(k.category for k in source.calls) == ["a", "b"]


@pytest.mark.asyncio
async def test_failure_reaches_every_waiter_and_clears_key(source, key):
    coalescer = RequestCoalescer()
    boom = FetchError(FetchErrorKind.SERVER_ERROR, "Server error", status_code=500)
    source.fail_next(boom)

    results = await asyncio.gather(
        *(coalescer.coalesce(key, source.fetch) for _ in range(3)),
        return_exceptions=True,
    )

    assert all(r is boom for r in results)
    assert len(source.calls) == 1
    assert not coalescer.is_pending(key)

    # Retry is immediate and starts a new fetch.
    items = await coalescer.coalesce(key, source.fetch)
    assert len(items) == 9
    assert len(source.calls) == 2


@pytest.mark.asyncio
async def test_key_is_released_before_result_is_delivered(source, key):
    coalescer = RequestCoalescer()
    observed = []

    async def fetch(k):
        items = await source.fetch(k)
        observed.append(coalescer.is_pending(k))
        return items

    await coalescer.coalesce(key, fetch)
    assert observed == [True]
    assert not coalescer.is_pending(key)

    await coalescer.coalesce(key, fetch)
    assert len(source.calls) == 2


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch(make_source, tea_records, key):
    slow = make_source(tea_records, delay=0.05)
    coalescer = RequestCoalescer()

    leaving = asyncio.ensure_future(coalescer.coalesce(key, slow.fetch))
    staying = asyncio.ensure_future(coalescer.coalesce(key, slow.fetch))
    await asyncio.sleep(0.01)
    assert coalescer.get_pending(key).subscriber_count == 2

    leaving.cancel()
    with pytest.raises(asyncio.CancelledError):
        await leaving
    assert coalescer.get_pending(key).subscriber_count == 1

    items = await staying
    assert len(items) == 9
    assert len(slow.calls) == 1


@pytest.mark.asyncio
async def test_fetch_survives_when_every_waiter_leaves(make_source, tea_records, key):
    slow = make_source(tea_records, delay=0.02)
    coalescer = RequestCoalescer()
    finished = []

    async def fetch(k):
        items = await slow.fetch(k)
        finished.append(k)
        return items

    waiter = asyncio.ensure_future(coalescer.coalesce(key, fetch))
    await asyncio.sleep(0)
    pending = coalescer.get_pending(key)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    await pending.task
    assert finished == [key]
    assert len(coalescer) == 0
