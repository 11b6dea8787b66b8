from __future__ import annotations

import asyncio
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from garage_admin.services.query_cache import QueryCache, make_key


def test_make_key_is_order_independent_and_skips_blanks() -> None:
    first = make_key("jobs:list", {"status": "Completed", "customerId": 3, "startDate": None})
    second = make_key("jobs:list", {"customerId": 3, "startDate": "", "status": "Completed"})

    assert first == second == "jobs:list:customerId=3&status=Completed"


def test_fetch_reuses_value_until_invalidated() -> None:
    cache = QueryCache(ttl_seconds=60)
    calls = []

    async def loader():
        calls.append(1)
        return ["oil"]

    asyncio.run(cache.fetch("inventory:list", loader))
    asyncio.run(cache.fetch("inventory:list", loader))
    assert len(calls) == 1

    cache.invalidate_for("inventory.deduct")
    asyncio.run(cache.fetch("inventory:list", loader))
    assert len(calls) == 2


def test_mutation_only_clears_its_prefixes() -> None:
    cache = QueryCache(ttl_seconds=60)
    cache.set("inventory:list", [1])
    cache.set("customers:list", [2])
    cache.set("invoices:detail:1", {"id": 1})

    removed = cache.invalidate_for("invoice.update")

    assert removed == 2
    assert cache.get("customers:list") == [2]
    assert cache.get("inventory:list") is None


def test_zero_ttl_disables_caching() -> None:
    cache = QueryCache(ttl_seconds=0)
    cache.set("jobs:list", [1])

    assert len(cache) == 0


def test_unknown_mutation_is_rejected() -> None:
    with pytest.raises(KeyError):
        QueryCache().invalidate_for("invoice.frobnicate")


def test_load_in_flight_during_invalidation_is_not_stored() -> None:
    cache = QueryCache(ttl_seconds=60)

    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_loader():
            started.set()
            await release.wait()
            return {"quantity": 10}

        async def fresh_loader():
            return {"quantity": 7}

        pending = asyncio.create_task(cache.fetch("inventory:list", slow_loader))
        await started.wait()
        cache.invalidate_for("inventory.deduct")
        release.set()
        stale = await pending
        return stale, await cache.fetch("inventory:list", fresh_loader)

    stale, fresh = asyncio.run(scenario())

    assert stale == {"quantity": 10}
    assert fresh == {"quantity": 7}


def test_load_in_flight_during_full_clear_is_not_stored() -> None:
    cache = QueryCache(ttl_seconds=60)

    async def scenario():
        release = asyncio.Event()

        async def slow_loader():
            await release.wait()
            return ["old"]

        pending = asyncio.create_task(cache.fetch("suppliers:list", slow_loader))
        await asyncio.sleep(0)
        cache.clear()
        release.set()
        await pending

    asyncio.run(scenario())

    assert cache.get("suppliers:list") is None


def test_unrelated_invalidation_keeps_in_flight_load() -> None:
    cache = QueryCache(ttl_seconds=60)

    async def scenario():
        release = asyncio.Event()

        async def slow_loader():
            await release.wait()
            return ["Lanka Auto Parts"]

        pending = asyncio.create_task(cache.fetch("suppliers:list", slow_loader))
        await asyncio.sleep(0)
        cache.invalidate_for("expense.create")
        release.set()
        await pending

    asyncio.run(scenario())

    assert cache.get("suppliers:list") == ["Lanka Auto Parts"]
