# tests/test_claims.py
import asyncio
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from config import ClaimStoreKind, Settings
from repositories.split_claim_repository import CLAIM_TABLE
from services.order_splitting.claims import InMemoryClaimStore, SupabaseClaimStore, create_claim_store


class FakeQuery:
    def __init__(self, table, op, payload=None):
        self.table = table
        self.op = op
        self.payload = payload
        self.filters = []

    def eq(self, column, value):
        self.filters.append((column, lambda current: current == value))
        return self

    def lt(self, column, value):
        self.filters.append((column, lambda current: current < value))
        return self

    def execute(self):
        return self.table.run(self)


class FakeTable:
    def __init__(self):
        self.rows = {}

    def insert(self, record):
        return FakeQuery(self, "insert", record)

    def update(self, values):
        return FakeQuery(self, "update", values)

    def delete(self):
        return FakeQuery(self, "delete")

    def run(self, query):
        if query.op == "insert":
            key = query.payload["order_id"]
            if key in self.rows:
                raise APIError({"code": "23505", "message": "duplicate key value violates unique constraint"})
            self.rows[key] = dict(query.payload)
            return SimpleNamespace(data=[dict(query.payload)])
        matched = [
            key
            for key, row in self.rows.items()
            if all(check(row.get(column)) for column, check in query.filters)
        ]
        if query.op == "update":
            for key in matched:
                self.rows[key].update(query.payload)
            return SimpleNamespace(data=[dict(self.rows[key]) for key in matched])
        for key in matched:
            del self.rows[key]
        return SimpleNamespace(data=[])


class FakeSupabase:
    def __init__(self):
        self.tables = defaultdict(FakeTable)

    def table(self, name):
        return self.tables[name]


@pytest.mark.asyncio
async def test_memory_claim_is_exclusive_until_released(claims):
    assert await claims.acquire(1)
    assert not await claims.acquire(1)
    await claims.release(1)
    assert await claims.acquire(1)


@pytest.mark.asyncio
async def test_memory_completed_claim_blocks_forever(claims):
    assert await claims.acquire("1")
    await claims.complete(1)
    assert not await claims.acquire(1)
    assert claims.status_of(1) == "done"


@pytest.mark.asyncio
async def test_memory_stale_processing_claim_is_taken_over():
    now = [1000.0]
    store = InMemoryClaimStore(ttl_seconds=60, clock=lambda: now[0])
    assert await store.acquire(7)
    now[0] += 30
    assert not await store.acquire(7)
    now[0] += 31
    assert await store.acquire(7)
    assert len(store) == 1


@pytest.mark.asyncio
async def test_memory_finished_claims_are_forgotten_after_retention():
    now = [0.0]
    store = InMemoryClaimStore(ttl_seconds=60, retention_seconds=3600, clock=lambda: now[0])
    for order_id in range(200):
        assert await store.acquire(order_id)
        await store.complete(order_id)
    assert len(store) == 200

    now[0] += 3599
    assert not await store.acquire(0)
    assert len(store) == 200

    now[0] += 1
    assert await store.acquire("new-order")
    assert len(store) == 1
    assert store.status_of(0) is None


@pytest.mark.asyncio
async def test_memory_concurrent_acquire_has_single_winner(claims):
    results = await asyncio.gather(*(claims.acquire(99) for _ in range(10)))
    assert results.count(True) == 1


@pytest.mark.asyncio
async def test_supabase_claim_lifecycle():
    client = FakeSupabase()
    store = SupabaseClaimStore(client, ttl_seconds=900)

    assert await store.acquire(5551001)
    assert not await store.acquire(5551001)
    rows = client.tables[CLAIM_TABLE].rows
    assert rows["5551001"]["status"] == "processing"

    await store.complete(5551001)
    assert rows["5551001"]["status"] == "done"
    assert not await store.acquire(5551001)


@pytest.mark.asyncio
async def test_supabase_release_allows_reprocessing():
    client = FakeSupabase()
    store = SupabaseClaimStore(client, ttl_seconds=900)

    assert await store.acquire(1)
    await store.release(1)
    assert client.tables[CLAIM_TABLE].rows == {}
    assert await store.acquire(1)


@pytest.mark.asyncio
async def test_supabase_stale_claim_is_taken_over():
    client = FakeSupabase()
    old = (datetime.now(timezone.utc) - timedelta(hours=2)).isoformat()
    client.tables[CLAIM_TABLE].rows["3"] = {
        "order_id": "3",
        "status": "processing",
        "claimed_at": old,
        "updated_at": old,
    }
    store = SupabaseClaimStore(client, ttl_seconds=900)

    assert await store.acquire(3)
    assert client.tables[CLAIM_TABLE].rows["3"]["claimed_at"] > old


@pytest.mark.asyncio
async def test_supabase_unexpected_error_propagates():
    class BrokenTable(FakeTable):
        def run(self, query):
            raise APIError({"code": "42P01", "message": "relation does not exist"})

    client = FakeSupabase()
    client.tables[CLAIM_TABLE] = BrokenTable()
    store = SupabaseClaimStore(client, ttl_seconds=900)

    with pytest.raises(APIError):
        await store.acquire(1)


def test_memory_store_is_default(settings):
    assert isinstance(create_claim_store(settings), InMemoryClaimStore)


def test_supabase_store_requires_credentials():
    settings = Settings(shop="s", shopify_access_token="t", split_claim_store=ClaimStoreKind.SUPABASE)
    with pytest.raises(RuntimeError):
        create_claim_store(settings)
