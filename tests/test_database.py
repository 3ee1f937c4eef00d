"""Tests for the paste store and its in-memory backend."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError, TimeoutError

from shortpaste.database import (
    EXPIRY_INDEX_KEY,
    InMemoryStore,
    PasteStore,
    open_client,
)
from shortpaste.exceptions import PasteConflict, StoreUnavailable


class TestCreate:
    """Paste creation and uniqueness."""

    def test_create_then_lookup(self, store):
        created = store.create("abc123XY", "print(1)", "python")

        fetched = store.get_by_identifier("abc123XY")
        assert fetched == created
        assert fetched.content == "print(1)"
        assert fetched.language == "python"
        assert fetched.expires_at is None

    def test_conflict_keeps_first_record(self, store):
        store.create("dupe0001", "first", "plaintext")

        with pytest.raises(PasteConflict) as exc_info:
            store.create("dupe0001", "second", "python")

        assert exc_info.value.identifier == "dupe0001"
        paste = store.get_by_identifier("dupe0001")
        assert paste.content == "first"
        assert paste.language == "plaintext"

    def test_conflict_with_stale_record(self, store, clock):
        store.create("stale001", "old", "plaintext", clock.now + timedelta(seconds=10))
        clock.advance(seconds=20)

        assert store.get_by_identifier("stale001") is None
        with pytest.raises(PasteConflict):
            store.create("stale001", "new", "plaintext")
        assert store.exists("stale001")

    def test_never_expiring_paste_not_indexed(self, store, backend):
        store.create("forever1", "x", "plaintext")
        assert backend.zcard(EXPIRY_INDEX_KEY) == 0

    def test_expiring_paste_indexed(self, store, backend, clock):
        store.create("brief001", "x", "plaintext", clock.now + timedelta(hours=1))
        assert backend.zcard(EXPIRY_INDEX_KEY) == 1

    def test_naive_expiry_treated_as_utc(self, store, clock):
        naive = (clock.now + timedelta(hours=1)).replace(tzinfo=None)
        paste = store.create("naive001", "x", "plaintext", naive)
        assert paste.expires_at == clock.now + timedelta(hours=1)

    def test_concurrent_creates_same_identifier(self, store):
        def attempt(i):
            try:
                store.create("race0001", f"content {i}", "plaintext")
                return True
            except PasteConflict:
                return False

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(16)))

        assert results.count(True) == 1
        assert store.get_by_identifier("race0001") is not None

    def test_empty_content_is_stored(self, store):
        store.create("empty001", "", "")
        assert store.get_by_identifier("empty001").content == ""


class TestLiveness:
    """Lookups only ever return live pastes."""

    def test_unknown_identifier(self, store):
        assert store.get_by_identifier("missing1") is None

    def test_expiry_boundary(self, store, clock):
        start = clock.now
        store.create("bound001", "x", "plaintext", start + timedelta(seconds=1000))

        assert store.get_by_identifier("bound001", now=start + timedelta(seconds=999)) is not None
        assert store.get_by_identifier("bound001", now=start + timedelta(seconds=1000)) is None
        assert store.get_by_identifier("bound001", now=start + timedelta(seconds=1001)) is None

    def test_uses_store_clock_by_default(self, store, clock):
        store.create("clock001", "x", "plaintext", clock.now + timedelta(minutes=5))
        assert store.get_by_identifier("clock001") is not None

        clock.advance(minutes=5)
        assert store.get_by_identifier("clock001") is None

    def test_naive_now_read_as_utc(self, store, clock):
        store.create("naive002", "x", "plaintext", clock.now + timedelta(hours=1))
        naive_now = clock.now.replace(tzinfo=None)

        assert store.get_by_identifier("naive002", now=naive_now) is not None
        assert store.get_by_identifier("naive002", now=naive_now + timedelta(hours=1)) is None

    def test_stale_record_still_physically_present(self, store, clock):
        store.create("ghost001", "x", "plaintext", clock.now + timedelta(seconds=1))
        clock.advance(seconds=2)

        assert store.get_by_identifier("ghost001") is None
        assert store.exists("ghost001")


class TestExpiryIndex:
    """list_expired and delete_if_expired."""

    def test_list_expired_includes_boundary(self, store, clock):
        now = clock.now
        store.create("past0001", "x", "plaintext", now - timedelta(hours=1))
        store.create("edge0001", "x", "plaintext", now)
        store.create("futur001", "x", "plaintext", now + timedelta(seconds=1))
        store.create("never001", "x", "plaintext")

        assert store.list_expired(now) == ["past0001", "edge0001"]

    def test_list_expired_empty(self, store, clock):
        assert store.list_expired(clock.now) == []

    def test_delete_if_expired_is_idempotent(self, store, clock):
        store.create("gone0001", "x", "plaintext", clock.now - timedelta(minutes=1))

        assert store.delete_if_expired("gone0001", clock.now) is True
        assert store.delete_if_expired("gone0001", clock.now) is False
        assert not store.exists("gone0001")
        assert store.list_expired(clock.now) == []

    def test_delete_if_expired_spares_live_paste(self, store, clock):
        store.create("live0001", "x", "plaintext", clock.now + timedelta(hours=1))

        assert store.delete_if_expired("live0001", clock.now) is False
        assert store.get_by_identifier("live0001") is not None

    def test_delete_if_expired_spares_never_expiring_paste(self, store, clock):
        store.create("never002", "x", "plaintext")

        assert store.delete_if_expired("never002", clock.now + timedelta(days=3650)) is False
        assert store.exists("never002")

    def test_naive_as_of_read_as_utc(self, store, clock):
        store.create("naive003", "x", "plaintext", clock.now)
        naive_as_of = clock.now.replace(tzinfo=None)

        assert store.list_expired(naive_as_of - timedelta(seconds=1)) == []
        assert store.delete_if_expired("naive003", naive_as_of - timedelta(seconds=1)) is False
        assert store.list_expired(naive_as_of) == ["naive003"]
        assert store.delete_if_expired("naive003", naive_as_of) is True

    def test_delete_unknown_identifier(self, store, clock):
        assert store.delete_if_expired("nothing1", clock.now) is False

    def test_dangling_index_entry_is_dropped(self, store, backend, clock):
        backend.zadd(EXPIRY_INDEX_KEY, {"orphan01": (clock.now - timedelta(hours=1)).timestamp()})

        assert store.delete_if_expired("orphan01", clock.now) is False
        assert store.list_expired(clock.now) == []


class TestInMemoryStore:
    """Redis command emulation used by the fallback backend."""

    def test_set_nx(self):
        memory = InMemoryStore()
        assert memory.set("k", "v1", nx=True) is True
        assert memory.set("k", "v2", nx=True) is None
        assert memory.get("k") == "v1"

    def test_zrangebyscore_orders_by_score(self):
        memory = InMemoryStore()
        memory.zadd("z", {"b": 2.0, "a": 1.0, "c": 3.0})
        assert memory.zrangebyscore("z", "-inf", 2.0) == ["a", "b"]

    def test_zrem_and_delete_counts(self):
        memory = InMemoryStore()
        memory.set("k", "v")
        memory.zadd("z", {"m": 1.0})
        assert memory.zrem("z", "m", "other") == 1
        assert memory.delete("k", "missing") == 1

    def test_transaction_queues_after_multi(self):
        memory = InMemoryStore()
        memory.set("k", "v")

        def func(pipe):
            assert pipe.get("k") == "v"
            pipe.multi()
            pipe.delete("k")
            assert memory.get("k") == "v"
            return "done"

        assert memory.transaction(func, "k", value_from_callable=True) == "done"
        assert memory.get("k") is None

    def test_transaction_returns_exec_results(self):
        memory = InMemoryStore()

        def func(pipe):
            pipe.multi()
            pipe.set("k", "v")
            pipe.zadd("z", {"k": 1.0})

        assert memory.transaction(func, "k") == [True, 1]


class TestBackendErrors:
    """Backend failures surface as StoreUnavailable."""

    @pytest.fixture
    def broken_store(self, clock):
        client = MagicMock()
        client.get.side_effect = ConnectionError("connection refused")
        client.exists.side_effect = ConnectionError("connection refused")
        client.transaction.side_effect = TimeoutError("timed out")
        client.zrangebyscore.side_effect = ConnectionError("connection refused")
        client.ping.side_effect = ConnectionError("connection refused")
        return PasteStore(client, clock=clock)

    def test_lookup(self, broken_store):
        with pytest.raises(StoreUnavailable):
            broken_store.get_by_identifier("abc12345")

    def test_create(self, broken_store):
        with pytest.raises(StoreUnavailable):
            broken_store.create("abc12345", "x", "plaintext")

    def test_list_expired(self, broken_store, clock):
        with pytest.raises(StoreUnavailable):
            broken_store.list_expired(clock.now)

    def test_delete_if_expired(self, broken_store, clock):
        with pytest.raises(StoreUnavailable):
            broken_store.delete_if_expired("abc12345", clock.now)

    def test_health_check_reports_unhealthy(self, broken_store):
        assert broken_store.is_healthy() is False
        assert broken_store.backend_name == "redis"


class TestOpenClient:
    """Backend handle selection at startup."""

    @pytest.fixture
    def unreachable_redis(self, monkeypatch):
        fake = MagicMock()
        fake.ping.side_effect = ConnectionError("connection refused")
        monkeypatch.setattr("shortpaste.database.Redis.from_url", lambda *args, **kwargs: fake)
        return fake

    def test_memory_requested(self):
        assert isinstance(open_client("redis://localhost:6379", use_memory=True), InMemoryStore)

    def test_falls_back_when_redis_unreachable(self, unreachable_redis):
        client = open_client("redis://localhost:6379", allow_fallback=True)

        assert isinstance(client, InMemoryStore)
        unreachable_redis.close.assert_called_once()

    def test_raises_without_fallback(self, unreachable_redis):
        with pytest.raises(StoreUnavailable):
            open_client("redis://localhost:6379", allow_fallback=False)

    def test_returns_redis_when_reachable(self, monkeypatch):
        fake = MagicMock()
        monkeypatch.setattr("shortpaste.database.Redis.from_url", lambda *args, **kwargs: fake)

        assert open_client("redis://localhost:6379") is fake
        assert PasteStore(fake).using_fallback is False
