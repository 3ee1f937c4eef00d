"""Shared pytest fixtures for all tests."""

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from fastapi.testclient import TestClient

from shortpaste.database import InMemoryStore, PasteStore
from shortpaste.main import create_app

EPOCH = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock for stores and sweepers."""

    def __init__(self, now: datetime = EPOCH):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "redis"])
def backend(request):
    """Store backend: the in-memory fallback, or redis-py against a fake Redis server."""
    if request.param == "memory":
        return InMemoryStore()
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def store(backend, clock):
    """Paste store over the parametrized backend with a fixed clock."""
    return PasteStore(backend, clock=clock)


@pytest.fixture
def client(store):
    """Create FastAPI test client bound to the test store."""
    return TestClient(create_app(store))
