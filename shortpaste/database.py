"""
Database layer for Redis operations with in-memory fallback for development.
Handles paste creation, liveness-aware lookup, the expiry index and
expiration-aware deletion.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union
from redis import Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from shortpaste.exceptions import PasteConflict, StoreUnavailable
from shortpaste.expiration import as_utc, utcnow
from shortpaste.models import Paste

logger = logging.getLogger(__name__)

PASTE_KEY_PREFIX = "paste:"
EXPIRY_INDEX_KEY = "pastes:by_expires_at"


class InMemoryStore:
    """Simple in-memory store for development/testing (when Redis unavailable)."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.sorted_sets: Dict[str, Dict[str, float]] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        """Retrieve string data."""
        with self._lock:
            return self.store.get(key)

    def set(self, key: str, value: str, nx: bool = False) -> Optional[bool]:
        """Store string data, optionally only when the key is absent."""
        with self._lock:
            if nx and key in self.store:
                return None
            self.store[key] = value
            return True

    def exists(self, *keys: str) -> int:
        with self._lock:
            return sum(1 for key in keys if key in self.store or key in self.sorted_sets)

    def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        removed = 0
        with self._lock:
            for key in keys:
                if self.store.pop(key, None) is not None:
                    removed += 1
                elif self.sorted_sets.pop(key, None) is not None:
                    removed += 1
        return removed

    def zadd(self, name: str, mapping: Dict[str, float]) -> int:
        """Add members to a sorted set, returning how many were new."""
        with self._lock:
            members = self.sorted_sets.setdefault(name, {})
            added = sum(1 for member in mapping if member not in members)
            members.update({member: float(score) for member, score in mapping.items()})
            return added

    def zrem(self, name: str, *values: str) -> int:
        with self._lock:
            members = self.sorted_sets.get(name, {})
            removed = sum(1 for value in values if members.pop(value, None) is not None)
            if name in self.sorted_sets and not members:
                del self.sorted_sets[name]
            return removed

    def zrangebyscore(self, name: str, min: Union[float, str], max: Union[float, str]) -> List[str]:
        """Members with min <= score <= max, ordered by score."""
        low, high = float(min), float(max)
        with self._lock:
            members = self.sorted_sets.get(name, {})
            matches = [(score, member) for member, score in members.items() if low <= score <= high]
        return [member for _, member in sorted(matches)]

    def zcard(self, name: str) -> int:
        with self._lock:
            return len(self.sorted_sets.get(name, {}))

    def transaction(self, func: Callable[["InMemoryPipeline"], Any], *watches: str,
                    value_from_callable: bool = False) -> Any:
        """Run ``func`` and its queued commands as one unit, like ``Redis.transaction``."""
        with self._lock:
            pipe = InMemoryPipeline(self)
            func_value = func(pipe)
            exec_value = pipe.execute()
        return func_value if value_from_callable else exec_value

    def ping(self):
        """Health check."""
        return True

    def close(self):
        pass


class InMemoryPipeline:
    """
    Pipeline handed to transaction callbacks by ``InMemoryStore``.

    Commands run immediately until ``multi()`` is called and are queued
    afterwards, matching a redis-py pipeline in watch mode.
    """

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._queued: Optional[list] = None

    def watch(self, *names: str):
        pass

    def multi(self):
        self._queued = []

    def execute(self) -> list:
        queued, self._queued = self._queued or [], None
        return [getattr(self._store, name)(*args, **kwargs) for name, args, kwargs in queued]

    def _command(self, name: str, *args, **kwargs):
        if self._queued is None:
            return getattr(self._store, name)(*args, **kwargs)
        self._queued.append((name, args, kwargs))
        return self

    def get(self, key):
        return self._command("get", key)

    def set(self, key, value, nx=False):
        return self._command("set", key, value, nx=nx)

    def exists(self, *keys):
        return self._command("exists", *keys)

    def delete(self, *keys):
        return self._command("delete", *keys)

    def zadd(self, name, mapping):
        return self._command("zadd", name, mapping)

    def zrem(self, name, *values):
        return self._command("zrem", name, *values)


Client = Union[Redis, InMemoryStore]


def open_client(
    redis_url: str,
    allow_fallback: bool = True,
    use_memory: bool = False,
) -> Client:
    """
    Open the backend handle shared by a process.

    Connects to Redis and verifies the connection. When Redis is not
    reachable the in-memory store is returned if ``allow_fallback`` is
    set, otherwise StoreUnavailable is raised.
    """
    if use_memory:
        logger.info("Using in-memory store (USE_MEMORY_STORE is set)")
        return InMemoryStore()

    # For Upstash Redis, use rediss:// scheme for SSL/TLS
    logger.info(f"Attempting to connect to Redis: {redis_url[:30]}...")
    client = Redis.from_url(redis_url, decode_responses=True)
    try:
        client.ping()
    except RedisError as e:
        client.close()
        logger.error(f"Error connecting to Redis: {type(e).__name__}: {e}")
        if not allow_fallback:
            raise StoreUnavailable(f"Redis is not reachable at startup: {e}") from e
        logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
        return InMemoryStore()

    logger.info("Redis connected successfully")
    return client


def _paste_key(identifier: str) -> str:
    return f"{PASTE_KEY_PREFIX}{identifier}"


def _score(moment: datetime) -> float:
    return as_utc(moment).timestamp()


class PasteStore:
    """
    Persistence of paste records over a Redis (or in-memory) handle.

    Each paste is a JSON document under ``paste:<identifier>``. Pastes with
    an expiry are also members of the ``pastes:by_expires_at`` sorted set,
    scored by expiry time, which the sweeper range-scans.
    """

    def __init__(self, client: Client, clock: Callable[[], datetime] = utcnow):
        self.redis = client
        self.clock = clock

    @property
    def using_fallback(self) -> bool:
        return isinstance(self.redis, InMemoryStore)

    @property
    def backend_name(self) -> str:
        return "memory" if self.using_fallback else "redis"

    @contextmanager
    def _backend_errors(self, action: str):
        try:
            yield
        except (ConnectionError, TimeoutError) as e:
            logger.error(f"Store unavailable while {action}: {type(e).__name__}: {e}")
            raise StoreUnavailable(f"Store unavailable while {action}") from e

    def is_healthy(self) -> bool:
        """Check if database connection is alive."""
        try:
            self.redis.ping()
            return True
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False

    def create(
        self,
        identifier: str,
        content: str,
        language: str,
        expires_at: Optional[datetime] = None,
    ) -> Paste:
        """
        Persist a new paste.

        Args:
            identifier: Short identifier for the paste
            content: Text content of the paste
            language: Language tag
            expires_at: Optional absolute expiry instant

        Returns:
            The stored paste

        Raises:
            PasteConflict: If any paste, live or stale, holds the identifier
            StoreUnavailable: If the backend cannot be reached
        """
        paste = Paste(identifier=identifier, content=content, language=language, expires_at=expires_at)
        key = _paste_key(identifier)
        payload = paste.model_dump_json()

        def _insert(pipe):
            if pipe.exists(key):
                raise PasteConflict(identifier)
            pipe.multi()
            pipe.set(key, payload)
            if paste.expires_at is not None:
                pipe.zadd(EXPIRY_INDEX_KEY, {identifier: _score(paste.expires_at)})

        try:
            with self._backend_errors(f"creating paste {identifier}"):
                self.redis.transaction(_insert, key)
        except PasteConflict:
            logger.warning(f"Identifier {identifier} already taken")
            raise

        logger.info(f"Paste {identifier} saved successfully")
        return paste

    def get_by_identifier(self, identifier: str, now: Optional[datetime] = None) -> Optional[Paste]:
        """
        Fetch a live paste.

        Returns None both when the paste never existed and when it has
        expired but not been swept yet.
        """
        with self._backend_errors(f"fetching paste {identifier}"):
            raw = self.redis.get(_paste_key(identifier))

        if raw is None:
            logger.debug(f"Paste {identifier} not found")
            return None

        paste = Paste.model_validate_json(raw)
        if not paste.is_live(as_utc(now or self.clock())):
            logger.debug(f"Paste {identifier} has expired")
            return None
        return paste

    def exists(self, identifier: str) -> bool:
        """Whether a record is physically stored, live or not."""
        with self._backend_errors(f"probing paste {identifier}"):
            return bool(self.redis.exists(_paste_key(identifier)))

    def list_expired(self, as_of: datetime) -> List[str]:
        """Identifiers of pastes whose expiry is at or before ``as_of``."""
        with self._backend_errors("scanning the expiry index"):
            return list(self.redis.zrangebyscore(EXPIRY_INDEX_KEY, "-inf", _score(as_of)))

    def delete_if_expired(self, identifier: str, as_of: datetime) -> bool:
        """
        Delete a paste only if it still exists and expired at or before ``as_of``.

        Returns:
            True if this call deleted the paste, False otherwise
        """
        key = _paste_key(identifier)
        as_of = as_utc(as_of)

        def _delete(pipe):
            raw = pipe.get(key)
            if raw is None:
                # Drop a dangling index entry left without its record
                pipe.multi()
                pipe.zrem(EXPIRY_INDEX_KEY, identifier)
                return False
            if not Paste.model_validate_json(raw).is_expired(as_of):
                return False
            pipe.multi()
            pipe.delete(key)
            pipe.zrem(EXPIRY_INDEX_KEY, identifier)
            return True

        with self._backend_errors(f"deleting paste {identifier}"):
            deleted = self.redis.transaction(_delete, key, value_from_callable=True)

        if deleted:
            logger.info(f"Paste {identifier} deleted")
        return deleted
