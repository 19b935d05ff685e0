from __future__ import annotations
import json
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Protocol
import structlog
import redis.asyncio as aioredis
from redis.exceptions import RedisError

log = structlog.get_logger()


@dataclass(frozen=True)
class WindowCount:
    count: int
    ttl_remaining: int  # seconds
    provider: str       # redis | memory


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def incr_window(self, key: str, window: int) -> WindowCount: ...


async def get_json(kv: KeyValueStore, key: str) -> Any:
    raw = await kv.get(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        log.warning("kv_bad_json", key=key)
        return None


async def set_json(kv: KeyValueStore, key: str, value: Any, ttl: int) -> None:
    await kv.set(key, json.dumps(value), ttl)


def _safe_seconds(value: float) -> int:
    return max(1, int(value))


class MemoryKeyValueStore:
    """Process-local TTL map. Lost on restart and not shared between instances."""

    provider = "memory"
    purge_interval = 60.0  # seconds between sweeps of expired keys

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._values: dict[str, tuple[str, float]] = {}
        self._counters: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._next_purge = clock() + self.purge_interval

    def _purge_expired(self, now: float) -> None:
        # caller holds the lock
        if now < self._next_purge:
            return
        self._next_purge = now + self.purge_interval
        self._values = {k: v for k, v in self._values.items() if v[1] > now}
        self._counters = {k: c for k, c in self._counters.items() if c[1] > now}

    async def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            item = self._values.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at <= now:
                del self._values[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            self._values[key] = (value, now + _safe_seconds(ttl))

    async def incr_window(self, key: str, window: int) -> WindowCount:
        window = _safe_seconds(window)
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            current = self._counters.get(key)
            if current is None or current[1] <= now:
                self._counters[key] = (1, now + window)
                return WindowCount(1, window, self.provider)
            count, reset_at = current[0] + 1, current[1]
            self._counters[key] = (count, reset_at)
        return WindowCount(count, max(1, math.ceil(reset_at - now)), self.provider)


class RedisKeyValueStore:
    provider = "redis"

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        return cls(aioredis.from_url(url, decode_responses=True, socket_connect_timeout=2, socket_timeout=2))

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self.client.set(key, value, ex=_safe_seconds(ttl))

    async def incr_window(self, key: str, window: int) -> WindowCount:
        window = _safe_seconds(window)
        count = int(await self.client.incr(key))
        if count == 1:
            await self.client.expire(key, window)
        ttl = await self.client.ttl(key)
        return WindowCount(count, ttl if ttl and ttl > 0 else window, self.provider)


class FallbackKeyValueStore:
    """
    Remote store first; on any Redis error the in-process store answers instead.
    Warns once per kind (values, counters) so the degraded mode shows up in logs.
    """

    def __init__(self, remote: KeyValueStore, local: MemoryKeyValueStore | None = None):
        self.remote = remote
        self.local = local or MemoryKeyValueStore()
        self._warned: set[str] = set()

    def _warn_fallback(self, kind: str, error: Exception | None = None):
        if kind in self._warned:
            return
        self._warned.add(kind)
        log.warning(
            "kv_memory_fallback",
            kind=kind,
            reason=str(error) if error else "remote_unconfigured",
            impact="values do not survive restarts and are not shared across instances",
        )

    async def get(self, key: str) -> str | None:
        try:
            return await self.remote.get(key)
        except RedisError as e:
            self._warn_fallback("values", e)
            return await self.local.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self.remote.set(key, value, ttl)
        except RedisError as e:
            self._warn_fallback("values", e)
            await self.local.set(key, value, ttl)

    async def incr_window(self, key: str, window: int) -> WindowCount:
        try:
            return await self.remote.incr_window(key, window)
        except RedisError as e:
            self._warn_fallback("counters", e)
            return await self.local.incr_window(key, window)


def build_kv_store(redis_url: str) -> KeyValueStore:
    if not redis_url:
        log.warning(
            "kv_memory_fallback",
            kind="all",
            reason="remote_unconfigured",
            impact="values do not survive restarts and are not shared across instances",
        )
        return MemoryKeyValueStore()
    return FallbackKeyValueStore(RedisKeyValueStore.from_url(redis_url))
