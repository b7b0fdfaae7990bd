"""Key-value store backends holding the per-minute request buckets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from time import monotonic
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError


class StoreBackendError(RuntimeError):
    """Raised when the configured key-value backend is unavailable."""


class KeyValueStore(Protocol):
    """Protocol implemented by all store backends."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` when absent or expired."""

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` and (re)start its expiration clock."""

    async def close(self) -> None:
        """Release backend resources if needed."""

    async def reset(self) -> None:
        """Clear store state (primarily for test isolation)."""


@dataclass(slots=True)
class _Entry:
    value: str
    expires_at: float


class InMemoryKeyValueStore:
    """Process-local store with per-key expiration."""

    def __init__(self, *, clock: Callable[[], float] = monotonic) -> None:
        self._entries: dict[str, _Entry] = {}
        self._clock = clock
        self._lock = Lock()

    async def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                return None
            return entry.value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        now = self._clock()
        with self._lock:
            self._sweep(now)
            self._entries[key] = _Entry(value=value, expires_at=now + ttl_seconds)

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def close(self) -> None:
        return

    async def reset(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisKeyValueStore:
    """Redis-backed store shared across app instances."""

    def __init__(
        self,
        *,
        redis_url: str | None = None,
        prefix: str = "dstats",
        client: Redis | None = None,
    ) -> None:
        if client is None:
            if not redis_url:
                raise RuntimeError("RedisKeyValueStore requires a redis_url or client")
            client = Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        self._client = client
        self._prefix = prefix

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self._client.get(self._redis_key(key))
        except RedisError as exc:
            raise StoreBackendError("Key-value backend unavailable") from exc
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        try:
            await self._client.set(self._redis_key(key), value, ex=ttl_seconds)
        except RedisError as exc:
            raise StoreBackendError("Key-value backend unavailable") from exc

    async def close(self) -> None:
        await self._client.aclose()

    async def reset(self) -> None:
        keys: list[str] = []
        try:
            async for key in self._client.scan_iter(match=f"{self._prefix}:*"):
                keys.append(str(key))
            if keys:
                await self._client.delete(*keys)
        except RedisError as exc:
            raise StoreBackendError("Key-value backend unavailable") from exc


def create_store(
    *,
    backend: str,
    redis_url: str | None,
    prefix: str = "dstats",
    logger: logging.Logger | None = None,
) -> tuple[KeyValueStore, bool]:
    """Create the configured store and indicate if it uses shared state."""

    normalized_backend = backend.strip().lower()
    if normalized_backend == "memory":
        return InMemoryKeyValueStore(), False

    if normalized_backend == "redis":
        if not redis_url:
            raise RuntimeError("STORE_BACKEND=redis requires REDIS_URL")
        return RedisKeyValueStore(redis_url=redis_url, prefix=prefix), True

    if normalized_backend == "auto":
        if redis_url:
            return RedisKeyValueStore(redis_url=redis_url, prefix=prefix), True
        if logger:
            logger.warning("store_backend_auto_fallback backend=memory reason=redis_url_missing")
        return InMemoryKeyValueStore(), False

    raise ValueError(f"Unsupported STORE_BACKEND value: {backend}")
