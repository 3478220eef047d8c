"""
Redis cache wrapper

The cache is a best-effort optimization: every operation degrades to a miss
(or ``False`` for writes) when Redis is unreachable, it never raises.

Usage:
    >>> cache = RedisCache()
    >>> key = cache.make_key("quran:ayah", {"reference": "2:255", "edition": "en.asad"})
    >>> await cache.set(key, ayah, ttl=86400)
    >>> ayah = await cache.get(key)
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config import RedisConfig, redis_config

logger = logging.getLogger(__name__)

# Seconds to wait before a new connect attempt after a failed one
RECONNECT_COOLDOWN = 30.0


def make_cache_key(operation: str, params: Optional[Dict[str, Any]] = None, prefix: str = "") -> str:
    """
    Build a deterministic cache key from an operation name and its parameters.

    Parameters are serialized as sorted-key compact JSON with ``None`` values
    dropped, so equivalent requests map to one key whatever order the caller
    built its parameters in.

    Example:
        >>> make_cache_key("quran:ayah", {"reference": "2:255", "edition": "en.asad"})
        'quran:ayah:{"edition":"en.asad","reference":"2:255"}'
    """
    parts = [prefix, operation] if prefix else [operation]
    if params:
        canonical = {name: value for name, value in params.items() if value is not None}
        if canonical:
            parts.append(json.dumps(canonical, sort_keys=True, separators=(",", ":"),
                                    ensure_ascii=False, default=str))
    return ":".join(parts)


class RedisCache:
    """
    Lazily connected Redis cache with JSON values and per-key TTLs.

    The connection is established on first use. Concurrent callers arriving
    while the connection is being established wait on the same in-flight
    attempt (bounded by ``connect_timeout``) instead of opening their own.
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Redis] = None,
        client_factory: Optional[Callable[[], Redis]] = None,
    ):
        self._config = config or redis_config
        self._client = client
        self._client_factory = client_factory or self._create_client
        self._ready: Optional[asyncio.Future] = None
        self._retry_after = 0.0

    # =========================================================================
    # Connection
    # =========================================================================

    def _create_client(self) -> Redis:
        return Redis(
            host=self._config.host,
            port=self._config.port,
            password=self._config.password,
            db=self._config.db,
            socket_connect_timeout=self._config.connect_timeout,
            socket_timeout=self._config.socket_timeout,
            decode_responses=True,
        )

    async def _connect(self) -> Optional[Redis]:
        """Open and verify a connection. Returns None when Redis is unreachable."""
        client = self._client_factory()
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning(f"Redis unavailable at {self._config.host}:{self._config.port}: {e}")
            self._retry_after = time.monotonic() + RECONNECT_COOLDOWN
            await self._close_quietly(client)
            return None

        logger.info(f"Redis connected: {self._config.host}:{self._config.port}")
        self._client = client
        return client

    async def _get_client(self) -> Optional[Redis]:
        if self._client is not None:
            return self._client

        if self._ready is None or self._ready.done():
            if self._ready is not None and time.monotonic() < self._retry_after:
                return None
            self._ready = asyncio.ensure_future(self._connect())

        try:
            return await asyncio.wait_for(asyncio.shield(self._ready), timeout=self._config.connect_timeout)
        except asyncio.TimeoutError:
            logger.warning("Timed out waiting for Redis connection, treating cache as unavailable")
            return None

    async def _close_quietly(self, client: Redis) -> None:
        try:
            await client.aclose()
        except (RedisError, OSError) as e:
            logger.debug(f"Error closing Redis client: {e}")

    async def close(self) -> None:
        """Close the shared connection, if any."""
        if self._ready is not None and not self._ready.done():
            self._ready.cancel()
        if self._client is not None:
            await self._close_quietly(self._client)
            self._client = None

    # =========================================================================
    # Key management
    # =========================================================================

    def make_key(self, operation: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Create a namespaced cache key, e.g. ``noor:quran:surah:{"edition":"quran-uthmani","number":2}``."""
        return make_cache_key(operation, params, prefix=self._config.key_prefix)

    # =========================================================================
    # Basic operations
    # =========================================================================

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a deserialized value from the cache.

        Returns None on a miss, on connectivity failure and on undecodable values.
        """
        client = await self._get_client()
        if client is None:
            return None

        try:
            raw = await client.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Redis get error for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache value for {key}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a value as JSON, optionally expiring after ``ttl`` seconds.

        Returns False when the value could not be stored; callers treat that as a no-op.
        """
        client = await self._get_client()
        if client is None:
            return False

        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for {key} is not JSON serializable: {e}")
            return False

        try:
            if ttl:
                await client.setex(key, ttl, payload)
            else:
                await client.set(key, payload)
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Redis set error for {key}: {e}")
            return False

    async def ping(self) -> bool:
        """True when Redis answers."""
        client = await self._get_client()
        if client is None:
            return False
        try:
            return bool(await client.ping())
        except (RedisError, OSError):
            return False
