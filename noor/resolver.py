"""
Read-through resolver

Every content read goes through the same path:

    cache -> remote API (bounded timeout) -> local mirror -> cache write

Remote-sourced values are cached with the operation's remote TTL, mirror
(fallback) values with its shorter fallback TTL, so the remote is retried
soon after it recovers. Not-found outcomes are never cached.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from .cache import RedisCache
from .config import CacheTTLConfig, cache_ttl_config
from .remote.base import RemoteResult, is_empty

logger = logging.getLogger(__name__)

RemoteCall = Callable[[], Awaitable[RemoteResult]]
MirrorCall = Callable[[], Awaitable[Any]]


class Source(str, Enum):
    """Which tier served a read."""
    CACHE = "cache"
    REMOTE = "remote"
    MIRROR = "mirror"
    NONE = "none"


@dataclass(frozen=True)
class TTLPolicy:
    remote: int
    fallback: int

    def __post_init__(self):
        if self.remote < 0 or self.fallback < 0:
            raise ValueError(f"TTLs must not be negative: {self}")
        if self.fallback > self.remote:
            raise ValueError(f"Fallback TTL {self.fallback}s exceeds remote TTL {self.remote}s")


@dataclass
class Resolution:
    """A resolved value and the tier it came from. ``source`` is NONE for not-found."""
    value: Any
    source: Source
    key: Optional[str] = None
    ttl: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.source is not Source.NONE

    @classmethod
    def not_found(cls, key: Optional[str] = None) -> "Resolution":
        return cls(None, Source.NONE, key)


class ReadThroughResolver:
    """
    Orchestrates cache, remote provider and local mirror for one read.

    The resolver holds no state of its own besides its collaborators; it is
    safe to share between concurrent requests.
    """

    def __init__(self, cache: RedisCache, ttl_config: Optional[CacheTTLConfig] = None):
        self.cache = cache
        self.ttl_config = ttl_config or cache_ttl_config

    def policy(self, operation: str) -> TTLPolicy:
        remote, fallback = self.ttl_config.for_operation(operation)
        return TTLPolicy(remote, fallback)

    async def resolve(
        self,
        operation: str,
        params: Optional[Dict[str, Any]],
        remote: RemoteCall,
        fallback: Optional[MirrorCall] = None,
        *,
        fallback_on_not_found: bool = False,
        cacheable: bool = True,
        remote_timeout: Optional[float] = None,
    ) -> Resolution:
        """
        Resolve ``operation`` for ``params``.

        Args:
            remote: returns a RemoteResult; a FAILED result triggers the fallback.
            fallback: queries the mirror and returns the value already in the
                remote's shape, or an empty value when the mirror has nothing.
                Mirror errors propagate.
            fallback_on_not_found: also consult the mirror when the remote
                authoritatively answers "not found" (used for listings).
            cacheable: read and write the cache at all (free-text searches don't).
            remote_timeout: overall bound on the remote call in seconds.
        """
        policy = self.policy(operation)
        key = self.cache.make_key(operation, params) if cacheable else None

        if key is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug(f"{operation}: served from cache ({key})")
                return Resolution(cached, Source.CACHE, key)

        result = await self._call_remote(operation, remote, remote_timeout)

        if result.is_ok:
            await self._write(key, result.data, policy.remote)
            logger.info(f"{operation}: served from remote API")
            return Resolution(result.data, Source.REMOTE, key, policy.remote)

        if fallback is None or (result.is_not_found and not fallback_on_not_found):
            logger.info(f"{operation}: not found ({result.error or result.status.value})")
            return Resolution.not_found(key)

        logger.info(f"{operation}: remote {result.status.value} ({result.error}), falling back to mirror")
        value = await fallback()
        if is_empty(value):
            logger.info(f"{operation}: not found in mirror")
            return Resolution.not_found(key)

        await self._write(key, value, policy.fallback)
        logger.info(f"{operation}: served from mirror (fallback)")
        return Resolution(value, Source.MIRROR, key, policy.fallback)

    async def _call_remote(self, operation: str, remote: RemoteCall, timeout: Optional[float]) -> RemoteResult:
        if timeout is None:
            return await remote()
        try:
            return await asyncio.wait_for(remote(), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{operation}: remote call abandoned after {timeout}s")
            return RemoteResult.failed("timeout")

    async def _write(self, key: Optional[str], value: Any, ttl: int) -> None:
        # A zero TTL means the value is not cached
        if key is None or ttl <= 0:
            return
        if not await self.cache.set(key, value, ttl=ttl):
            logger.debug(f"Cache write skipped for {key}")
