"""
Shared plumbing for remote content providers

Clients never raise for remote problems: every call returns a RemoteResult
that says whether the remote answered, authoritatively had nothing, or
could not be reached.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


def path_segment(value: Any) -> str:
    """Percent-encode one URL path segment, ``/`` and ``?`` included."""
    return quote(str(value), safe="")


class RemoteStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class RemoteResult:
    """Typed outcome of a remote call."""
    status: RemoteStatus
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "RemoteResult":
        return cls(RemoteStatus.OK, data=data)

    @classmethod
    def not_found(cls, reason: str = "") -> "RemoteResult":
        return cls(RemoteStatus.NOT_FOUND, error=reason or None)

    @classmethod
    def failed(cls, reason: str) -> "RemoteResult":
        return cls(RemoteStatus.FAILED, error=reason)

    @property
    def is_ok(self) -> bool:
        return self.status is RemoteStatus.OK

    @property
    def is_not_found(self) -> bool:
        return self.status is RemoteStatus.NOT_FOUND

    @property
    def is_failed(self) -> bool:
        return self.status is RemoteStatus.FAILED


def is_empty(data: Any) -> bool:
    return data is None or (isinstance(data, (list, dict, str)) and len(data) == 0)


class RemoteClient:
    """
    Base class for an HTTP content provider.

    Subclasses implement ``_unwrap`` to turn the provider's JSON envelope into
    a RemoteResult. The underlying httpx.AsyncClient is owned by the caller
    when passed in, otherwise it is created lazily and closed by ``close()``.
    """

    name = "remote"

    def __init__(self, base_url: str, timeout: float, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _fetch(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        shape: Optional[Callable[[Any], Any]] = None,
    ) -> RemoteResult:
        """
        GET ``endpoint`` and classify the response.

        ``shape`` converts the unwrapped payload into the public record shape;
        a payload it cannot convert counts as malformed.
        """
        url = f"{self.base_url}{endpoint}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            response = await self._get_client().get(url, params=query, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.warning(f"{self.name} API timed out after {self.timeout}s for {endpoint}")
            return RemoteResult.failed("timeout")
        except httpx.RequestError as e:
            logger.warning(f"{self.name} request error for {endpoint}: {e}")
            return RemoteResult.failed(f"request error: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code == 404 or self._is_not_found_error(response.status_code, body):
            return RemoteResult.not_found(f"{self.name} returned {response.status_code} for {endpoint}")

        if not response.is_success:
            logger.warning(f"{self.name} API error: {response.status_code} for {endpoint}")
            return RemoteResult.failed(f"status {response.status_code}")

        if body is None:
            logger.warning(f"{self.name} API returned a non-JSON body for {endpoint}")
            return RemoteResult.failed("malformed payload")

        try:
            result = self._unwrap(body)
            if result.is_ok and shape is not None:
                data = shape(result.data)
                result = RemoteResult.not_found("empty result") if is_empty(data) else RemoteResult.ok(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"{self.name} API returned an unexpected payload for {endpoint}: {e}")
            return RemoteResult.failed("malformed payload")

        return result

    def _is_not_found_error(self, status_code: int, body: Any) -> bool:
        """Provider-specific "authoritatively absent" responses besides 404."""
        return False

    def _unwrap(self, body: Any) -> RemoteResult:
        raise NotImplementedError
