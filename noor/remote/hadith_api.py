"""
HadithAPI client - https://hadithapi.com
Primary source for hadith collections, chapters and hadith text
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import HadithApiConfig, hadith_api_config
from ..transforms.hadith import (
    book_from_api,
    chapter_from_api,
    hadith_from_api,
    pagination_from_api,
)
from .base import RemoteClient, RemoteResult, path_segment

logger = logging.getLogger(__name__)


def _hadith_page(data: Dict) -> Optional[Dict]:
    if not data["data"]:
        return None
    return {
        "hadiths": [hadith_from_api(h) for h in data["data"]],
        "pagination": pagination_from_api(data),
    }


class HadithApiClient(RemoteClient):
    """
    Client for HadithAPI.

    Every request carries the API key as a query parameter. Without a key the
    client reports every call as failed so reads fall back to the mirror.
    """

    name = "Hadith"

    def __init__(self, config: Optional[HadithApiConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or hadith_api_config
        super().__init__(self.config.base_url, self.config.timeout, client)

    async def _fetch(self, endpoint, params=None, shape=None) -> RemoteResult:
        if not self.config.api_key:
            logger.debug(f"HADITH_API_KEY not set, skipping remote call to {endpoint}")
            return RemoteResult.failed("api key not configured")
        return await super()._fetch(endpoint, {**(params or {}), "apiKey": self.config.api_key}, shape)

    def _unwrap(self, body: Any) -> RemoteResult:
        status = int(body["status"])
        if status == 404:
            return RemoteResult.not_found(str(body.get("message", "")))
        if status != 200:
            return RemoteResult.failed(f"api status {status}")
        return RemoteResult.ok(body)

    async def list_books(self) -> RemoteResult:
        return await self._fetch("/books", shape=lambda body: [book_from_api(b) for b in body["books"]])

    async def list_chapters(self, book_slug: str) -> RemoteResult:
        return await self._fetch(
            f"/{path_segment(book_slug)}/chapters",
            shape=lambda body: [chapter_from_api(c) for c in body["chapters"]],
        )

    async def list_hadiths(self, filters: Dict[str, Any], per_page: int, page: int) -> RemoteResult:
        """
        Filtered, paginated hadiths.

        ``filters`` uses HadithAPI parameter names: book, chapter,
        hadithNumber, status, hadithEnglish, hadithUrdu, hadithArabic.
        """
        params = {**filters, "paginate": per_page, "page": page}
        return await self._fetch("/hadiths", params=params, shape=lambda body: _hadith_page(body["hadiths"]))
