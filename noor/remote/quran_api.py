"""
AlQuran Cloud API client - https://alquran.cloud/api
Primary source for Quran text, editions and structural divisions
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import QuranApiConfig, quran_api_config
from ..transforms.quran import (
    ayah_from_api,
    search_match_from_api,
    surah_from_api,
    surah_summary_from_api,
)
from .base import RemoteClient, RemoteResult, is_empty, path_segment

logger = logging.getLogger(__name__)

# Structural divisions exposed as /{division}/{number}/{edition}
DIVISIONS = ("juz", "page", "manzil", "ruku", "hizbQuarter")


def _by_edition(items: List[Dict], shape) -> Dict[str, Dict]:
    return {item["edition"]["identifier"]: shape(item) for item in items}


def _edition_list(editions: List[str]) -> str:
    return ",".join(path_segment(edition) for edition in editions)


class QuranApiClient(RemoteClient):
    """
    Client for the AlQuran Cloud API.

    Responses are wrapped as ``{"code": 200, "status": "OK", "data": ...}``.
    Invalid references come back as HTTP 400/404 with an error code in the
    envelope; those are authoritative not-found answers.
    """

    name = "Quran"

    def __init__(self, config: Optional[QuranApiConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or quran_api_config
        super().__init__(self.config.base_url, self.config.timeout, client)

    def _is_not_found_error(self, status_code: int, body: Any) -> bool:
        return status_code == 400 and isinstance(body, dict) and body.get("code") == 400

    def _unwrap(self, body: Any) -> RemoteResult:
        code = body["code"]
        if code == 404:
            return RemoteResult.not_found(str(body.get("data", "")))
        if code != 200:
            return RemoteResult.failed(f"api code {code}")

        data = body.get("data")
        if is_empty(data):
            return RemoteResult.not_found("empty data")
        return RemoteResult.ok(data)

    # ==========================================================================
    # Surahs
    # ==========================================================================

    async def list_surahs(self) -> RemoteResult:
        """All 114 surahs without their ayahs."""
        return await self._fetch("/surah", shape=lambda data: [surah_summary_from_api(s) for s in data])

    async def get_surah(self, number: int, edition: str) -> RemoteResult:
        return await self._fetch(f"/surah/{number}/{path_segment(edition)}", shape=surah_from_api)

    async def get_surah_editions(self, number: int, editions: List[str]) -> RemoteResult:
        """One surah in several editions, keyed by edition identifier."""
        return await self._fetch(
            f"/surah/{number}/editions/{_edition_list(editions)}",
            shape=lambda data: _by_edition(data, surah_from_api),
        )

    # ==========================================================================
    # Ayahs
    # ==========================================================================

    async def get_ayah(self, reference: Union[str, int], edition: str) -> RemoteResult:
        """``reference`` is ``surah:ayah`` or an absolute ayah number (1-6236)."""
        return await self._fetch(
            f"/ayah/{reference}/{path_segment(edition)}",
            shape=lambda data: ayah_from_api(data, with_surah=True),
        )

    async def get_ayah_editions(self, reference: Union[str, int], editions: List[str]) -> RemoteResult:
        return await self._fetch(
            f"/ayah/{reference}/editions/{_edition_list(editions)}",
            shape=lambda data: _by_edition(data, lambda a: ayah_from_api(a, with_surah=True)),
        )

    async def get_division(self, division: str, number: int, edition: str,
                           offset: Optional[int] = None, limit: Optional[int] = None) -> RemoteResult:
        """Ayahs of a juz, page, manzil, ruku or hizb quarter."""
        if division not in DIVISIONS:
            raise ValueError(f"Unknown division: {division}")
        return await self._fetch(
            f"/{division}/{number}/{path_segment(edition)}",
            params={"offset": offset, "limit": limit},
            shape=lambda data: [ayah_from_api(a, with_surah=True) for a in data["ayahs"]],
        )

    async def get_sajda_ayahs(self, edition: str) -> RemoteResult:
        return await self._fetch(
            f"/sajda/{path_segment(edition)}",
            shape=lambda data: [ayah_from_api(a, with_surah=True) for a in data["ayahs"]],
        )

    async def search(self, keyword: str, surah: Union[int, str], edition_or_language: str) -> RemoteResult:
        return await self._fetch(
            f"/search/{path_segment(keyword)}/{surah}/{path_segment(edition_or_language)}",
            shape=lambda data: [search_match_from_api(m) for m in data["matches"]],
        )

    # ==========================================================================
    # Metadata
    # ==========================================================================

    async def get_meta(self) -> RemoteResult:
        return await self._fetch("/meta")

    async def get_editions(self, format: Optional[str] = None, language: Optional[str] = None,
                           type: Optional[str] = None) -> RemoteResult:
        return await self._fetch(
            "/edition",
            params={"format": format, "language": language, "type": type},
            shape=lambda data: data if isinstance(data, list) else [data],
        )
