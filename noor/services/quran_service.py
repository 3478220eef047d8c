"""
Quran read operations

Each operation is one read-through resolution: AlQuran Cloud first, the
sqlite mirror when the API is down, and Redis in front of both.

Not-found policy:
    - single surahs and ayahs: an API "not found" is final
    - listings (surah list, divisions, sajda, search): an empty or missing
      API answer is checked against the mirror as well
"""

import logging
import re
from typing import Dict, List, Optional, Tuple, Union

from ..config import QuranApiConfig, quran_api_config
from ..exceptions import InvalidReferenceError
from ..mirror.quran_mirror import QuranMirror
from ..remote.quran_api import DIVISIONS, QuranApiClient
from ..resolver import ReadThroughResolver, Resolution
from ..transforms.quran import (
    DEFAULT_ARABIC_EDITION,
    ayah_from_mirror,
    is_translation_edition,
    paginate,
    search_match_from_mirror,
    surah_from_mirror,
    surah_summary_from_mirror,
)

logger = logging.getLogger(__name__)

TOTAL_SURAHS = 114
TOTAL_AYAHS = 6236

_REFERENCE_RE = re.compile(r"^(\d+):(\d+)$", re.ASCII)


def parse_ayah_reference(reference: Union[str, int]) -> Tuple[Optional[int], int]:
    """
    Parse ``surah:ayah`` or an absolute ayah number.

    Returns ``(surah, ayah_in_surah)`` for the first form and
    ``(None, absolute_number)`` for the second.

    Raises:
        InvalidReferenceError: for anything else
    """
    text = str(reference).strip()
    match = _REFERENCE_RE.match(text)
    if match:
        surah, ayah = int(match.group(1)), int(match.group(2))
        if surah < 1 or ayah < 1:
            raise InvalidReferenceError(f"Invalid ayah reference: {reference}")
        return surah, ayah
    if text.isascii() and text.isdigit() and int(text) >= 1:
        return None, int(text)
    raise InvalidReferenceError(f"Invalid ayah reference: {reference}")


def normalize_reference(reference: Union[str, int]) -> str:
    surah, ayah = parse_ayah_reference(reference)
    return f"{surah}:{ayah}" if surah is not None else str(ayah)


class QuranService:
    """Quran reads with API -> mirror fallback and caching."""

    def __init__(
        self,
        resolver: ReadThroughResolver,
        remote: QuranApiClient,
        mirror: QuranMirror,
        config: Optional[QuranApiConfig] = None,
    ):
        self.resolver = resolver
        self.remote = remote
        self.mirror = mirror
        self.config = config or quran_api_config

    async def _resolve(self, operation: str, params: Optional[Dict], remote, fallback=None, **options) -> Resolution:
        return await self.resolver.resolve(
            operation, params, remote, fallback, remote_timeout=self.remote.timeout, **options
        )

    # =========================================================================
    # Surahs
    # =========================================================================

    async def list_surahs(self) -> Resolution:
        """All surahs without ayahs."""
        async def from_mirror():
            return [surah_summary_from_mirror(row) for row in await self.mirror.list_surahs()]

        return await self._resolve(
            "quran:surahs", None, self.remote.list_surahs, from_mirror, fallback_on_not_found=True
        )

    async def get_surah(self, number: int, edition: Optional[str] = None) -> Resolution:
        edition = edition or DEFAULT_ARABIC_EDITION

        async def from_mirror():
            row = await self.mirror.get_surah(number)
            return surah_from_mirror(row, row["ayahs"], edition) if row else None

        return await self._resolve(
            "quran:surah", {"number": number, "edition": edition},
            lambda: self.remote.get_surah(number, edition), from_mirror,
        )

    async def get_surah_editions(self, number: int, editions: List[str]) -> Resolution:
        """One surah in several editions: ``{edition: surah}``."""
        async def from_mirror():
            row = await self.mirror.get_surah(number)
            if not row:
                return None
            return {edition: surah_from_mirror(row, row["ayahs"], edition) for edition in editions}

        return await self._resolve(
            "quran:surah_editions", {"number": number, "editions": ",".join(editions)},
            lambda: self.remote.get_surah_editions(number, editions), from_mirror,
        )

    # =========================================================================
    # Ayahs
    # =========================================================================

    async def _mirror_ayah(self, reference: str) -> Optional[Dict]:
        surah, ayah = parse_ayah_reference(reference)
        if surah is None:
            return await self.mirror.get_ayah_by_number(ayah)
        return await self.mirror.get_ayah(surah, ayah)

    async def get_ayah(self, reference: Union[str, int], edition: Optional[str] = None) -> Resolution:
        """
        Single ayah by ``surah:ayah`` or absolute number.

        Raises:
            InvalidReferenceError: if the reference can't be parsed
        """
        reference = normalize_reference(reference)
        edition = edition or DEFAULT_ARABIC_EDITION

        async def from_mirror():
            row = await self._mirror_ayah(reference)
            return ayah_from_mirror(row, edition, surah_row=row["surah"]) if row else None

        return await self._resolve(
            "quran:ayah", {"reference": reference, "edition": edition},
            lambda: self.remote.get_ayah(reference, edition), from_mirror,
        )

    async def get_ayah_editions(self, reference: Union[str, int], editions: List[str]) -> Resolution:
        reference = normalize_reference(reference)

        async def from_mirror():
            row = await self._mirror_ayah(reference)
            if not row:
                return None
            return {edition: ayah_from_mirror(row, edition, surah_row=row["surah"]) for edition in editions}

        return await self._resolve(
            "quran:ayah_editions", {"reference": reference, "editions": ",".join(editions)},
            lambda: self.remote.get_ayah_editions(reference, editions), from_mirror,
        )

    async def get_division(
        self,
        division: str,
        number: int,
        edition: Optional[str] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Resolution:
        """Ayahs of a juz, page, manzil, ruku or hizb quarter."""
        if division not in DIVISIONS:
            raise InvalidReferenceError(f"Unknown division: {division}")
        edition = edition or DEFAULT_ARABIC_EDITION

        async def from_mirror():
            rows = await self.mirror.get_division(division, number)
            ayahs = [ayah_from_mirror(row, edition, surah_row=row["surah"]) for row in rows]
            return paginate(ayahs, offset, limit)

        return await self._resolve(
            "quran:division",
            {"division": division, "number": number, "edition": edition, "offset": offset, "limit": limit},
            lambda: self.remote.get_division(division, number, edition, offset, limit),
            from_mirror,
            fallback_on_not_found=True,
        )

    async def get_sajda_ayahs(self, edition: Optional[str] = None) -> Resolution:
        edition = edition or DEFAULT_ARABIC_EDITION

        async def from_mirror():
            rows = await self.mirror.get_sajda_ayahs()
            return [ayah_from_mirror(row, edition, surah_row=row["surah"]) for row in rows]

        return await self._resolve(
            "quran:sajda", {"edition": edition},
            lambda: self.remote.get_sajda_ayahs(edition), from_mirror,
            fallback_on_not_found=True,
        )

    async def search(
        self,
        keyword: str,
        surah: Union[int, str] = "all",
        edition: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Resolution:
        """
        Keyword search, never cached.

        The mirror searches the stored English translation when an English
        edition or a non-Arabic language is asked for, the Arabic text otherwise.
        """
        surah_filter = None if str(surah) == "all" else int(surah)
        text_edition = edition or (
            self.config.english_edition if language and language != "ar" else self.config.arabic_edition
        )

        async def from_mirror():
            rows = await self.mirror.search(
                keyword, surah_filter, translation=is_translation_edition(text_edition)
            )
            return [search_match_from_mirror(row, row["surah"], text_edition) for row in rows]

        return await self._resolve(
            "quran:search", {"keyword": keyword, "surah": surah, "edition": edition, "language": language},
            lambda: self.remote.search(keyword, surah, edition or language or "en"),
            from_mirror,
            fallback_on_not_found=True,
            cacheable=False,
        )

    # =========================================================================
    # Metadata (API only)
    # =========================================================================

    async def get_meta(self) -> Resolution:
        return await self._resolve("quran:meta", None, self.remote.get_meta)

    async def get_editions(
        self,
        format: Optional[str] = None,
        language: Optional[str] = None,
        type: Optional[str] = None,
    ) -> Resolution:
        return await self._resolve(
            "quran:editions", {"format": format, "language": language, "type": type},
            lambda: self.remote.get_editions(format, language, type),
        )

    def get_default_editions(self) -> Dict[str, str]:
        return {
            "arabic": self.config.arabic_edition,
            "english": self.config.english_edition,
            "audio": self.config.audio_edition,
        }
