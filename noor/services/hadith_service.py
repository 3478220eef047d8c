"""
Hadith read operations

HadithAPI first, the sqlite mirror when the API is down (or when no API key
is configured), Redis in front of both. Free-text searches are not cached.
"""

import dataclasses
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..mirror.hadith_mirror import HadithMirror
from ..remote.base import RemoteResult
from ..remote.hadith_api import HadithApiClient
from ..resolver import ReadThroughResolver, Resolution
from ..transforms.hadith import (
    book_from_mirror,
    build_pagination,
    chapter_from_mirror,
    hadith_from_mirror,
    to_public_hadith,
)

logger = logging.getLogger(__name__)

__all__ = ['HadithFilters', 'HadithService', 'parse_chapter_number', 'to_public_hadith']

_CHAPTER_NUMBER_RE = re.compile(r"^\d+$", re.ASCII)


def parse_chapter_number(value) -> Optional[int]:
    """Positive ASCII chapter number, or None."""
    text = str(value).strip()
    if not _CHAPTER_NUMBER_RE.match(text) or int(text) < 1:
        return None
    return int(text)


class HadithFilters(BaseModel):
    """
    Hadith listing filters.

    ``chapter`` is a chapter number as listed by ``get_chapters`` for the
    same collection: HadithAPI's own number wherever the mirror has it.
    """
    collection: Optional[str] = Field(default=None, description="Collection slug, e.g. sahih-bukhari")
    chapter: Optional[str] = None
    hadith_number: Optional[str] = None
    status: Optional[str] = Field(default=None, description="Sahih, Hasan or Da`eef")
    english: Optional[str] = Field(default=None, description="Substring of the English text")
    urdu: Optional[str] = None
    arabic: Optional[str] = None
    per_page: int = Field(default=25, ge=1, le=100)
    page: int = Field(default=1, ge=1)

    @property
    def is_text_search(self) -> bool:
        return bool(self.english or self.urdu or self.arabic)

    def remote_params(self) -> Dict[str, Any]:
        """Filters under HadithAPI's parameter names."""
        return {
            "book": self.collection,
            "chapter": self.chapter,
            "hadithNumber": self.hadith_number,
            "status": self.status,
            "hadithEnglish": self.english,
            "hadithUrdu": self.urdu,
            "hadithArabic": self.arabic,
        }


class HadithService:
    """Hadith reads with API -> mirror fallback and caching."""

    def __init__(self, resolver: ReadThroughResolver, remote: HadithApiClient, mirror: HadithMirror):
        self.resolver = resolver
        self.remote = remote
        self.mirror = mirror

    async def _resolve(self, operation: str, params: Optional[Dict], remote, fallback, **options) -> Resolution:
        return await self.resolver.resolve(
            operation, params, remote, fallback, remote_timeout=self.remote.timeout, **options
        )

    async def list_collections(self) -> Resolution:
        """All collections (books) with hadith and chapter counts."""
        async def from_mirror():
            rows = await self.mirror.list_collections()
            return [
                book_from_mirror(row["collection_name"], position, row["hadith_count"], row["chapter_count"])
                for position, row in enumerate(rows, start=1)
            ]

        return await self._resolve(
            "hadith:collections", None, self.remote.list_books, from_mirror, fallback_on_not_found=True
        )

    async def _numbered_chapters(self, collection: str) -> List[Tuple[int, Dict]]:
        """``(number, row)`` per mirror chapter, in ``get_chapters`` order."""
        rows = await self.mirror.sorted_chapters(collection)
        return [(row["chapter_number"] or position, row) for position, row in enumerate(rows, start=1)]

    async def _all_chapters(self, collection: str) -> Resolution:
        async def from_mirror():
            numbered = await self._numbered_chapters(collection)
            return [chapter_from_mirror(collection, row["chapter"], number) for number, row in numbered]

        return await self._resolve(
            "hadith:chapters", {"collection": collection},
            lambda: self.remote.list_chapters(collection), from_mirror,
            fallback_on_not_found=True,
        )

    async def get_chapters(self, collection: str, per_page: int = 25, page: int = 1) -> Resolution:
        """
        One page of a collection's chapters: ``{"chapters": [...], "pagination": {...}}``.

        Mirror chapters are ordered by the lowest hadith number they contain.
        They keep their upstream chapter number; chapters seeded without one
        are numbered by position in that order.
        """
        resolution = await self._all_chapters(collection)
        if not resolution.found:
            return resolution

        chapters = resolution.value
        skip = (page - 1) * per_page
        value = {
            "chapters": chapters[skip:skip + per_page],
            "pagination": build_pagination(page, per_page, len(chapters)),
        }
        return dataclasses.replace(resolution, value=value)

    async def get_chapter_name(self, collection: str, chapter_number: int) -> Optional[str]:
        """English name of a chapter by the number ``get_chapters`` lists it under."""
        resolution = await self._all_chapters(collection)
        for chapter in resolution.value or []:
            if chapter["chapterNumber"] == str(chapter_number):
                return chapter["chapterEnglish"]
        return None

    async def _mirror_page(self, filters: HadithFilters) -> Optional[Dict]:
        number, chapter = None, None
        if filters.chapter:
            number = parse_chapter_number(filters.chapter)
            if number is None or not filters.collection:
                return None
            numbered = await self._numbered_chapters(filters.collection)
            chapter = next((row for n, row in numbered if n == number), None)
            if chapter is None:
                return None

        rows, total = await self.mirror.find_hadiths(
            collection=filters.collection,
            chapter=chapter["chapter"] if chapter else None,
            chapter_number=chapter["chapter_number"] if chapter else None,
            hadith_number=filters.hadith_number,
            status=filters.status,
            english=filters.english,
            urdu=filters.urdu,
            arabic=filters.arabic,
            per_page=filters.per_page,
            page=filters.page,
        )
        if not rows:
            return None
        if chapter is not None:
            rows = [dict(row, chapter_number=number) for row in rows]
        return {
            "hadiths": [hadith_from_mirror(row) for row in rows],
            "pagination": build_pagination(filters.page, filters.per_page, total),
        }

    async def find_hadiths(self, filters: HadithFilters) -> Resolution:
        """Filtered page of hadiths: ``{"hadiths": [...], "pagination": {...}}``."""
        return await self._resolve(
            "hadith:list", filters.model_dump(),
            lambda: self.remote.list_hadiths(filters.remote_params(), filters.per_page, filters.page),
            lambda: self._mirror_page(filters),
            fallback_on_not_found=True,
            cacheable=not filters.is_text_search,
        )

    async def get_hadith(self, hadith_number: str, collection: Optional[str] = None) -> Resolution:
        """
        Single hadith by number, optionally within one collection.

        Without a collection the first collection (by slug) holding that
        number wins on the mirror path.
        """
        hadith_number = str(hadith_number)

        async def from_remote() -> RemoteResult:
            result = await self.remote.list_hadiths(
                {"hadithNumber": hadith_number, "book": collection}, per_page=1, page=1
            )
            return RemoteResult.ok(result.data["hadiths"][0]) if result.is_ok else result

        async def from_mirror():
            row = await self.mirror.get_hadith(hadith_number, collection)
            return hadith_from_mirror(row) if row else None

        return await self._resolve(
            "hadith:item", {"number": hadith_number, "collection": collection}, from_remote, from_mirror
        )
