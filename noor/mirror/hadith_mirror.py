"""
Hadith mirror accessor

Hadith numbers are stored as text (some collections use suffixed numbers
such as "12a"), so ordering uses the numeric value where there is one.
"""

import json
import logging
from typing import Dict, List, Optional, Tuple

from .database import MirrorDatabase, like_pattern

logger = logging.getLogger(__name__)

HADITH_COLUMNS = (
    "collection_name", "book_number", "hadith_number", "chapter", "chapter_number",
    "arabic_text", "english_text", "urdu_text", "grade", "narrator", "tags",
)
_REQUIRED_DEFAULTS = {"book_number": 0, "chapter": "", "arabic_text": "", "english_text": ""}

# Non-numeric hadith numbers sort after every numbered chapter
_CHAPTER_ORDER_NUMBER = (
    "CASE WHEN hadith_number GLOB '[0-9]*' AND hadith_number NOT GLOB '*[^0-9]*' "
    "THEN CAST(hadith_number AS INTEGER) ELSE 999999 END"
)
# ...and before every numbered hadith in listings
_LISTING_ORDER_NUMBER = "CAST(hadith_number AS INTEGER)"


class HadithMirror:
    """Queries against the ``hadiths`` table."""

    def __init__(self, db: MirrorDatabase):
        self.db = db

    async def list_collections(self) -> List[Dict]:
        """One row per collection: collection_name, hadith_count, chapter_count."""
        return await self.db.fetch_all(
            """
            SELECT collection_name,
                   COUNT(*) AS hadith_count,
                   COUNT(DISTINCT chapter) AS chapter_count
            FROM hadiths
            GROUP BY collection_name
            ORDER BY collection_name
            """
        )

    async def sorted_chapters(self, collection: str) -> List[Dict]:
        """
        Chapters of a collection, ordered by the lowest hadith number in each.

        Rows carry ``chapter`` and ``chapter_number``, the upstream chapter
        number (None for rows seeded without one).
        """
        return await self.db.fetch_all(
            f"""
            SELECT chapter, chapter_number, MIN({_CHAPTER_ORDER_NUMBER}) AS first_hadith
            FROM hadiths
            WHERE collection_name = ?
            GROUP BY chapter, chapter_number
            ORDER BY first_hadith, chapter
            """,
            (collection,),
        )

    async def find_hadiths(
        self,
        collection: Optional[str] = None,
        chapter: Optional[str] = None,
        chapter_number: Optional[int] = None,
        hadith_number: Optional[str] = None,
        status: Optional[str] = None,
        english: Optional[str] = None,
        urdu: Optional[str] = None,
        arabic: Optional[str] = None,
        per_page: int = 25,
        page: int = 1,
    ) -> Tuple[List[Dict], int]:
        """
        Filtered page of hadith rows plus the total number of matches.

        Collection, chapter, number and grade match exactly; the text filters
        are case-insensitive substring matches.
        """
        conditions = []
        params: List = []

        for column, value in (
            ("collection_name", collection),
            ("chapter", chapter),
            ("chapter_number", chapter_number),
            ("hadith_number", hadith_number),
            ("grade", status),
        ):
            if value:
                conditions.append(f"{column} = ?")
                params.append(value)

        for column, value in (("english_text", english), ("urdu_text", urdu), ("arabic_text", arabic)):
            if value:
                conditions.append(f"{column} LIKE ? ESCAPE '\\'")
                params.append(like_pattern(value))

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        total = await self.db.scalar(f"SELECT COUNT(*) FROM hadiths {where}", params)
        rows = await self.db.fetch_all(
            f"SELECT * FROM hadiths {where} ORDER BY {_LISTING_ORDER_NUMBER}, id LIMIT ? OFFSET ?",
            [*params, per_page, (page - 1) * per_page],
        )
        return rows, total or 0

    async def get_hadith(self, hadith_number: str, collection: Optional[str] = None) -> Optional[Dict]:
        if collection:
            return await self.db.fetch_one(
                "SELECT * FROM hadiths WHERE collection_name = ? AND hadith_number = ?",
                (collection, hadith_number),
            )
        return await self.db.fetch_one(
            "SELECT * FROM hadiths WHERE hadith_number = ? ORDER BY collection_name LIMIT 1",
            (hadith_number,),
        )

    async def count(self) -> int:
        return await self.db.scalar("SELECT COUNT(*) FROM hadiths")

    # =========================================================================
    # Seeding
    # =========================================================================

    def replace_all(self, records: List[Dict]) -> None:
        """
        Replace every stored hadith with ``records`` in one transaction.

        Records are keyed by HADITH_COLUMNS; ``tags`` is a list and is stored
        as JSON. Duplicate (collection, number) pairs keep the last record.
        """
        self.db.initialize()
        rows = []
        for record in records:
            row = {**_REQUIRED_DEFAULTS, **{k: v for k, v in record.items() if v is not None}}
            row["tags"] = json.dumps(row.get("tags") or [], ensure_ascii=False)
            rows.append(tuple(row.get(c) for c in HADITH_COLUMNS))

        with self.db.transaction() as conn:
            conn.execute("DELETE FROM hadiths")
            conn.executemany(
                f"INSERT OR REPLACE INTO hadiths ({', '.join(HADITH_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in HADITH_COLUMNS)})",
                rows,
            )
        logger.info(f"Mirror now holds {len(rows)} hadiths")
