"""
Quran mirror accessor

Read queries return plain row dicts in the mirror's own column naming; ayah
rows listed outside of their surah carry the surah row under ``surah``.
Conversion to the API shape lives in noor.transforms.quran.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .database import MirrorDatabase, like_pattern

logger = logging.getLogger(__name__)

# API division name -> ayahs column
DIVISION_COLUMNS = {
    "juz": "juz",
    "page": "page",
    "manzil": "manzil",
    "ruku": "ruku",
    "hizbQuarter": "hizb_quarter",
}

SEARCH_LIMIT = 50

SURAH_COLUMNS = ("number", "name", "name_arabic", "name_translation", "revelation_type", "number_of_ayahs")
AYAH_COLUMNS = (
    "number", "surah_number", "number_in_surah", "text", "text_arabic", "translation",
    "juz", "manzil", "page", "ruku", "hizb_quarter", "sajda",
)

_AYAH_WITH_SURAH = (
    "SELECT "
    + ", ".join(f"a.{c}" for c in AYAH_COLUMNS) + ", "
    + ", ".join(f"s.{c} AS surah_{c}" for c in SURAH_COLUMNS)
    + " FROM ayahs a JOIN surahs s ON s.number = a.surah_number"
)


def _nest_surah(row: Dict) -> Dict:
    """Move the joined ``surah_*`` columns into a nested surah row."""
    ayah = {c: row[c] for c in AYAH_COLUMNS}
    ayah["surah"] = {c: row[f"surah_{c}"] for c in SURAH_COLUMNS}
    return ayah


class QuranMirror:
    """Queries against the ``surahs`` and ``ayahs`` tables."""

    def __init__(self, db: MirrorDatabase):
        self.db = db

    async def _ayahs_with_surah(self, where: str, params: Iterable = (), limit: Optional[int] = None) -> List[Dict]:
        sql = f"{_AYAH_WITH_SURAH} WHERE {where} ORDER BY a.number"
        if limit:
            sql += f" LIMIT {int(limit)}"
        rows = await self.db.fetch_all(sql, tuple(params))
        return [_nest_surah(r) for r in rows]

    async def list_surahs(self) -> List[Dict]:
        return await self.db.fetch_all("SELECT * FROM surahs ORDER BY number")

    async def get_surah(self, number: int) -> Optional[Dict]:
        """Surah row with its ordered ayah rows under ``ayahs``."""
        surah = await self.db.fetch_one("SELECT * FROM surahs WHERE number = ?", (number,))
        if not surah:
            return None
        surah["ayahs"] = await self.db.fetch_all(
            "SELECT * FROM ayahs WHERE surah_number = ? ORDER BY number_in_surah", (number,)
        )
        return surah

    async def get_ayah(self, surah_number: int, number_in_surah: int) -> Optional[Dict]:
        rows = await self._ayahs_with_surah(
            "a.surah_number = ? AND a.number_in_surah = ?", (surah_number, number_in_surah)
        )
        return rows[0] if rows else None

    async def get_ayah_by_number(self, number: int) -> Optional[Dict]:
        """Ayah by its absolute number (1-6236)."""
        rows = await self._ayahs_with_surah("a.number = ?", (number,))
        return rows[0] if rows else None

    async def get_division(self, division: str, number: int) -> List[Dict]:
        column = DIVISION_COLUMNS.get(division)
        if column is None:
            raise ValueError(f"Unknown division: {division}")
        return await self._ayahs_with_surah(f"a.{column} = ?", (number,))

    async def get_sajda_ayahs(self) -> List[Dict]:
        return await self._ayahs_with_surah("a.sajda = 1")

    async def search(self, keyword: str, surah: Optional[int] = None, translation: bool = False) -> List[Dict]:
        """
        Case-insensitive substring search over the Arabic text, or over the
        stored translation when ``translation`` is set. At most SEARCH_LIMIT
        ayahs are returned.
        """
        column = "a.translation" if translation else "a.text_arabic"
        where = f"{column} LIKE ? ESCAPE '\\'"
        params: List = [like_pattern(keyword)]
        if surah is not None:
            where += " AND a.surah_number = ?"
            params.append(surah)
        return await self._ayahs_with_surah(where, params, limit=SEARCH_LIMIT)

    async def count(self) -> Dict[str, int]:
        return {
            "surahs": await self.db.scalar("SELECT COUNT(*) FROM surahs"),
            "ayahs": await self.db.scalar("SELECT COUNT(*) FROM ayahs"),
        }

    # =========================================================================
    # Seeding
    # =========================================================================

    def replace_all(self, surahs: List[Dict], ayahs: List[Dict]) -> None:
        """
        Replace the whole Quran corpus in one transaction.

        ``surahs`` and ``ayahs`` are rows keyed by SURAH_COLUMNS and
        AYAH_COLUMNS. If anything fails the previous content is kept.
        """
        self.db.initialize()
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM ayahs")
            conn.execute("DELETE FROM surahs")
            conn.executemany(
                f"INSERT INTO surahs ({', '.join(SURAH_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in SURAH_COLUMNS)})",
                [tuple(s[c] for c in SURAH_COLUMNS) for s in surahs],
            )
            conn.executemany(
                f"INSERT INTO ayahs ({', '.join(AYAH_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in AYAH_COLUMNS)})",
                [tuple(a[c] for c in AYAH_COLUMNS) for a in ayahs],
            )
        logger.info(f"Mirror now holds {len(surahs)} surahs and {len(ayahs)} ayahs")
