"""
Local mirror database connection and utilities

The mirror is a sqlite copy of the remote corpora, written only by the
seeding jobs and read by the fallback tier. Queries run in a worker thread
so that the event loop is never blocked on disk I/O.
"""

import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Sequence

from ..config import mirror_config
from ..exceptions import MirrorUnavailableError

logger = logging.getLogger(__name__)

SCHEMA = """
    -- Quran: one row per surah, one row per ayah
    CREATE TABLE IF NOT EXISTS surahs (
        number INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        name_arabic TEXT NOT NULL,
        name_translation TEXT NOT NULL,
        revelation_type TEXT NOT NULL,
        number_of_ayahs INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS ayahs (
        number INTEGER PRIMARY KEY,
        surah_number INTEGER NOT NULL REFERENCES surahs(number),
        number_in_surah INTEGER NOT NULL,
        text TEXT NOT NULL,
        text_arabic TEXT NOT NULL,
        translation TEXT,
        juz INTEGER NOT NULL,
        manzil INTEGER NOT NULL,
        page INTEGER NOT NULL,
        ruku INTEGER NOT NULL,
        hizb_quarter INTEGER NOT NULL,
        sajda INTEGER NOT NULL DEFAULT 0,
        UNIQUE(surah_number, number_in_surah)
    );

    CREATE INDEX IF NOT EXISTS idx_ayahs_juz ON ayahs(juz);
    CREATE INDEX IF NOT EXISTS idx_ayahs_page ON ayahs(page);
    CREATE INDEX IF NOT EXISTS idx_ayahs_manzil ON ayahs(manzil);
    CREATE INDEX IF NOT EXISTS idx_ayahs_ruku ON ayahs(ruku);
    CREATE INDEX IF NOT EXISTS idx_ayahs_hizb ON ayahs(hizb_quarter);

    -- Hadith: one row per hadith
    CREATE TABLE IF NOT EXISTS hadiths (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        collection_name TEXT NOT NULL,
        book_number INTEGER NOT NULL DEFAULT 0,
        hadith_number TEXT NOT NULL,
        chapter TEXT NOT NULL,
        chapter_number INTEGER,
        arabic_text TEXT NOT NULL DEFAULT '',
        english_text TEXT NOT NULL DEFAULT '',
        urdu_text TEXT,
        grade TEXT,
        narrator TEXT,
        tags TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(collection_name, hadith_number)
    );

    CREATE INDEX IF NOT EXISTS idx_hadiths_collection_chapter ON hadiths(collection_name, chapter);
"""


def dict_from_row(row: sqlite3.Row) -> dict:
    """Convert sqlite3.Row to dictionary"""
    return dict(zip(row.keys(), row))


class MirrorDatabase:
    """
    Handle to the sqlite mirror.

    ``ready()`` creates the schema once; callers arriving while that is in
    progress await the same attempt. A failed attempt is retried by the next
    caller.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = str(db_path or mirror_config.db_path)
        self._ready: Optional[asyncio.Future] = None

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Connection whose statements commit together or not at all."""
        with self.connect() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def initialize(self) -> None:
        """Create the mirror schema if it does not exist yet."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.executescript(SCHEMA)
            conn.commit()
        logger.info(f"Mirror database ready: {self.db_path}")

    async def ready(self) -> None:
        if self._ready is None or (self._ready.done() and self._ready.exception() is not None):
            self._ready = asyncio.ensure_future(asyncio.to_thread(self.initialize))
        try:
            await asyncio.shield(self._ready)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Mirror database unavailable at {self.db_path}: {e}")
            raise MirrorUnavailableError(f"Mirror database unavailable: {e}") from e

    # =========================================================================
    # Queries
    # =========================================================================

    def _fetch_all_sync(self, sql: str, params: Sequence[Any]) -> List[Dict]:
        try:
            with self.connect() as conn:
                cursor = conn.execute(sql, tuple(params))
                return [dict_from_row(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"Mirror query failed: {e}")
            raise MirrorUnavailableError(f"Mirror query failed: {e}") from e

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict]:
        await self.ready()
        return await asyncio.to_thread(self._fetch_all_sync, sql, params)

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict]:
        rows = await self.fetch_all(sql, params)
        return rows[0] if rows else None

    async def scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        row = await self.fetch_one(sql, params)
        return next(iter(row.values())) if row else None

    async def stats(self) -> Dict[str, int]:
        """Row counts per mirrored table."""
        stats = {}
        for table in ('surahs', 'ayahs', 'hadiths'):
            stats[table] = await self.scalar(f"SELECT COUNT(*) FROM {table}")
        return stats


def like_pattern(text: str) -> str:
    """Escape ``text`` for a substring match with ``LIKE ? ESCAPE '\\'``."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
