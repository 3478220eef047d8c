"""
Hadith seeding job

Two sources can populate the mirror:

- HadithAPI: every book is paged through ``/hadiths`` (needs HADITH_API_KEY)
- a directory of hadith-json corpus files, one ``<collection>.json`` per
  collection with ``metadata``, ``chapters`` and ``hadiths``

Either way the mirror's hadiths are replaced in a single transaction.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..config import HadithApiConfig, SeedConfig, hadith_api_config, seed_config
from ..exceptions import SeedingError
from ..mirror.hadith_mirror import HadithMirror
from ..transforms.hadith import extract_tags
from .base import SeedingClient

logger = logging.getLogger(__name__)


def _optional_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def record_from_api(hadith: Dict) -> Dict:
    """HadithAPI hadith -> mirror record."""
    chapter = hadith.get("chapter") or {}
    english = hadith.get("hadithEnglish") or ""
    return {
        "collection_name": hadith["bookSlug"],
        "book_number": _optional_int((hadith.get("book") or {}).get("id")) or 0,
        "hadith_number": str(hadith["hadithNumber"]),
        "chapter": chapter.get("chapterEnglish") or "General",
        "chapter_number": _optional_int(chapter.get("chapterNumber")),
        "arabic_text": hadith.get("hadithArabic") or "",
        "english_text": english,
        "urdu_text": hadith.get("hadithUrdu") or "",
        "grade": hadith.get("status") or "",
        "narrator": hadith.get("englishNarrator") or "",
        "tags": extract_tags(english),
    }


def records_from_json(collection: str, data: Dict) -> List[Dict]:
    """hadith-json corpus file -> mirror records."""
    chapters = {chapter["id"]: chapter for chapter in data.get("chapters") or []}
    title = ((data.get("metadata") or {}).get("english") or {}).get("title") or collection

    records = []
    for hadith in data.get("hadiths") or []:
        chapter = chapters.get(hadith.get("chapterId"))
        english = (hadith.get("english") or {}).get("text") or ""
        if not english.strip():
            english = hadith.get("arabic") or ""
        if not english:
            continue

        records.append({
            "collection_name": collection,
            "book_number": hadith.get("bookId") or hadith.get("chapterId") or 0,
            "hadith_number": str(hadith["idInBook"]),
            "chapter": (chapter or {}).get("english") or title,
            "chapter_number": None,
            "arabic_text": hadith.get("arabic") or "",
            "english_text": english,
            "urdu_text": "",
            "grade": "",
            "narrator": (hadith.get("english") or {}).get("narrator") or "",
            "tags": extract_tags(english),
        })
    return records


class HadithSeeder:
    """Replaces the mirror's hadiths with a fresh copy from HadithAPI or local files."""

    def __init__(
        self,
        mirror: HadithMirror,
        client: Optional[SeedingClient] = None,
        api_config: Optional[HadithApiConfig] = None,
        config: Optional[SeedConfig] = None,
    ):
        self.mirror = mirror
        self.client = client or SeedingClient()
        self.api_config = api_config or hadith_api_config
        self.config = config or seed_config

    # =========================================================================
    # HadithAPI
    # =========================================================================

    def _params(self, **params) -> Dict:
        return {"apiKey": self.api_config.api_key, **params}

    def fetch_collections(self) -> List[str]:
        body = self.client.get_json(f"{self.api_config.base_url}/books", self._params(), label="books")
        try:
            return [book["bookSlug"] for book in body["books"]]
        except (KeyError, TypeError) as e:
            raise SeedingError("Unexpected books payload") from e

    def fetch_collection(self, collection: str) -> Iterator[Dict]:
        """Yield mirror records for every hadith of ``collection``, page by page."""
        page, last_page = 1, 1
        while page <= last_page:
            body = self.client.get_json(
                f"{self.api_config.base_url}/hadiths",
                self._params(book=collection, paginate=self.config.hadith_page_size, page=page),
                label=f"{collection} page {page}",
            )
            try:
                listing = body["hadiths"]
                last_page = int(listing.get("last_page") or 1)
                hadiths = listing["data"]
            except (KeyError, TypeError, ValueError) as e:
                raise SeedingError(f"Unexpected hadith page for {collection}") from e

            logger.info(f"  {collection}: page {page}/{last_page} ({len(hadiths)} hadiths)")
            for hadith in hadiths:
                yield record_from_api(hadith)
            page += 1

    def fetch_from_api(self, collections: Optional[List[str]] = None) -> List[Dict]:
        if not self.api_config.api_key:
            raise SeedingError("HADITH_API_KEY is not set")

        records = []
        for collection in collections or self.fetch_collections():
            logger.info(f"Fetching {collection}...")
            records.extend(self.fetch_collection(collection))
        return records

    # =========================================================================
    # hadith-json files
    # =========================================================================

    def load_from_json(self, directory, collections: Optional[List[str]] = None) -> List[Dict]:
        directory = Path(directory)
        if not directory.is_dir():
            raise SeedingError(f"Not a directory: {directory}")

        records = []
        for path in sorted(directory.glob("*.json")):
            collection = path.stem
            if collections and collection not in collections:
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise SeedingError(f"Could not read {path.name}: {e}") from e

            collection_records = records_from_json(collection, data)
            logger.info(f"Loaded {len(collection_records)} hadiths for {collection} from {path.name}")
            records.extend(collection_records)
        return records

    # =========================================================================
    # Job
    # =========================================================================

    def run(self, json_dir=None, collections: Optional[List[str]] = None) -> Dict[str, int]:
        """Fetch everything first, then replace the mirror content."""
        if json_dir is not None:
            records = self.load_from_json(json_dir, collections)
        else:
            records = self.fetch_from_api(collections)

        if not records:
            raise SeedingError("No hadiths fetched, keeping the current mirror")

        self.mirror.replace_all(records)
        totals: Dict[str, int] = {}
        for record in records:
            totals[record["collection_name"]] = totals.get(record["collection_name"], 0) + 1
        for collection, count in totals.items():
            logger.info(f"  {collection}: {count} hadiths")
        logger.info(f"Seeded {len(records)} hadiths in {len(totals)} collections")
        return totals
