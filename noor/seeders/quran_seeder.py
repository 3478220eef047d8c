"""
Quran seeding job

Fetches the Arabic text, the English translation and the surah metadata
from AlQuran Cloud and replaces the mirror's Quran content with them.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..config import QuranApiConfig, quran_api_config
from ..exceptions import SeedingError
from ..mirror.quran_mirror import QuranMirror
from .base import SeedingClient

logger = logging.getLogger(__name__)


def build_surah_rows(meta: List[Dict], arabic: List[Dict]) -> List[Dict]:
    counts = {s["number"]: len(s.get("ayahs") or []) for s in arabic}
    return [
        {
            "number": s["number"],
            "name": s["englishName"],
            "name_arabic": s["name"],
            "name_translation": s["englishNameTranslation"],
            "revelation_type": s["revelationType"],
            "number_of_ayahs": s.get("numberOfAyahs") or counts.get(s["number"], 0),
        }
        for s in meta
    ]


def build_ayah_rows(arabic: List[Dict], english: List[Dict]) -> List[Dict]:
    """Merge the Arabic and English editions ayah by ayah."""
    translations = {
        (surah["number"], ayah["numberInSurah"]): ayah.get("text")
        for surah in english
        for ayah in surah.get("ayahs") or []
    }

    rows = []
    for surah in arabic:
        for ayah in surah.get("ayahs") or []:
            rows.append({
                "number": ayah["number"],
                "surah_number": surah["number"],
                "number_in_surah": ayah["numberInSurah"],
                "text": ayah["text"],
                "text_arabic": ayah["text"],
                "translation": translations.get((surah["number"], ayah["numberInSurah"])),
                "juz": ayah["juz"],
                "manzil": ayah["manzil"],
                "page": ayah["page"],
                "ruku": ayah["ruku"],
                "hizb_quarter": ayah["hizbQuarter"],
                "sajda": 1 if ayah.get("sajda") else 0,
            })
    return rows


class QuranSeeder:
    """Replaces the mirror's surahs and ayahs with a fresh copy of the API corpus."""

    def __init__(
        self,
        mirror: QuranMirror,
        client: Optional[SeedingClient] = None,
        api_config: Optional[QuranApiConfig] = None,
    ):
        self.mirror = mirror
        self.client = client or SeedingClient()
        self.api_config = api_config or quran_api_config

    def _fetch_edition(self, edition: str) -> List[Dict]:
        logger.info(f"Fetching Quran edition {edition}...")
        body = self.client.get_json(f"{self.api_config.base_url}/quran/{edition}", label=f"edition {edition}")
        try:
            return body["data"]["surahs"]
        except (KeyError, TypeError) as e:
            raise SeedingError(f"Unexpected payload for edition {edition}") from e

    def _fetch_meta(self) -> List[Dict]:
        logger.info("Fetching Quran metadata...")
        body = self.client.get_json(f"{self.api_config.base_url}/meta", label="metadata")
        try:
            return body["data"]["surahs"]["references"]
        except (KeyError, TypeError) as e:
            raise SeedingError("Unexpected metadata payload") from e

    def fetch(self) -> Tuple[List[Dict], List[Dict]]:
        """Fetch the whole corpus. Nothing is written until every fetch succeeded."""
        arabic = self._fetch_edition(self.api_config.arabic_edition)
        english = self._fetch_edition(self.api_config.english_edition)
        meta = self._fetch_meta()

        surahs = build_surah_rows(meta, arabic)
        ayahs = build_ayah_rows(arabic, english)
        if not surahs or not ayahs:
            raise SeedingError("AlQuran Cloud returned an empty corpus")

        for surah in surahs:
            logger.debug(f"Surah {surah['number']}: {surah['name']} ({surah['number_of_ayahs']} ayahs)")
        return surahs, ayahs

    def run(self) -> Dict[str, int]:
        surahs, ayahs = self.fetch()
        self.mirror.replace_all(surahs, ayahs)
        logger.info(f"Seeded {len(surahs)} surahs and {len(ayahs)} ayahs")
        return {"surahs": len(surahs), "ayahs": len(ayahs)}
