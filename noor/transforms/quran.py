"""
Quran record shapes

Every Quran read returns one of these shapes, whichever tier served it:

- surah summary: SURAH_SUMMARY_FIELDS
- surah:         SURAH_SUMMARY_FIELDS + ``ayahs`` (list of ayahs)
- ayah:          AYAH_FIELDS, plus ``surah`` (a surah summary) when listed
                 outside of its surah
- search match:  SEARCH_MATCH_FIELDS

The ``*_from_api`` functions pick those fields out of AlQuran Cloud payloads,
the ``*_from_mirror`` functions build them from sqlite mirror rows.
"""

from typing import Any, Dict, Iterable, List, Optional

SURAH_SUMMARY_FIELDS = (
    "number", "name", "englishName", "englishNameTranslation",
    "numberOfAyahs", "revelationType",
)
AYAH_FIELDS = (
    "number", "text", "numberInSurah", "juz", "manzil",
    "page", "ruku", "hizbQuarter", "sajda",
)
SEARCH_MATCH_FIELDS = ("number", "text", "numberInSurah", "surah")

DEFAULT_ARABIC_EDITION = "quran-uthmani"


def is_translation_edition(edition: Optional[str]) -> bool:
    """English editions are served from the stored translation, everything else from the Arabic text."""
    return bool(edition) and edition.startswith("en.")


# =============================================================================
# AlQuran Cloud payloads
# =============================================================================

def _sajda_flag(value: Any) -> bool:
    # The API sends False or an object like {"id": 1, "recommended": true, "obligatory": false}
    return bool(value)


def surah_summary_from_api(data: Dict) -> Dict:
    return {
        "number": int(data["number"]),
        "name": data.get("name", ""),
        "englishName": data.get("englishName", ""),
        "englishNameTranslation": data.get("englishNameTranslation", ""),
        "numberOfAyahs": int(data.get("numberOfAyahs") or len(data.get("ayahs") or [])),
        "revelationType": data.get("revelationType", ""),
    }


def ayah_from_api(data: Dict, with_surah: bool = False) -> Dict:
    ayah = {
        "number": int(data["number"]),
        "text": data.get("text", ""),
        "numberInSurah": int(data["numberInSurah"]),
        "juz": int(data.get("juz") or 0),
        "manzil": int(data.get("manzil") or 0),
        "page": int(data.get("page") or 0),
        "ruku": int(data.get("ruku") or 0),
        "hizbQuarter": int(data.get("hizbQuarter") or 0),
        "sajda": _sajda_flag(data.get("sajda")),
    }
    if with_surah:
        ayah["surah"] = surah_summary_from_api(data["surah"])
    return ayah


def surah_from_api(data: Dict) -> Dict:
    surah = surah_summary_from_api(data)
    surah["ayahs"] = [ayah_from_api(a) for a in data.get("ayahs") or []]
    return surah


def search_match_from_api(data: Dict) -> Dict:
    return {
        "number": int(data["number"]),
        "text": data.get("text", ""),
        "numberInSurah": int(data["numberInSurah"]),
        "surah": surah_summary_from_api(data["surah"]),
    }


# =============================================================================
# Mirror rows
# =============================================================================

def surah_summary_from_mirror(row: Dict) -> Dict:
    """
    Mirror surah row -> surah summary.

    The mirror stores the English name in ``name`` and the Arabic one in
    ``name_arabic``; the API calls them ``englishName`` and ``name``.
    """
    return {
        "number": row["number"],
        "name": row["name_arabic"],
        "englishName": row["name"],
        "englishNameTranslation": row["name_translation"],
        "numberOfAyahs": row["number_of_ayahs"],
        "revelationType": row["revelation_type"],
    }


def ayah_text_for_edition(row: Dict, edition: Optional[str]) -> str:
    if is_translation_edition(edition):
        return row.get("translation") or row.get("text") or ""
    return row["text_arabic"]


def ayah_from_mirror(row: Dict, edition: Optional[str] = DEFAULT_ARABIC_EDITION,
                     surah_row: Optional[Dict] = None) -> Dict:
    """Mirror ayah row -> ayah, with the text picked for ``edition``."""
    ayah = {
        "number": row["number"],
        "text": ayah_text_for_edition(row, edition),
        "numberInSurah": row["number_in_surah"],
        "juz": row["juz"],
        "manzil": row["manzil"],
        "page": row["page"],
        "ruku": row["ruku"],
        "hizbQuarter": row["hizb_quarter"],
        "sajda": bool(row["sajda"]),
    }
    if surah_row is not None:
        ayah["surah"] = surah_summary_from_mirror(surah_row)
    return ayah


def surah_from_mirror(row: Dict, ayah_rows: Iterable[Dict],
                      edition: Optional[str] = DEFAULT_ARABIC_EDITION) -> Dict:
    surah = surah_summary_from_mirror(row)
    surah["ayahs"] = [ayah_from_mirror(a, edition) for a in ayah_rows]
    return surah


def search_match_from_mirror(row: Dict, surah_row: Dict, edition: Optional[str]) -> Dict:
    return {
        "number": row["number"],
        "text": ayah_text_for_edition(row, edition),
        "numberInSurah": row["number_in_surah"],
        "surah": surah_summary_from_mirror(surah_row),
    }


def paginate(items: List, offset: Optional[int] = None, limit: Optional[int] = None) -> List:
    """Apply the API's offset/limit semantics to a listing."""
    if offset:
        items = items[offset:]
    if limit:
        items = items[:limit]
    return items
