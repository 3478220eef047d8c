"""
Hadith record shapes

Hadith reads return HadithAPI-shaped records whichever tier served them:

- book:    BOOK_FIELDS
- chapter: CHAPTER_FIELDS
- hadith:  HADITH_FIELDS, with ``book`` and ``chapter`` nested
- page:    {"hadiths": [...], "pagination": PAGINATION_FIELDS}
"""

import math
from typing import Any, Dict, List

BOOK_FIELDS = (
    "id", "bookName", "writerName", "aboutWriter", "writerDeath",
    "bookSlug", "hadiths_count", "chapters_count",
)
CHAPTER_FIELDS = ("id", "chapterNumber", "chapterEnglish", "chapterUrdu", "chapterArabic", "bookSlug")
HADITH_FIELDS = (
    "id", "hadithNumber", "englishNarrator", "hadithEnglish", "hadithUrdu",
    "hadithArabic", "headingUrdu", "headingEnglish", "chapterId", "bookSlug",
    "volume", "status", "book", "chapter",
)
PAGINATION_FIELDS = ("current_page", "last_page", "per_page", "total", "from", "to")

# Collection display names
COLLECTION_NAMES = {
    'sahih-bukhari': 'Sahih al-Bukhari',
    'sahih-muslim': 'Sahih Muslim',
    'sunan-an-nasai': "Sunan an-Nasa'i",
    'sunan-abu-dawud': 'Sunan Abu Dawud',
    'jami-at-tirmidhi': 'Jami` at-Tirmidhi',
    'sunan-ibn-majah': 'Sunan Ibn Majah',
    'muwatta-malik': 'Muwatta Malik',
    'musnad-ahmad': 'Musnad Ahmad',
    'sunan-darimi': 'Sunan ad-Darimi',
    'riyadh-as-salihin': 'Riyad as-Salihin',
}

# Compilers of each collection: (name, death)
AUTHOR_INFO = {
    'sahih-bukhari': ('Imam Muhammad ibn Ismail al-Bukhari', '256 AH'),
    'sahih-muslim': ('Imam Muslim ibn al-Hajjaj al-Naysaburi', '261 AH'),
    'sunan-an-nasai': ("Imam Ahmad ibn Shu'ayb al-Nasa'i", '303 AH'),
    'sunan-abu-dawud': ("Imam Sulayman ibn al-Ash'ath Abu Dawud al-Sijistani", '275 AH'),
    'jami-at-tirmidhi': ('Imam Abu Isa Muhammad ibn Isa al-Tirmidhi', '279 AH'),
    'sunan-ibn-majah': ('Imam Muhammad ibn Yazid Ibn Majah al-Qazwini', '273 AH'),
    'muwatta-malik': ('Imam Malik ibn Anas', '179 AH'),
    'musnad-ahmad': ('Imam Ahmad ibn Hanbal', '241 AH'),
    'sunan-darimi': ('Imam Abu Muhammad Abd al-Rahman ibn Abd Allah ibn al-Darimi', '255 AH'),
    'riyadh-as-salihin': ('Imam Abu Zakariya Yahya ibn Sharaf al-Nawawi', '676 AH'),
}

TAG_KEYWORDS = (
    'prayer', 'pray', 'salah', 'namaz', 'fasting', 'ramadan', 'zakat', 'charity',
    'hajj', 'pilgrimage', 'prophet', 'messenger', 'allah', 'god', 'faith', 'belief',
    'patience', 'gratitude', 'forgiveness', 'mercy', 'knowledge', 'wisdom', 'guidance',
    'paradise', 'hell', 'judgment', 'resurrection', 'quran', 'recitation',
)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def extract_tags(text: str) -> List[str]:
    """Keyword tags stored with mirror records for topical lookups."""
    if not text:
        return []
    lower_text = text.lower()
    return [keyword for keyword in TAG_KEYWORDS if keyword in lower_text]


def build_pagination(page: int, per_page: int, total: int) -> Dict:
    skip = (page - 1) * per_page
    return {
        "current_page": page,
        "last_page": math.ceil(total / per_page) if per_page else 0,
        "per_page": per_page,
        "total": total,
        "from": skip + 1,
        "to": min(skip + per_page, total),
    }


# =============================================================================
# HadithAPI payloads
# =============================================================================

def book_from_api(data: Dict) -> Dict:
    return {
        "id": _int(data.get("id")),
        "bookName": _str(data.get("bookName")),
        "writerName": _str(data.get("writerName")),
        "aboutWriter": data.get("aboutWriter"),
        "writerDeath": _str(data.get("writerDeath")),
        "bookSlug": _str(data.get("bookSlug")),
        "hadiths_count": _str(data.get("hadiths_count")),
        "chapters_count": _str(data.get("chapters_count")),
    }


def chapter_from_api(data: Dict) -> Dict:
    return {
        "id": _int(data.get("id")),
        "chapterNumber": _str(data.get("chapterNumber")),
        "chapterEnglish": _str(data.get("chapterEnglish")),
        "chapterUrdu": _str(data.get("chapterUrdu")),
        "chapterArabic": _str(data.get("chapterArabic")),
        "bookSlug": _str(data.get("bookSlug")),
    }


def hadith_from_api(data: Dict) -> Dict:
    return {
        "id": _int(data.get("id")),
        "hadithNumber": _str(data.get("hadithNumber")),
        "englishNarrator": _str(data.get("englishNarrator")),
        "hadithEnglish": _str(data.get("hadithEnglish")),
        "hadithUrdu": _str(data.get("hadithUrdu")),
        "hadithArabic": _str(data.get("hadithArabic")),
        "headingUrdu": _str(data.get("headingUrdu")),
        "headingEnglish": _str(data.get("headingEnglish")),
        "chapterId": _str(data.get("chapterId")),
        "bookSlug": _str(data.get("bookSlug")),
        "volume": _str(data.get("volume")),
        "status": _str(data.get("status")),
        "book": book_from_api(data.get("book") or {}),
        "chapter": chapter_from_api(data.get("chapter") or {}),
    }


def pagination_from_api(page: Dict) -> Dict:
    return {name: _int(page.get(name)) for name in PAGINATION_FIELDS}


# =============================================================================
# Mirror rows
# =============================================================================

def book_from_mirror(collection: str, position: int, hadith_count: int, chapter_count: int) -> Dict:
    """Aggregated mirror collection -> book. ``position`` is the 1-based listing order."""
    writer_name, writer_death = AUTHOR_INFO.get(collection, ("", ""))
    return {
        "id": position,
        "bookName": COLLECTION_NAMES.get(collection, collection),
        "writerName": writer_name,
        "aboutWriter": None,
        "writerDeath": writer_death,
        "bookSlug": collection,
        "hadiths_count": str(hadith_count),
        "chapters_count": str(chapter_count),
    }


def chapter_from_mirror(collection: str, chapter_name: str, number: int) -> Dict:
    """
    Mirror chapter -> chapter. ``number`` is the upstream chapter number, or
    the chapter's position in the collection when the mirror has none.
    """
    return {
        "id": number,
        "chapterNumber": str(number),
        "chapterEnglish": chapter_name,
        "chapterUrdu": "",
        "chapterArabic": "",
        "bookSlug": collection,
    }


def hadith_from_mirror(row: Dict) -> Dict:
    """Mirror hadith row -> HadithAPI-shaped hadith."""
    collection = row["collection_name"]
    writer_name, writer_death = AUTHOR_INFO.get(collection, ("", ""))
    chapter_number = row.get("chapter_number")

    return {
        "id": _int(row["hadith_number"], default=row.get("id") or 0),
        "hadithNumber": _str(row["hadith_number"]),
        "englishNarrator": _str(row.get("narrator")),
        "hadithEnglish": _str(row.get("english_text")),
        "hadithUrdu": _str(row.get("urdu_text")),
        "hadithArabic": _str(row.get("arabic_text")),
        "headingUrdu": "",
        "headingEnglish": "",
        "chapterId": _str(chapter_number),
        "bookSlug": collection,
        "volume": "",
        "status": _str(row.get("grade")),
        "book": {
            "id": _int(row.get("book_number")),
            "bookName": COLLECTION_NAMES.get(collection, collection),
            "writerName": writer_name,
            "aboutWriter": None,
            "writerDeath": writer_death,
            "bookSlug": collection,
            "hadiths_count": "0",
            "chapters_count": "0",
        },
        "chapter": {
            "id": _int(chapter_number),
            "chapterNumber": _str(chapter_number),
            "chapterEnglish": _str(row.get("chapter")),
            "chapterUrdu": "",
            "chapterArabic": "",
            "bookSlug": collection,
        },
    }


def to_public_hadith(hadith: Dict) -> Dict:
    """Flatten a HadithAPI-shaped hadith for HTTP responses."""
    return {
        "id": str(hadith["id"]),
        "hadithNumber": hadith["hadithNumber"],
        "collection": hadith["bookSlug"],
        "bookName": hadith["book"]["bookName"],
        "chapterId": hadith["chapterId"],
        "chapterNumber": hadith["chapter"]["chapterNumber"],
        "chapterEnglish": hadith["chapter"]["chapterEnglish"],
        "chapterUrdu": hadith["chapter"]["chapterUrdu"],
        "chapterArabic": hadith["chapter"]["chapterArabic"],
        "englishNarrator": hadith["englishNarrator"],
        "hadithEnglish": hadith["hadithEnglish"],
        "hadithUrdu": hadith["hadithUrdu"],
        "hadithArabic": hadith["hadithArabic"],
        "headingEnglish": hadith["headingEnglish"],
        "headingUrdu": hadith["headingUrdu"],
        "volume": hadith["volume"],
        "status": hadith["status"],
        "bookInfo": hadith["book"],
        "chapterInfo": hadith["chapter"],
    }


def public_pagination(pagination: Dict) -> Dict:
    return {
        "page": pagination["current_page"],
        "limit": pagination["per_page"],
        "total": pagination["total"],
        "pages": pagination["last_page"],
        "from": pagination["from"],
        "to": pagination["to"],
    }
