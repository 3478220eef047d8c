"""Shared fixtures: in-memory Redis, mock HTTP APIs and a seeded sqlite mirror."""

from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from noor.cache import RedisCache
from noor.config import CacheTTLConfig, HadithApiConfig, QuranApiConfig, RedisConfig
from noor.mirror import HadithMirror, MirrorDatabase, QuranMirror
from noor.remote import HadithApiClient, QuranApiClient
from noor.resolver import ReadThroughResolver

QURAN_BASE_URL = "https://quran.test/v1"
HADITH_BASE_URL = "https://hadith.test/api"

AYAT_AL_KURSI = "Allah - there is no deity save Him, the Ever-Living"


# =============================================================================
# Redis
# =============================================================================


class FakeRedis:
    """In-memory stand-in for the parts of redis.asyncio.Redis the cache uses."""

    def __init__(self, fail: bool = False):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = fail
        self.gets = 0
        self.sets = 0
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("Connection refused")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        self.gets += 1
        return self.store.get(key)

    async def set(self, key, value):
        self._check()
        self.sets += 1
        self.store[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key, ttl, value):
        self._check()
        self.sets += 1
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_config():
    return RedisConfig(host="redis.test", port=6379, key_prefix="test", connect_timeout=0.2)


@pytest.fixture
def cache(fake_redis, redis_config):
    return RedisCache(config=redis_config, client=fake_redis)


@pytest.fixture
def unavailable_cache(redis_config):
    return RedisCache(config=redis_config, client_factory=lambda: FakeRedis(fail=True))


@pytest.fixture
def resolver(cache):
    return ReadThroughResolver(cache, CacheTTLConfig())


# =============================================================================
# Remote APIs
# =============================================================================

Responder = Union[Dict[str, Any], Callable[[httpx.Request], httpx.Response]]


class FakeApi:
    """
    Route table for httpx.MockTransport.

    Unknown paths answer 404. ``down()`` makes every request fail with a
    connection error, ``timeout()`` with a connect timeout.
    """

    def __init__(self, base_url: str):
        self.base_path = httpx.URL(base_url).path.rstrip("/")
        self.routes: Dict[str, Responder] = {}
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def add(self, path: str, body: Any = None, status: int = 200, responder=None):
        self.routes[self.base_path + path] = responder or (lambda request: httpx.Response(status, json=body))
        return self

    def down(self):
        self.error = httpx.ConnectError("Connection refused")
        return self

    def timeout(self):
        self.error = httpx.ConnectTimeout("Timed out")
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        responder = self.routes.get(request.url.path)
        if responder is None:
            return httpx.Response(404, json={"code": 404, "status": "Not Found", "data": "Not found"})
        return responder(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def quran_api():
    return FakeApi(QURAN_BASE_URL)


@pytest.fixture
def hadith_api():
    return FakeApi(HADITH_BASE_URL)


@pytest.fixture
def quran_client(quran_api):
    config = QuranApiConfig(base_url=QURAN_BASE_URL, timeout=1.0)
    return QuranApiClient(config=config, client=quran_api.client())


@pytest.fixture
def hadith_client(hadith_api):
    config = HadithApiConfig(base_url=HADITH_BASE_URL, api_key="test-key", timeout=1.0)
    return HadithApiClient(config=config, client=hadith_api.client())


@pytest.fixture
def keyless_hadith_client(hadith_api):
    config = HadithApiConfig(base_url=HADITH_BASE_URL, api_key="", timeout=1.0)
    return HadithApiClient(config=config, client=hadith_api.client())


def quran_envelope(data: Any) -> Dict:
    return {"code": 200, "status": "OK", "data": data}


def api_surah_summary(number: int) -> Dict:
    names = {
        1: ("سُورَةُ ٱلْفَاتِحَةِ", "Al-Faatiha", "The Opening", 7, "Meccan"),
        2: ("سُورَةُ البَقَرَةِ", "Al-Baqara", "The Cow", 286, "Medinan"),
    }
    name, english, translation, count, revelation = names[number]
    return {
        "number": number,
        "name": name,
        "englishName": english,
        "englishNameTranslation": translation,
        "numberOfAyahs": count,
        "revelationType": revelation,
    }


def api_ayah(surah: int, ayah: int, text: Optional[str] = None, with_surah: bool = False,
             edition: str = "quran-uthmani") -> Dict:
    data = {
        "number": absolute_number(surah, ayah),
        "text": text or f"Arabic {surah}:{ayah}",
        "numberInSurah": ayah,
        "juz": 1 if surah == 1 or ayah <= 141 else 2,
        "manzil": 1,
        "page": 1 if surah == 1 else 2 + ayah // 8,
        "ruku": 1,
        "hizbQuarter": 1,
        "sajda": (surah, ayah) == (2, 100),
        "edition": {"identifier": edition},
    }
    if with_surah:
        data["surah"] = api_surah_summary(surah)
    return data


def api_surah(number: int, edition: str = "quran-uthmani") -> Dict:
    surah = api_surah_summary(number)
    surah["ayahs"] = [api_ayah(number, a) for a in range(1, surah["numberOfAyahs"] + 1)]
    surah["edition"] = {"identifier": edition}
    return surah


def hadithapi_hadith(number: str = "1", book: str = "sahih-bukhari") -> Dict:
    return {
        "id": int(number),
        "hadithNumber": number,
        "englishNarrator": "Narrated Umar",
        "hadithEnglish": "Actions are judged by intentions",
        "hadithUrdu": "",
        "hadithArabic": "إنما الأعمال بالنيات",
        "headingUrdu": None,
        "headingEnglish": None,
        "chapterId": "1",
        "bookSlug": book,
        "volume": "1",
        "status": "Sahih",
        "book": {"id": 1, "bookName": "Sahih Bukhari", "writerName": "Imam Bukhari",
                 "aboutWriter": None, "writerDeath": "256 ھ", "bookSlug": book,
                 "hadiths_count": "7276", "chapters_count": "99"},
        "chapter": {"id": 1, "chapterNumber": "1", "chapterEnglish": "Revelation",
                    "chapterUrdu": "", "chapterArabic": "", "bookSlug": book},
    }


def hadith_page(hadiths: List[Dict], page: int = 1, last_page: int = 1) -> Dict:
    return {
        "status": 200,
        "message": "Hadiths has been found.",
        "hadiths": {
            "current_page": page,
            "data": hadiths,
            "last_page": last_page,
            "per_page": 25,
            "total": len(hadiths),
            "from": 1,
            "to": len(hadiths),
        },
    }


# =============================================================================
# Mirror
# =============================================================================

SURAH_AYAH_COUNTS = {1: 7, 2: 286}


def absolute_number(surah: int, ayah: int) -> int:
    return sum(count for number, count in SURAH_AYAH_COUNTS.items() if number < surah) + ayah


def mirror_surah_rows() -> List[Dict]:
    rows = []
    for number in SURAH_AYAH_COUNTS:
        summary = api_surah_summary(number)
        rows.append({
            "number": number,
            "name": summary["englishName"],
            "name_arabic": summary["name"],
            "name_translation": summary["englishNameTranslation"],
            "revelation_type": summary["revelationType"],
            "number_of_ayahs": summary["numberOfAyahs"],
        })
    return rows


def mirror_ayah_rows() -> List[Dict]:
    rows = []
    for surah, count in SURAH_AYAH_COUNTS.items():
        for ayah in range(1, count + 1):
            api = api_ayah(surah, ayah)
            translation = AYAT_AL_KURSI if (surah, ayah) == (2, 255) else f"Translation {surah}:{ayah}"
            rows.append({
                "number": api["number"],
                "surah_number": surah,
                "number_in_surah": ayah,
                "text": api["text"],
                "text_arabic": api["text"],
                "translation": translation,
                "juz": api["juz"],
                "manzil": api["manzil"],
                "page": api["page"],
                "ruku": api["ruku"],
                "hizb_quarter": api["hizbQuarter"],
                "sajda": 1 if (surah, ayah) == (2, 100) else 0,
            })
    return rows


def hadith_record(collection: str, number: str, chapter: str, english: str, **extra) -> Dict:
    record = {
        "collection_name": collection,
        "book_number": 1,
        "hadith_number": number,
        "chapter": chapter,
        "chapter_number": None,
        "arabic_text": f"Arabic {collection} {number}",
        "english_text": english,
        "urdu_text": "",
        "grade": "Sahih",
        "narrator": "Narrated Umar bin Al-Khattab",
        "tags": [],
    }
    record.update(extra)
    return record


def mirror_hadith_records() -> List[Dict]:
    return [
        hadith_record("sahih-bukhari", "1", "Revelation", "Actions are judged by intentions"),
        hadith_record("sahih-bukhari", "2", "Revelation", "The revelation came like the ringing of a bell"),
        hadith_record("sahih-bukhari", "10", "Belief", "A Muslim is the one who avoids harming Muslims"),
        hadith_record("sahih-bukhari", "8", "Belief", "Islam is based on five principles: prayer and fasting"),
        hadith_record("sahih-bukhari", "9", "Belief", "Faith consists of more than sixty branches", grade="Hasan"),
        hadith_record("sahih-bukhari", "12a", "Knowledge", "Knowledge is 100% a light"),
        hadith_record("sahih-muslim", "1", "Faith", "Faith, Islam and Ihsan"),
        hadith_record("sahih-muslim", "2", "Faith", "The signs of the Hour"),
    ]


@pytest.fixture
def empty_mirror_db(tmp_path):
    db = MirrorDatabase(str(tmp_path / "mirror.db"))
    db.initialize()
    return db


@pytest.fixture
def mirror_db(empty_mirror_db):
    QuranMirror(empty_mirror_db).replace_all(mirror_surah_rows(), mirror_ayah_rows())
    HadithMirror(empty_mirror_db).replace_all(mirror_hadith_records())
    return empty_mirror_db


@pytest.fixture
def quran_mirror(mirror_db):
    return QuranMirror(mirror_db)


@pytest.fixture
def hadith_mirror(mirror_db):
    return HadithMirror(mirror_db)


@pytest.fixture
def broken_mirror_db(tmp_path):
    """A mirror whose database path is a directory, so sqlite can't open it."""
    return MirrorDatabase(str(tmp_path))
