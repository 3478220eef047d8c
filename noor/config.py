"""
Configuration for the noor content gateway
Redis cache, sqlite mirror, remote APIs and seeding settings
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent


@dataclass
class RedisConfig:
    """Redis cache connection - the cache is optional, failures degrade to misses"""
    host: str = os.getenv("REDIS_HOST", "localhost")
    port: int = int(os.getenv("REDIS_PORT", "6379"))
    password: Optional[str] = os.getenv("REDIS_PASSWORD") or None
    db: int = int(os.getenv("REDIS_DB", "0"))
    key_prefix: str = os.getenv("REDIS_KEY_PREFIX", "noor")

    # Bounded wait for the shared connect attempt
    connect_timeout: float = float(os.getenv("REDIS_CONNECT_TIMEOUT", "2.0"))
    socket_timeout: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))


@dataclass
class MirrorConfig:
    """Local sqlite mirror of the remote corpora"""
    db_path: str = os.getenv("MIRROR_DB_PATH", str(BASE_DIR / "db" / "noor_mirror.db"))


@dataclass
class QuranApiConfig:
    """AlQuran Cloud API"""
    base_url: str = os.getenv("ALQURAN_API_URL", "https://api.alquran.cloud/v1")
    timeout: float = float(os.getenv("QURAN_API_TIMEOUT", "5.0"))

    # Default editions
    arabic_edition: str = "quran-uthmani"
    english_edition: str = "en.asad"
    audio_edition: str = "ar.alafasy"


@dataclass
class HadithApiConfig:
    """HadithAPI (hadithapi.com) - without an API key every call is served by the mirror"""
    base_url: str = os.getenv("HADITH_API_URL", "https://hadithapi.com/api")
    api_key: str = os.getenv("HADITH_API_KEY", "")
    timeout: float = float(os.getenv("HADITH_API_TIMEOUT", "5.0"))


@dataclass
class CacheTTLConfig:
    """
    Cache TTLs in seconds per read operation: (remote TTL, fallback TTL).
    Fallback-sourced values expire sooner so the remote is retried once it recovers.
    """
    policies: Dict[str, Tuple[int, int]] = field(default_factory=lambda: {
        "quran:surahs": (86400, 3600),
        "quran:surah": (43200, 3600),
        "quran:surah_editions": (43200, 3600),
        "quran:ayah": (86400, 3600),
        "quran:ayah_editions": (86400, 3600),
        "quran:division": (43200, 3600),
        "quran:sajda": (86400, 3600),
        "quran:meta": (86400, 0),
        "quran:editions": (86400, 0),
        "hadith:collections": (86400, 3600),
        "hadith:chapters": (3600, 1800),
        "hadith:list": (3600, 1800),
        "hadith:item": (86400, 3600),
    })
    default: Tuple[int, int] = (3600, 900)

    def for_operation(self, operation: str) -> Tuple[int, int]:
        return self.policies.get(operation, self.default)


@dataclass
class SeedConfig:
    """Offline seeding job settings"""
    max_retries: int = int(os.getenv("SEED_MAX_RETRIES", "3"))
    retry_delay: float = float(os.getenv("SEED_RETRY_DELAY", "2.0"))
    request_timeout: float = float(os.getenv("SEED_REQUEST_TIMEOUT", "30"))
    hadith_page_size: int = int(os.getenv("SEED_HADITH_PAGE_SIZE", "100"))


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# Global config instances
redis_config = RedisConfig()
mirror_config = MirrorConfig()
quran_api_config = QuranApiConfig()
hadith_api_config = HadithApiConfig()
cache_ttl_config = CacheTTLConfig()
seed_config = SeedConfig()
