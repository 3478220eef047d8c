"""
Request-scoped access to the collaborators built in the app lifespan
"""
from fastapi import Request

from ..cache import RedisCache
from ..mirror.database import MirrorDatabase
from ..services import HadithService, QuranService


def get_quran_service(request: Request) -> QuranService:
    return request.app.state.quran_service


def get_hadith_service(request: Request) -> HadithService:
    return request.app.state.hadith_service


def get_cache(request: Request) -> RedisCache:
    return request.app.state.cache


def get_mirror_db(request: Request) -> MirrorDatabase:
    return request.app.state.mirror_db
