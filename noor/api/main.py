"""
Noor API - Main Application
FastAPI gateway for Quran and Hadith content with API -> mirror fallback
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..cache import RedisCache
from ..exceptions import InvalidReferenceError, MirrorUnavailableError
from ..mirror import HadithMirror, MirrorDatabase, QuranMirror
from ..remote import HadithApiClient, QuranApiClient
from ..resolver import ReadThroughResolver
from ..services import HadithService, QuranService
from .dependencies import get_cache, get_mirror_db
from .routes import hadith_router, quran_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    cache: Optional[RedisCache] = None,
    mirror_db: Optional[MirrorDatabase] = None,
    quran_client: Optional[QuranApiClient] = None,
    hadith_client: Optional[HadithApiClient] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators that are not passed in are created from the environment
    configuration when the app starts, and closed when it stops.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.cache = cache or RedisCache()
        app.state.mirror_db = mirror_db or MirrorDatabase()
        quran_api = quran_client or QuranApiClient()
        hadith_api = hadith_client or HadithApiClient()

        resolver = ReadThroughResolver(app.state.cache)
        app.state.quran_service = QuranService(resolver, quran_api, QuranMirror(app.state.mirror_db))
        app.state.hadith_service = HadithService(resolver, hadith_api, HadithMirror(app.state.mirror_db))
        logger.info(f"Noor API started (mirror: {app.state.mirror_db.db_path})")

        yield

        await quran_api.close()
        await hadith_api.close()
        await app.state.cache.close()
        logger.info("Noor API stopped")

    app = FastAPI(
        title="Noor API",
        description="""
        Quran and Hadith content API:
        - **Quran** - surahs, ayahs, editions, juz/page/manzil/ruku/hizb divisions and search (AlQuran Cloud)
        - **Hadith** - collections, chapters and hadiths (HadithAPI)

        Content is served from Redis when cached, from the remote APIs otherwise,
        and from the local mirror when a remote API is unavailable.
        """,
        version=VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(quran_router)
    app.include_router(hadith_router)

    register_exception_handlers(app)
    register_info_routes(app)
    return app


# ============================================================================
# Error handling
# ============================================================================

def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(MirrorUnavailableError)
    async def mirror_unavailable_handler(request: Request, exc: MirrorUnavailableError):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": "Service temporarily unavailable"},
        )

    @app.exception_handler(InvalidReferenceError)
    async def invalid_reference_handler(request: Request, exc: InvalidReferenceError):
        return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Server error"})


# ============================================================================
# Info & health
# ============================================================================

def register_info_routes(app: FastAPI) -> None:

    @app.get("/api")
    async def api_info(mirror_db: MirrorDatabase = Depends(get_mirror_db)):
        """API information and mirror statistics"""
        try:
            mirror_stats = await mirror_db.stats()
        except MirrorUnavailableError:
            mirror_stats = None

        return {
            "name": "Noor API",
            "version": VERSION,
            "endpoints": {
                "quran": "/api/quran",
                "hadith": "/api/hadith",
                "health": "/api/health",
                "docs": "/api/docs",
            },
            "mirror": mirror_stats,
        }

    @app.get("/api/health")
    async def health(
        cache: RedisCache = Depends(get_cache),
        mirror_db: MirrorDatabase = Depends(get_mirror_db),
    ):
        """Cache and mirror availability. The API stays up while either is down."""
        cache_ok = await cache.ping()
        try:
            await mirror_db.ready()
            mirror_ok = True
        except MirrorUnavailableError:
            mirror_ok = False

        return {
            "status": "ok" if cache_ok and mirror_ok else "degraded",
            "cache": cache_ok,
            "mirror": mirror_ok,
        }


app = create_app()
