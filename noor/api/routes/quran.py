"""
Quran API routes - Surahs, ayahs, divisions and search
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..dependencies import get_quran_service
from ...services import QuranService

router = APIRouter(prefix="/api/quran", tags=["Quran"])


def _edition_list(editions: Optional[str]) -> List[str]:
    return [e.strip() for e in (editions or "").split(",") if e.strip()]


def _listing(resolution):
    data = resolution.value if resolution.found else []
    return {"success": True, "data": data, "count": len(data)}


# ============================================================================
# Editions & metadata
# ============================================================================

@router.get("/editions")
async def get_editions(
    format: Optional[str] = Query(None, description="text or audio"),
    language: Optional[str] = Query(None, description="ISO language code, e.g. en"),
    type: Optional[str] = Query(None, description="translation, tafsir, quran, ..."),
    service: QuranService = Depends(get_quran_service),
):
    """Available editions from AlQuran Cloud"""
    return _listing(await service.get_editions(format, language, type))


@router.get("/editions/default")
async def get_default_editions(service: QuranService = Depends(get_quran_service)):
    return {"success": True, "data": service.get_default_editions()}


@router.get("/meta")
async def get_meta(service: QuranService = Depends(get_quran_service)):
    """Quran metadata (surah, juz, page... references)"""
    resolution = await service.get_meta()
    if not resolution.found:
        raise HTTPException(status_code=404, detail="Metadata not available")
    return {"success": True, "data": resolution.value}


# ============================================================================
# Surahs & ayahs
# ============================================================================

@router.get("/surahs")
async def get_surahs(service: QuranService = Depends(get_quran_service)):
    """All surahs"""
    return _listing(await service.list_surahs())


@router.get("/surahs/{number}")
async def get_surah(
    number: int,
    edition: Optional[str] = None,
    editions: Optional[str] = Query(None, description="Comma separated edition identifiers"),
    service: QuranService = Depends(get_quran_service),
):
    """Surah with its ayahs, in one edition or several"""
    edition_list = _edition_list(editions)
    if edition_list:
        resolution = await service.get_surah_editions(number, edition_list)
    else:
        resolution = await service.get_surah(number, edition)

    if not resolution.found:
        raise HTTPException(status_code=404, detail="Surah not found")
    return {"success": True, "data": resolution.value}


async def _ayah_response(service: QuranService, reference: str, edition: Optional[str], editions: Optional[str]):
    edition_list = _edition_list(editions)
    if edition_list:
        resolution = await service.get_ayah_editions(reference, edition_list)
    else:
        resolution = await service.get_ayah(reference, edition)

    if not resolution.found:
        raise HTTPException(status_code=404, detail="Ayah not found")
    return {"success": True, "data": resolution.value}


@router.get("/surahs/{surah_number}/ayahs/{ayah_number}")
async def get_ayah_in_surah(
    surah_number: int,
    ayah_number: int,
    edition: Optional[str] = None,
    editions: Optional[str] = None,
    service: QuranService = Depends(get_quran_service),
):
    return await _ayah_response(service, f"{surah_number}:{ayah_number}", edition, editions)


@router.get("/ayahs/{reference}")
async def get_ayah(
    reference: str,
    edition: Optional[str] = None,
    editions: Optional[str] = None,
    service: QuranService = Depends(get_quran_service),
):
    """Single ayah by reference (e.g., 2:255) or absolute number (e.g., 262)"""
    return await _ayah_response(service, reference, edition, editions)


@router.get("/search")
async def search_quran(
    query: Optional[str] = Query(None, description="Search keyword"),
    surah: str = Query("all", description="Surah number or 'all'"),
    edition: Optional[str] = None,
    language: Optional[str] = None,
    service: QuranService = Depends(get_quran_service),
):
    """Keyword search"""
    if not query:
        raise HTTPException(status_code=400, detail="Search query required")
    if surah != "all" and not (surah.isascii() and surah.isdigit()):
        raise HTTPException(status_code=400, detail="surah must be a number or 'all'")

    return _listing(await service.search(query, surah if surah == "all" else int(surah), edition, language))


# ============================================================================
# Divisions
# ============================================================================

async def _division(service: QuranService, division: str, number: int, edition, offset, limit):
    return _listing(await service.get_division(division, number, edition, offset, limit))


@router.get("/juz/{number}")
async def get_juz(
    number: int,
    edition: Optional[str] = None,
    offset: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: QuranService = Depends(get_quran_service),
):
    return await _division(service, "juz", number, edition, offset, limit)


@router.get("/page/{number}")
async def get_page(
    number: int,
    edition: Optional[str] = None,
    offset: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: QuranService = Depends(get_quran_service),
):
    return await _division(service, "page", number, edition, offset, limit)


@router.get("/manzil/{number}")
async def get_manzil(
    number: int,
    edition: Optional[str] = None,
    offset: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: QuranService = Depends(get_quran_service),
):
    return await _division(service, "manzil", number, edition, offset, limit)


@router.get("/ruku/{number}")
async def get_ruku(
    number: int,
    edition: Optional[str] = None,
    offset: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: QuranService = Depends(get_quran_service),
):
    return await _division(service, "ruku", number, edition, offset, limit)


@router.get("/hizb/{number}")
async def get_hizb_quarter(
    number: int,
    edition: Optional[str] = None,
    offset: Optional[int] = Query(None, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: QuranService = Depends(get_quran_service),
):
    return await _division(service, "hizbQuarter", number, edition, offset, limit)


@router.get("/sajda")
async def get_sajda_ayahs(edition: Optional[str] = None, service: QuranService = Depends(get_quran_service)):
    """Ayahs with a prostration"""
    return _listing(await service.get_sajda_ayahs(edition))
