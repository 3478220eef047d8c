"""
Hadith API routes - Collections, chapters and hadiths
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from ..dependencies import get_hadith_service
from ...services import HadithFilters, HadithService
from ...services.hadith_service import parse_chapter_number
from ...transforms.hadith import build_pagination, public_pagination, to_public_hadith

router = APIRouter(prefix="/api/hadith", tags=["Hadith"])


def _count(value) -> int:
    text = str(value)
    return int(text) if text.isascii() and text.isdigit() else 0


def _collection_summary(book: dict) -> dict:
    return {
        "id": book["id"],
        "name": book["bookName"],
        "slug": book["bookSlug"],
        "writer": book["writerName"],
        "writerDeath": book["writerDeath"],
        "hadithsCount": _count(book["hadiths_count"]),
        "chaptersCount": _count(book["chapters_count"]),
    }


async def _hadith_page(service: HadithService, filters: HadithFilters, **extra):
    resolution = await service.find_hadiths(filters)
    if resolution.found:
        hadiths = resolution.value["hadiths"]
        pagination = resolution.value["pagination"]
    else:
        hadiths, pagination = [], build_pagination(filters.page, filters.per_page, 0)

    return {
        "success": True,
        **extra,
        "data": [to_public_hadith(h) for h in hadiths],
        "pagination": public_pagination(pagination),
    }


@router.get("/collections")
async def get_collections(service: HadithService = Depends(get_hadith_service)):
    """All hadith collections"""
    resolution = await service.list_collections()
    books = resolution.value if resolution.found else []
    return {"success": True, "data": [_collection_summary(b) for b in books]}


@router.get("/collections/{collection}")
async def get_collection_hadiths(
    collection: str,
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    service: HadithService = Depends(get_hadith_service),
):
    """Hadiths of one collection"""
    filters = HadithFilters(collection=collection, per_page=limit, page=page)
    return await _hadith_page(service, filters)


@router.get("/books/{book_slug}/chapters")
async def get_chapters(
    book_slug: str,
    paginate: int = Query(25, ge=1, le=500),
    page: int = Query(1, ge=1),
    service: HadithService = Depends(get_hadith_service),
):
    """Chapters of a collection"""
    resolution = await service.get_chapters(book_slug, paginate, page)
    if not resolution.found:
        return {"success": True, "data": [], "pagination": build_pagination(page, paginate, 0)}
    return {"success": True, "data": resolution.value["chapters"], "pagination": resolution.value["pagination"]}


@router.get("/books/{book_slug}/chapters/{chapter_number}")
async def get_chapter_hadiths(
    book_slug: str,
    chapter_number: str,
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    service: HadithService = Depends(get_hadith_service),
):
    """Hadiths of one chapter, by the number the chapter listing gives it"""
    number = parse_chapter_number(chapter_number)
    if number is None:
        raise HTTPException(status_code=400, detail="Invalid chapter number")

    chapter_name = await service.get_chapter_name(book_slug, number)
    if not chapter_name:
        raise HTTPException(status_code=404, detail="Chapter not found")

    filters = HadithFilters(collection=book_slug, chapter=str(number), per_page=limit, page=page)
    return await _hadith_page(service, filters, chapter=chapter_name)


@router.get("/search")
async def search_hadiths(
    query: Optional[str] = None,
    collection: Optional[str] = None,
    language: str = Query("en", description="Language of the query text: en, ar or ur"),
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    status: Optional[str] = None,
    chapter: Optional[str] = None,
    hadithNumber: Optional[str] = None,
    service: HadithService = Depends(get_hadith_service),
):
    """Search hadiths by text, number or chapter"""
    if not query and not hadithNumber and not chapter:
        raise HTTPException(status_code=400, detail="Search query, hadith number, or chapter is required")

    text_filter = {"ar": "arabic", "ur": "urdu"}.get(language, "english")
    filters = HadithFilters(
        collection=collection,
        chapter=chapter,
        hadith_number=hadithNumber,
        status=status,
        per_page=limit,
        page=page,
        **({text_filter: query} if query else {}),
    )
    return await _hadith_page(service, filters)


@router.get("/{hadith_id}")
async def get_hadith(
    hadith_id: str,
    collection: Optional[str] = None,
    service: HadithService = Depends(get_hadith_service),
):
    """Single hadith by number"""
    resolution = await service.get_hadith(hadith_id, collection)
    if not resolution.found:
        raise HTTPException(status_code=404, detail="Hadith not found")
    return {"success": True, "data": to_public_hadith(resolution.value)}
