"""
API Routes
"""
from .hadith import router as hadith_router
from .quran import router as quran_router

__all__ = [
    'quran_router',
    'hadith_router',
]
