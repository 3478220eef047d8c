"""
Content services
One read-through resolution per Quran and Hadith read operation
"""

from .hadith_service import HadithFilters, HadithService
from .quran_service import QuranService

__all__ = ['QuranService', 'HadithService', 'HadithFilters']
