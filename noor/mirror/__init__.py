"""
Local mirror
sqlite copy of the remote corpora, read by the fallback tier
"""

from .database import MirrorDatabase, dict_from_row
from .hadith_mirror import HadithMirror
from .quran_mirror import QuranMirror

__all__ = ['MirrorDatabase', 'QuranMirror', 'HadithMirror', 'dict_from_row']
