"""
Remote content providers
HTTP clients for the upstream Quran and Hadith APIs
"""

from .base import RemoteClient, RemoteResult, RemoteStatus
from .hadith_api import HadithApiClient
from .quran_api import QuranApiClient

__all__ = ['RemoteClient', 'RemoteResult', 'RemoteStatus', 'QuranApiClient', 'HadithApiClient']
