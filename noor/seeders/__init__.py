"""
Seeding jobs
Offline batch jobs that replace the local mirror with a fresh copy of the remote corpora
"""

from .base import SeedingClient
from .hadith_seeder import HadithSeeder
from .quran_seeder import QuranSeeder

__all__ = ['SeedingClient', 'QuranSeeder', 'HadithSeeder']
