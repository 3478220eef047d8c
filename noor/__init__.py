"""
Noor - Quran and Hadith content gateway
Read-through cache in front of the remote content APIs, with a local sqlite mirror as fallback
"""

__version__ = "1.0.0"
