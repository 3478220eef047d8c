#!/usr/bin/env python3
"""
Quran Seeding Script
Populates the local mirror with the Quran text, English translation and
surah metadata from AlQuran Cloud.
"""

import sys

from noor.seeders.cli import seed_quran_main

if __name__ == "__main__":
    sys.exit(seed_quran_main())
