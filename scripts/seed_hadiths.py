#!/usr/bin/env python3
"""
Hadith Seeding Script
Populates the local mirror with hadith collections from HadithAPI
(needs HADITH_API_KEY) or from a directory of hadith-json files.
"""

import sys

from noor.seeders.cli import seed_hadiths_main

if __name__ == "__main__":
    sys.exit(seed_hadiths_main())
