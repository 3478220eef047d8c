"""
Command line entry points for the seeding jobs

    python scripts/seed_quran.py [--db PATH]
    python scripts/seed_hadiths.py [--db PATH] [--from-json DIR] [--collection SLUG ...]

Both exit with status 1 when the job is aborted; the mirror is left as it was.
"""

import argparse
import logging
from typing import List, Optional

from ..config import LOG_FORMAT, LOG_LEVEL, mirror_config
from ..exceptions import NoorError
from ..mirror import HadithMirror, MirrorDatabase, QuranMirror
from .hadith_seeder import HadithSeeder
from .quran_seeder import QuranSeeder

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def _base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--db", default=mirror_config.db_path, help="Mirror database path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def seed_quran_main(argv: Optional[List[str]] = None) -> int:
    """Seed the Quran mirror from AlQuran Cloud"""
    args = _base_parser("Seed the local Quran mirror from AlQuran Cloud").parse_args(argv)
    _setup_logging(args.verbose)

    seeder = QuranSeeder(QuranMirror(MirrorDatabase(args.db)))
    try:
        seeder.run()
    except NoorError as e:
        logger.error(f"Quran seeding aborted: {e}")
        return 1
    finally:
        seeder.client.close()

    logger.info("Quran seeding complete!")
    return 0


def seed_hadiths_main(argv: Optional[List[str]] = None) -> int:
    """Seed the Hadith mirror from HadithAPI or hadith-json files"""
    parser = _base_parser("Seed the local Hadith mirror")
    parser.add_argument("--from-json", metavar="DIR", help="Read hadith-json corpus files instead of HadithAPI")
    parser.add_argument("--collection", action="append", dest="collections", metavar="SLUG",
                        help="Only seed this collection (repeatable)")
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    seeder = HadithSeeder(HadithMirror(MirrorDatabase(args.db)))
    try:
        seeder.run(json_dir=args.from_json, collections=args.collections)
    except NoorError as e:
        logger.error(f"Hadith seeding aborted: {e}")
        return 1
    finally:
        seeder.client.close()

    logger.info("Hadith seeding complete!")
    return 0
