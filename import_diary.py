#!/usr/bin/env python3
"""
import_diary.py - Import a Letterboxd diary CSV into Markdown film notes

Creates one note per film in the output folder of a notes vault, with a TMDb
poster and a Watch History section. Re-importing the same diary is safe: with
the default 'append' policy, viewings already recorded are skipped.

Settings come from a YAML file (default: config.yaml) and can be overridden
on the command line. --save-settings writes the merged settings back.
"""

import sys
import logging
import argparse
from pathlib import Path

from filmlog.constants import DUPLICATE_POLICIES, IMAGE_SIZES
from filmlog.csv_parser import FormatError
from filmlog.importer import DiaryImporter
from filmlog.settings import (
    ImportSettings, MissingConfigError, SettingsError, load_settings, save_settings,
)
from filmlog.vault import FileSystemVault

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def apply_overrides(settings: ImportSettings, args: argparse.Namespace) -> ImportSettings:
    """Command-line values win over the config file"""
    overrides = {
        'tmdb_api_key': args.api_key,
        'output_folder': args.output_folder,
        'image_size': args.image_size,
        'duplicate_handling': args.duplicate_handling,
        'tags': args.tags,
    }
    merged = settings.to_dict()
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return ImportSettings.from_dict(merged)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Import a Letterboxd diary CSV into Markdown film notes',
        epilog="""
Examples:
  python import_diary.py diary.csv
  python import_diary.py diary.csv --vault ~/Notes --output-folder Films
  python import_diary.py diary.csv --duplicate-handling update
  python import_diary.py diary.csv --api-key KEY --tags "movie, watched" --save-settings
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('csv_file', type=Path,
                        help='Diary CSV exported from Letterboxd (or any CSV with a title column)')
    parser.add_argument('--config', type=Path, default=Path('config.yaml'),
                        help='Settings file (default: config.yaml)')
    parser.add_argument('--vault', type=Path, default=Path('.'),
                        help='Root directory of the notes vault (default: current directory)')
    parser.add_argument('--output-folder',
                        help='Folder inside the vault for film notes')
    parser.add_argument('--api-key',
                        help='TMDb API key')
    parser.add_argument('--image-size', choices=IMAGE_SIZES,
                        help='TMDb poster size')
    parser.add_argument('--duplicate-handling', choices=DUPLICATE_POLICIES,
                        help='What to do when a film already has a note')
    parser.add_argument('--tags',
                        help='Comma-separated tags added to every new note')
    parser.add_argument('--save-settings', action='store_true',
                        help='Write the effective settings back to the config file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log every row')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = apply_overrides(load_settings(args.config), args)
    except SettingsError as e:
        logger.error(f"Invalid settings: {e}")
        return 1

    if args.save_settings:
        save_settings(settings, args.config)

    if not args.csv_file.exists():
        logger.error(f"CSV file does not exist: {args.csv_file}")
        return 1

    csv_text = args.csv_file.read_text(encoding='utf-8-sig')
    importer = DiaryImporter(settings, FileSystemVault(args.vault))

    try:
        summary = importer.run(csv_text)
    except MissingConfigError as e:
        logger.error(str(e))
        return 1
    except FormatError as e:
        logger.error(f"Error processing CSV: {e}")
        return 1

    print(summary.message())
    stats = importer.tmdb.get_stats()
    print(f"Posters found: {stats['posters_found']}/{stats['requests']}")

    return 1 if summary.error else 0


if __name__ == '__main__':
    sys.exit(main())
