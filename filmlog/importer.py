#!/usr/bin/env python3
"""
Diary import orchestration

Runs every parsed CSV row through poster lookup and then either document
synthesis (first time a film is seen) or the merge engine (film already has
a note), one row at a time.

Counting rules:
    created - a new document was written
    updated - an existing document was rewritten (append or update policy)
    skipped - no title, skip policy, duplicate watch date, or unusable document
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from filmlog.constants import PROGRESS_EVERY, TITLE_COLUMNS
from filmlog.csv_parser import parse_csv
from filmlog.document import document_filename, synthesize, viewing_from_row
from filmlog.frontmatter import FrontMatterError
from filmlog.merge import merge
from filmlog.settings import ImportSettings
from filmlog.tmdb import TMDbClient
from filmlog.vault import join_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class ImportSummary:
    """Outcome counts of one import run"""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    total: int = 0
    error: Optional[str] = None  # Set when the run stopped early

    @property
    def processed(self) -> int:
        return self.created + self.updated

    def message(self) -> str:
        summary = (
            f"Import complete! Created: {self.created}, "
            f"Updated: {self.updated}, Skipped: {self.skipped}"
        )
        if self.error:
            summary = (
                f"Import stopped after {self.created + self.updated + self.skipped}/{self.total} "
                f"rows: {self.error}. Created: {self.created}, "
                f"Updated: {self.updated}, Skipped: {self.skipped}"
            )
        return summary


class DiaryImporter:
    """Imports diary rows into one Markdown note per film"""

    def __init__(
        self,
        settings: ImportSettings,
        vault,
        tmdb: Optional[TMDbClient] = None,
        progress: Optional[ProgressCallback] = None
    ):
        self.settings = settings
        self.vault = vault
        self.tmdb = tmdb or TMDbClient(settings.tmdb_api_key, settings.image_size)
        self.progress = progress
        self.tags = settings.tag_list()

    def run(self, csv_text: str) -> ImportSummary:
        """
        Import every row of a diary CSV

        Raises:
            MissingConfigError: No TMDb API key configured (nothing is read or written)
            FormatError: CSV has no header or no data rows (nothing is written)
        """
        self.settings.require_api_key()
        self.settings.validate()

        logger.info('Processing Letterboxd diary...')
        rows = parse_csv(csv_text)
        summary = ImportSummary(total=len(rows))

        folder = self.settings.output_folder
        if folder and not self.vault.exists(folder):
            self.vault.create_folder(folder)
            logger.info(f"Created output folder: {folder}")
        existing = [name for name in self.vault.list_children(folder) if name.endswith('.md')]
        logger.info(f"{len(rows)} diary rows, {len(existing)} existing notes in '{folder or '/'}'")

        try:
            for index, row in enumerate(rows, start=1):
                self._import_row(index, row, summary)
        except Exception as e:
            # Documents already written stay as they are
            logger.exception(f"Import aborted at row {summary.created + summary.updated + summary.skipped + 1}")
            summary.error = str(e) or type(e).__name__

        logger.info(summary.message())
        return summary

    def _import_row(self, index: int, row: Dict[str, str], summary: ImportSummary):
        viewing = viewing_from_row(row)
        if not viewing.title:
            logger.warning(
                f"Skipping row {index}: no title found in any of {', '.join(TITLE_COLUMNS)}. "
                f"Available columns: {list(row.keys())}"
            )
            summary.skipped += 1
            return

        poster_url = self.tmdb.get_poster_url(viewing.title)
        filename = document_filename(viewing.title, viewing.year)
        path = join_path(self.settings.output_folder, filename)

        if not self.vault.exists(path):
            self.vault.create(path, synthesize(row, poster_url, self.tags))
            summary.created += 1
            logger.debug(f"Created {path}")
        else:
            try:
                merged = merge(
                    self.vault.read(path), row, poster_url, viewing.watched_date,
                    self.settings.duplicate_handling, self.tags
                )
            except FrontMatterError as e:
                logger.warning(f"Skipping row {index}: cannot update {path}: {e}")
                summary.skipped += 1
                return

            if merged is None:
                summary.skipped += 1
                logger.debug(f"Skipped {path} ({self.settings.duplicate_handling})")
                return

            self.vault.write(path, merged)
            summary.updated += 1
            logger.debug(f"Updated {path}")

        if summary.processed % PROGRESS_EVERY == 0:
            logger.info(f"Processed {summary.processed}/{summary.total} movies...")
            if self.progress:
                self.progress(summary.processed, summary.total)


def run_import(
    csv_text: str,
    settings: ImportSettings,
    vault,
    tmdb: Optional[TMDbClient] = None,
    progress: Optional[ProgressCallback] = None
) -> ImportSummary:
    """Convenience wrapper: DiaryImporter(...).run(csv_text)"""
    return DiaryImporter(settings, vault, tmdb=tmdb, progress=progress).run(csv_text)
