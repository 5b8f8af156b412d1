#!/usr/bin/env python3
"""
Film document synthesis

Builds the Markdown note for a film seen for the first time:

    ---
    Name: 'Heat'
    Year: '1995'
    poster: 'https://image.tmdb.org/t/p/w185/abc.jpg'
    watches: 1
    tags:
      - movie
    ---

    <content column, if any>

    ## Watch History

    ### 2024-01-01
    **Rating:** 5
    **Review:** Still great.

Every non-empty CSV column goes into the front-matter as a quoted string.
The importer-owned keys (poster, watches, tags) come after the row columns
and win over a column of the same name.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from filmlog.constants import (
    CONTENT_COLUMN, ENTRY_HEADING_PREFIX, POSTER_KEY, RATING_COLUMNS, REVIEW_COLUMNS,
    TAGS_KEY, TITLE_COLUMNS, WATCH_HISTORY_HEADING, WATCHED_DATE_COLUMNS, WATCHES_KEY,
    YEAR_COLUMNS,
)
from filmlog.frontmatter import dump_frontmatter
from filmlog.normalization import first_present, sanitize_filename


@dataclass
class Viewing:
    """One diary row, reduced to the fields the importer interprets"""
    title: str
    year: str = ''
    watched_date: str = ''
    rating: str = ''
    review: str = ''
    content: str = ''


def viewing_from_row(row: Dict[str, str]) -> Viewing:
    """Resolve column aliases for one row (title may come back empty)"""
    return Viewing(
        title=first_present(row, TITLE_COLUMNS).strip(),
        year=first_present(row, YEAR_COLUMNS).strip(),
        watched_date=first_present(row, WATCHED_DATE_COLUMNS),
        rating=first_present(row, RATING_COLUMNS),
        review=first_present(row, REVIEW_COLUMNS),
        content=row.get(CONTENT_COLUMN, ''),
    )


def document_filename(title: str, year: Optional[str] = None) -> str:
    """'Heat', '1995' -> 'Heat (1995).md'"""
    suffix = f" ({sanitize_filename(year)})" if year else ''
    return f"{sanitize_filename(title)}{suffix}.md"


def history_entry(viewing: Viewing) -> str:
    """One '### <date>' sub-entry, terminated by a blank line"""
    entry = f"{ENTRY_HEADING_PREFIX}{viewing.watched_date}\n"
    if viewing.rating:
        entry += f"**Rating:** {viewing.rating}\n"
    if viewing.review:
        entry += f"**Review:** {viewing.review}\n"
    return entry + '\n'


def build_frontmatter(
    row: Dict[str, str],
    poster_url: str,
    watches: int,
    tags: Iterable[str] = ()
) -> Dict[str, Any]:
    """Ordered front-matter mapping for a row: columns, then poster, watches, tags"""
    data: Dict[str, Any] = {}
    for key, value in row.items():
        if value:
            data[key] = str(value)

    # Importer-owned keys always go last
    for key in (POSTER_KEY, WATCHES_KEY, TAGS_KEY):
        data.pop(key, None)

    if poster_url:
        data[POSTER_KEY] = poster_url
    data[WATCHES_KEY] = watches

    tags = list(tags)
    if tags:
        data[TAGS_KEY] = tags
    return data


def synthesize(row: Dict[str, str], poster_url: str, tags: Iterable[str] = ()) -> str:
    """Full text of a new film document for its first viewing"""
    viewing = viewing_from_row(row)
    frontmatter = dump_frontmatter(build_frontmatter(row, poster_url, 1, tags))

    watch_history = f"{WATCH_HISTORY_HEADING}\n\n" + history_entry(viewing)
    return frontmatter + '\n' + viewing.content + '\n\n' + watch_history
