#!/usr/bin/env python3
"""
Merge a new diary row into an existing film document

Policies:
    append  - add a dated entry to the Watch History and bump 'watches'.
              A date that already has an entry is a duplicate viewing: skip.
    update  - regenerate the front-matter and body from the new row, keeping
              the existing Watch History section exactly as it is.
    skip    - leave the document alone.

merge() returns the new document text, or None when the row should be
counted as skipped.
"""

import logging
from typing import Dict, Iterable, List, Optional

from filmlog.constants import (
    ENTRY_HEADING_PREFIX, POLICY_APPEND, POLICY_SKIP, POLICY_UPDATE, POSTER_KEY,
    WATCH_HISTORY_HEADING, WATCHES_KEY,
)
from filmlog.document import build_frontmatter, history_entry, viewing_from_row
from filmlog.frontmatter import (
    FrontMatterError, dump_frontmatter, read_int, split_frontmatter, split_lines,
)

logger = logging.getLogger(__name__)


def _line_text(line: str) -> str:
    return line.rstrip('\r\n')


def _find_line(lines: List[str], text: str) -> Optional[int]:
    for index, line in enumerate(lines):
        if _line_text(line) == text:
            return index
    return None


def has_entry(body: str, watched_date: str) -> bool:
    """True if the body already has a '### <watched_date>' heading line"""
    lines = split_lines(body)
    return _find_line(lines, f"{ENTRY_HEADING_PREFIX}{watched_date}") is not None


def insert_history_entry(body: str, entry: str) -> str:
    """
    Insert an entry at the top of the Watch History section

    The entry goes right after the heading and the blank line that follows
    it. Without a Watch History heading, a new section is appended.
    """
    lines = split_lines(body)
    index = _find_line(lines, WATCH_HISTORY_HEADING)
    if index is None:
        return body + f"\n\n{WATCH_HISTORY_HEADING}\n\n" + entry

    heading = lines[index]
    if not heading.endswith('\n'):
        # Heading is the last line of the file
        return ''.join(lines[:index]) + heading + '\n\n' + entry

    insert_at = index + 1
    if insert_at < len(lines) and not lines[insert_at].strip():
        insert_at += 1
        separator = ''
    else:
        separator = '\n'

    return ''.join(lines[:insert_at]) + separator + entry + ''.join(lines[insert_at:])


def extract_history_section(body: str) -> str:
    """Everything from the Watch History heading to the end, or ''"""
    lines = split_lines(body)
    index = _find_line(lines, WATCH_HISTORY_HEADING)
    if index is None:
        return ''
    return ''.join(lines[index:])


def append_viewing(
    existing_text: str,
    row: Dict[str, str],
    poster_url: str,
    watched_date: str
) -> Optional[str]:
    """
    Append policy: add one viewing to an existing document

    Returns None for a duplicate viewing (same watched date already listed).

    Raises:
        FrontMatterError: If the document has no front-matter block
    """
    frontmatter, body = split_frontmatter(existing_text)

    if watched_date and has_entry(body, watched_date):
        logger.debug(f"Watch date {watched_date} already recorded, skipping duplicate")
        return None

    if frontmatter is None:
        raise FrontMatterError('document has no front-matter block to update')

    # An existing document without a counter already stands for one viewing
    previous = read_int(frontmatter, WATCHES_KEY)
    frontmatter[WATCHES_KEY] = previous + 1 if previous is not None else 2

    if poster_url and not frontmatter.get(POSTER_KEY):
        frontmatter[POSTER_KEY] = poster_url

    viewing = viewing_from_row(row)
    viewing.watched_date = watched_date
    body = insert_history_entry(body, history_entry(viewing))

    return dump_frontmatter(frontmatter) + body


def update_document(
    existing_text: str,
    row: Dict[str, str],
    poster_url: str,
    tags: Iterable[str] = ()
) -> str:
    """
    Update policy: rebuild the document from the latest row

    The Watch History section (heading to end of file) is carried over
    byte for byte. The watch counter continues from the previous value.
    """
    frontmatter, body = split_frontmatter(existing_text)
    previous = read_int(frontmatter, WATCHES_KEY) if frontmatter is not None else None

    new_frontmatter = build_frontmatter(row, poster_url, (previous or 0) + 1, tags)
    content = viewing_from_row(row).content

    history = extract_history_section(body)
    text = dump_frontmatter(new_frontmatter) + '\n' + content
    if history:
        text += '\n\n' + history
    return text


def merge(
    existing_text: str,
    row: Dict[str, str],
    poster_url: str,
    watched_date: str,
    policy: str,
    tags: Iterable[str] = ()
) -> Optional[str]:
    """
    Reconcile a diary row with an existing document under a duplicate policy

    Args:
        existing_text: Current document text
        row: Parsed CSV row
        poster_url: Poster reference ('' if none was found)
        watched_date: Date of this viewing ('' if unknown)
        policy: 'append', 'update' or 'skip'
        tags: Tags written by the update policy

    Returns:
        New document text, or None if the row should be skipped

    Raises:
        FrontMatterError: append policy on a document without front-matter
        ValueError: Unknown policy
    """
    if policy == POLICY_SKIP:
        return None
    if policy == POLICY_APPEND:
        return append_viewing(existing_text, row, poster_url, watched_date)
    if policy == POLICY_UPDATE:
        return update_document(existing_text, row, poster_url, tags)
    raise ValueError(f"Unknown duplicate handling policy: {policy!r}")
