#!/usr/bin/env python3
"""
Shared name and value normalization for the diary importer

The same helpers are used when building filenames for new documents and when
checking whether a document already exists. If these differ, a re-import will
create a second note for the same film instead of merging.
"""

import re
from typing import Dict, Iterable, List, Optional

from filmlog.constants import FORBIDDEN_FILENAME_CHARS

_FORBIDDEN_RE = re.compile('[' + re.escape(FORBIDDEN_FILENAME_CHARS) + ']')


def sanitize_filename(name: str) -> str:
    """
    Replace characters that are unsafe in filenames with '-'

    Each forbidden character is replaced individually (no collapsing), then
    surrounding whitespace is trimmed.

    Examples:
        >>> sanitize_filename('Mission: Impossible')
        'Mission- Impossible'

        >>> sanitize_filename('  What/If?  ')
        'What-If-'
    """
    return _FORBIDDEN_RE.sub('-', name).strip()


def first_present(row: Dict[str, str], columns: Iterable[str]) -> str:
    """Return the first non-empty value among the given columns, or ''"""
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return ''


def split_tags(tags: Optional[str]) -> List[str]:
    """
    Split a comma-separated tag string into a clean list

    Blank entries are dropped, so 'movie, , watched' gives ['movie', 'watched'].
    """
    if not tags or not tags.strip():
        return []
    return [tag.strip() for tag in tags.split(',') if tag.strip()]
