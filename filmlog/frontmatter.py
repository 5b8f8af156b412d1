#!/usr/bin/env python3
"""
Front-matter model for film documents

A document starts with a YAML block between two '---' lines. The block is
parsed once into an ordered dict, changed as a dict, and written back with
dump_frontmatter(). Everything after the closing '---' line is the body and
is never touched here.

Serialization mirrors what the importer has always written:
    Name: 'Heat'
    Rating: '5'
    poster: 'https://image.tmdb.org/t/p/w185/abc.jpg'
    watches: 1
    tags:
      - movie

Strings are single-quoted with ' doubled, integers are bare, lists use one
'  - item' line per entry. Anything else a user may have added by hand
(dates, floats, nested maps), and any string that needs escapes (line
breaks, control characters), is written back with yaml.safe_dump so it
survives a round trip.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from filmlog.constants import FRONTMATTER_DELIMITER
from filmlog.csv_parser import FormatError

_PLAIN_KEY_RE = re.compile(r'[A-Za-z_][\w .-]*')
_PLAIN_ITEM_RE = re.compile(r'[\w][\w ./-]*')
# Characters a single-quoted scalar cannot hold: line breaks, C0/C1 controls, BOM
_ESCAPED_CHARS_RE = re.compile(
    r'[^\t\x20-\x7e\xa0-\u2027\u202a-\ud7ff\ue000-\ufefe\uff00-\ufffd\U00010000-\U0010ffff]'
)
_LINE_RE = re.compile(r'[^\n]*\n|[^\n]+\Z')


class FrontMatterError(FormatError):
    """An existing document has no usable front-matter block"""


def _is_delimiter(line: str) -> bool:
    return line.rstrip('\r\n') == FRONTMATTER_DELIMITER


def split_lines(text: str) -> List[str]:
    """Split on \\n only, keeping line ends (str.splitlines also breaks on \\x85, \\u2028, ...)"""
    return _LINE_RE.findall(text)


def split_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """
    Split a document into (front-matter dict, body)

    Returns (None, text) when the document does not open with a '---' line
    or the block is never closed. The body is returned byte for byte,
    starting right after the closing delimiter line.

    Raises:
        FrontMatterError: If the block exists but is not a YAML mapping
    """
    lines = split_lines(text)
    if not lines or not _is_delimiter(lines[0]):
        return None, text

    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            block = ''.join(lines[1:index])
            body = ''.join(lines[index + 1:])
            break
    else:
        return None, text

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise FrontMatterError(f"invalid front-matter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front-matter is a {type(data).__name__}, expected a mapping"
        )
    return data, body


def quote_string(value: str) -> str:
    """Single-quote a string YAML-style: "it's" -> 'it''s'"""
    return "'" + value.replace("'", "''") + "'"


def _needs_escapes(text: str) -> bool:
    """True when single quotes cannot carry the text (line breaks, control chars, BOM)"""
    return _ESCAPED_CHARS_RE.search(text) is not None


def _reads_back_as(text: str, value: str) -> bool:
    try:
        return yaml.safe_load(text) == value
    except yaml.YAMLError:
        return False


def _dump_inline(value: Any) -> str:
    """One-line YAML scalar or flow collection; non-printables become double-quoted escapes"""
    dumped = yaml.safe_dump(value, default_flow_style=True, allow_unicode=False, width=float('inf'))
    return dumped.strip().removesuffix('...').strip()


def _format_key(key: str) -> str:
    # Keys like Yes, null or 1995 would come back as bool/None/int if left plain
    if _PLAIN_KEY_RE.fullmatch(key) and not key.endswith(' ') and _reads_back_as(key, key):
        return key
    return quote_string(key)


def _format_item(item: Any) -> str:
    if isinstance(item, str):
        if _needs_escapes(item):
            return _dump_inline(item)
        # Plain only when YAML would read it back as the same string
        if _PLAIN_ITEM_RE.fullmatch(item) and not item.endswith(' ') and _reads_back_as(item, item):
            return item
        return quote_string(item)
    if isinstance(item, bool):
        return 'true' if item else 'false'
    if isinstance(item, int):
        return str(item)
    return _dump_inline(item)


def _dump_entry(key: Any, value: Any) -> str:
    # allow_unicode=False makes PyYAML escape line separators and control characters
    dumped = yaml.safe_dump(
        {key: value}, default_flow_style=False, allow_unicode=False,
        sort_keys=False, width=float('inf')
    )
    return dumped.rstrip('\n')


def dump_frontmatter(data: Dict[str, Any]) -> str:
    """Serialize an ordered mapping as a '---' delimited block (ends with newline)"""
    lines = [FRONTMATTER_DELIMITER]
    for key, value in data.items():
        if not isinstance(key, str) or _needs_escapes(key):
            lines.append(_dump_entry(key, value))
            continue

        name = _format_key(key)
        if isinstance(value, str) and not _needs_escapes(value):
            lines.append(f"{name}: {quote_string(value)}")
        elif isinstance(value, bool):
            lines.append(f"{name}: {'true' if value else 'false'}")
        elif isinstance(value, int):
            lines.append(f"{name}: {value}")
        elif value is None:
            lines.append(f"{name}:")
        elif isinstance(value, list):
            if not value:
                lines.append(f"{name}: []")
            else:
                lines.append(f"{name}:")
                for item in value:
                    lines.append(f"  - {_format_item(item)}")
        else:
            lines.append(_dump_entry(key, value))
    lines.append(FRONTMATTER_DELIMITER)
    return '\n'.join(lines) + '\n'


def read_int(data: Dict[str, Any], key: str) -> Optional[int]:
    """Read an integer field, accepting '3' as well as 3; None if absent or not a number"""
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
