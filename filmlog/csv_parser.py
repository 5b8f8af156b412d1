#!/usr/bin/env python3
"""
Tolerant CSV parser for diary exports

Only handles what diary exports actually contain: comma-delimited lines with
double-quoted fields, where "" inside quotes is a literal quote. Quoted fields
may contain commas but not newlines.

Rows whose field count differs from the header are dropped with a warning,
never repaired.
"""

import logging
from typing import Dict, List

logger = logging.getLogger(__name__)

Row = Dict[str, str]


class FormatError(ValueError):
    """Input text cannot be read as a diary table"""


def split_csv_line(line: str) -> List[str]:
    '''
    Split one CSV line into trimmed, unquoted fields

    Examples:
        >>> split_csv_line('a, "b, c" ,d')
        ['a', 'b, c', 'd']

        >>> split_csv_line('"Smith, ""Bob"""')
        ['Smith, "Bob"']
    '''
    fields = []
    current = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]

        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                # Escaped quote inside a quoted field
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append(''.join(current).strip())
    return fields


def parse_csv(text: str) -> List[Row]:
    """
    Parse CSV text into an ordered list of rows keyed by header

    Args:
        text: Full contents of the CSV file

    Returns:
        List of row dicts, in input order

    Raises:
        FormatError: If there is no header line or no data line
    """
    lines = text.strip().split('\n')
    non_empty = [line for line in lines if line.strip()]
    if len(non_empty) < 2:
        raise FormatError('CSV file must have at least a header row and one data row')

    headers = split_csv_line(lines[0])
    logger.debug(f"CSV headers found: {headers}")

    rows = []
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue

        values = split_csv_line(line)
        if len(values) != len(headers):
            logger.warning(
                f"Line {line_number} has {len(values)} values but expected "
                f"{len(headers)} - dropping row"
            )
            continue

        rows.append(dict(zip(headers, values)))

    return rows
