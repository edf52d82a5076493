"""Parsers that turn exported CSV text into normalised tables."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

QUOTE = '"'
DELIMITER = ","


@dataclass(frozen=True)
class ParsedTable:
    """Header row plus data rows padded or truncated to the header width."""

    headers: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = field(default_factory=tuple)


def tokenize_line(line: str) -> List[str]:
    """Split a single CSV line into trimmed field values.

    Quoted fields may contain commas, and ``""`` inside a quoted field is a
    literal quote. A line ending inside an open quote keeps the rest of the
    line as field content; records never continue onto the next line. The
    quotes wrapping a field are consumed here, so callers only need to trim.
    """

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if char == QUOTE:
            if in_quotes and index + 1 < length and line[index + 1] == QUOTE:
                current.append(QUOTE)
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1

    fields.append("".join(current).strip())
    return fields


def _clean(values: List[str]) -> List[str]:
    # Wrapping quotes are already consumed by the tokenizer; any quote left in
    # a value came from a "" escape and is content.
    return [value.strip() for value in values]


def parse_sheet(csv_text: str) -> ParsedTable:
    """Parse the CSV export of one sheet.

    Blank header cells are dropped from the schema entirely, so data cells
    after a blank header shift left onto the next named column. Rows whose
    cells are all empty are skipped.
    """

    lines = [line.strip().lstrip("\ufeff") for line in csv_text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        return ParsedTable()

    headers = tuple(header for header in _clean(tokenize_line(lines[0])) if header)
    if not headers:
        return ParsedTable()

    width = len(headers)
    rows: List[Tuple[str, ...]] = []
    for line in lines[1:]:
        values = _clean(tokenize_line(line))
        if not any(values):
            continue
        if len(values) < width:
            values.extend([""] * (width - len(values)))
        rows.append(tuple(values[:width]))

    return ParsedTable(headers=headers, rows=tuple(rows))
