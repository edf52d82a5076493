"""Map heterogeneous sheet headers onto the book and highlight schemas."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Book, Highlight, RawSheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRule:
    """Binds a header to ``target`` when any keyword occurs in its lower-cased name."""

    target: str
    keywords: Tuple[str, ...]

    def matches(self, header: str) -> bool:
        lowered = header.lower()
        return any(keyword in lowered for keyword in self.keywords)


# Rules are evaluated in order and the first match wins, so the explicit
# book id spellings come before the other fields and the bare "id" last.
BOOK_RULES: Tuple[FieldRule, ...] = (
    FieldRule("book_id", ("book_id", "book id")),
    FieldRule("title", ("title",)),
    FieldRule("author", ("author",)),
    FieldRule("genre", ("genre",)),
    FieldRule("publication_year", ("publication", "year", "published")),
    FieldRule("cover_image", ("cover", "image")),
    FieldRule("goodreads_link", ("goodreads", "link", "url")),
    FieldRule("book_id", ("id",)),
)

HIGHLIGHT_RULES: Tuple[FieldRule, ...] = (
    FieldRule("book_id", ("book_id", "book id")),
    FieldRule("highlight", ("highlight", "quote")),
    FieldRule("book_id", ("id",)),
)


def match_header(header: str, rules: Sequence[FieldRule]) -> Optional[str]:
    for rule in rules:
        if rule.matches(header):
            return rule.target
    return None


def describe_bindings(
    headers: Sequence[str], rules: Sequence[FieldRule]
) -> List[Tuple[str, Optional[str]]]:
    """Return ``(header, field)`` pairs in column order.

    ``field`` is ``None`` for columns that stay unmapped. A field is bound to
    the first column that claims it; later columns that would claim the same
    field are reported as unmapped, even when they repeat the header name.
    """

    fields, _ = _column_plan(headers, rules)
    targets = {index: target for target, index in fields.items()}
    return [(header, targets.get(index)) for index, header in enumerate(headers)]


def _column_plan(
    headers: Sequence[str], rules: Sequence[FieldRule]
) -> Tuple[Dict[str, int], List[int]]:
    fields: Dict[str, int] = {}
    unmapped: List[int] = []
    for index, header in enumerate(headers):
        target = match_header(header, rules)
        if target is None or target in fields:
            unmapped.append(index)
        else:
            fields[target] = index
    return fields, unmapped


def _usable(sheet: RawSheet) -> bool:
    return sheet.error is None and bool(sheet.rows)


def map_to_books(sheet: RawSheet) -> List[Book]:
    """Map a sheet onto :class:`Book` records, dropping rows without a book id."""

    if not _usable(sheet):
        return []

    fields, _ = _column_plan(sheet.headers, BOOK_RULES)
    books: List[Book] = []
    for row in sheet.rows:
        values = {name: row[index] for name, index in fields.items()}
        book = Book(**values)
        if not book.book_id:
            continue
        books.append(book)

    dropped = len(sheet.rows) - len(books)
    if dropped:
        logger.debug("Dropped %d row(s) without a book id from %s", dropped, sheet.sheet_name)
    return books


def map_to_highlights(sheet: RawSheet) -> List[Highlight]:
    """Map a sheet onto :class:`Highlight` records.

    Unmapped columns are kept as extras under their original header name.
    Rows missing either the book id or the highlight text are dropped.
    """

    if not _usable(sheet):
        return []

    fields, unmapped = _column_plan(sheet.headers, HIGHLIGHT_RULES)
    book_index = fields.get("book_id")
    text_index = fields.get("highlight")

    highlights: List[Highlight] = []
    for row in sheet.rows:
        book_id = row[book_index] if book_index is not None else ""
        text = row[text_index] if text_index is not None else ""
        if not (book_id and text):
            continue
        extras = tuple((sheet.headers[index], row[index]) for index in unmapped)
        highlights.append(Highlight(book_id=book_id, highlight=text, extras=extras))

    dropped = len(sheet.rows) - len(highlights)
    if dropped:
        logger.debug(
            "Dropped %d row(s) without a book id or highlight from %s", dropped, sheet.sheet_name
        )
    return highlights
