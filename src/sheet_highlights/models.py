"""Data models for spreadsheet-backed book highlights."""
from __future__ import annotations

from dataclasses import dataclass, field
from hashlib import sha1
from typing import Dict, Optional, Tuple

SHEET_KINDS = ("books", "highlights", "combined", "table")


@dataclass(frozen=True)
class SheetSpec:
    """Identifies one spreadsheet tab and how its rows should be read."""

    sheet_id: str
    name: str
    kind: str = "table"

    @staticmethod
    def infer_kind(name: str) -> str:
        lowered = name.lower()
        if "highlight" in lowered:
            return "highlights"
        if "book" in lowered:
            return "books"
        return "table"

    @property
    def has_books(self) -> bool:
        return self.kind in ("books", "combined")

    @property
    def has_highlights(self) -> bool:
        return self.kind in ("highlights", "combined")


@dataclass(frozen=True)
class RawSheet:
    """Parsed but unmapped contents of a single sheet fetch.

    Every row has exactly ``len(headers)`` cells. A failed fetch carries an
    ``error`` message and no headers or rows.
    """

    sheet_id: str
    sheet_name: str
    headers: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()
    error: Optional[str] = None

    @classmethod
    def failed(cls, sheet_id: str, sheet_name: str, error: str) -> "RawSheet":
        return cls(sheet_id=sheet_id, sheet_name=sheet_name, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def records(self) -> list[Dict[str, str]]:
        return [dict(zip(self.headers, row)) for row in self.rows]


@dataclass(frozen=True)
class Book:
    """A single book row. Values are kept exactly as the sheet holds them."""

    book_id: str = ""
    title: str = ""
    author: str = ""
    genre: str = ""
    publication_year: str = ""
    cover_image: str = ""
    goodreads_link: str = ""


@dataclass(frozen=True)
class Highlight:
    """A highlighted passage belonging to a book.

    Columns that do not map onto a known field are kept in ``extras`` as
    ``(header, value)`` pairs, in sheet order.
    """

    book_id: str
    highlight: str
    extras: Tuple[Tuple[str, str], ...] = ()
    highlight_id: str = field(init=False)

    def __post_init__(self) -> None:
        components = [self.book_id.strip(), self.highlight.strip()]
        components.extend(f"{key}={value}" for key, value in self.extras)
        digest_input = "\u241f".join(components).encode("utf-8")
        object.__setattr__(self, "highlight_id", sha1(digest_input).hexdigest())

    def get(self, header: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.extras:
            if key == header:
                return value
        return default


@dataclass(frozen=True)
class CatalogEntry:
    """A book paired with the highlights that reference it."""

    book: Book
    highlights: Tuple[Highlight, ...] = ()
