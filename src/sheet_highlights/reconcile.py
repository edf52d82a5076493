"""Join highlights to the books they were taken from."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from .models import Book, CatalogEntry, Highlight

BookHighlightsIndex = Dict[str, List[Highlight]]


def index_highlights_by_book(highlights: Iterable[Highlight]) -> BookHighlightsIndex:
    """Group highlights by ``book_id`` keeping the source order within each book."""

    index: BookHighlightsIndex = {}
    for highlight in highlights:
        index.setdefault(highlight.book_id, []).append(highlight)
    return index


def lookup(index: Mapping[str, List[Highlight]], book_id: str) -> List[Highlight]:
    # Exact match only; "B1" and "b1" are different books.
    return list(index.get(book_id, ()))


def distinct_books(books: Iterable[Book]) -> List[Book]:
    """Keep the first book seen for each id."""

    seen: Dict[str, Book] = {}
    for book in books:
        seen.setdefault(book.book_id, book)
    return list(seen.values())


def build_catalog(books: Iterable[Book], index: Mapping[str, List[Highlight]]) -> List[CatalogEntry]:
    return [
        CatalogEntry(book=book, highlights=tuple(lookup(index, book.book_id)))
        for book in distinct_books(books)
    ]
