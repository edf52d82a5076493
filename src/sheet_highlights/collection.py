"""In-memory view over one fetch cycle of the configured sheets."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from .mapping import map_to_books, map_to_highlights
from .models import Book, CatalogEntry, Highlight, RawSheet, SheetSpec
from .reconcile import BookHighlightsIndex, build_catalog, index_highlights_by_book

logger = logging.getLogger(__name__)

FetchAll = Callable[[Sequence[SheetSpec]], List[RawSheet]]


class HighlightsCollection:
    """Holds the sheets loaded by the last refresh and derives books from them.

    ``fetch_all`` is usually :meth:`GoogleSheetsFetcher.fetch_all`. Books,
    highlights and the per-book index are recomputed from :attr:`sheets`
    every time they are read; nothing else is stored.
    """

    def __init__(self, specs: Sequence[SheetSpec], fetch_all: FetchAll) -> None:
        self.specs = list(specs)
        self._fetch_all = fetch_all
        self.sheets: List[RawSheet] = []
        self.loading = False
        self.error: Optional[str] = None

    def refresh(self) -> "HighlightsCollection":
        """Fetch every sheet and replace the current state in one step.

        Failures of individual sheets stay inside their :class:`RawSheet`.
        Only a failure of the fetch cycle itself sets :attr:`error`.
        """

        self.loading = True
        try:
            sheets = self._fetch_all(self.specs)
        except Exception as exc:
            logger.error("Failed to load sheets: %s", exc)
            self.sheets, self.error = [], f"Failed to load book highlights data: {exc}"
        else:
            self.sheets, self.error = list(sheets), None
            failed = sum(1 for sheet in self.sheets if not sheet.ok)
            logger.info("Loaded %d sheet(s), %d failed", len(self.sheets), failed)
        finally:
            self.loading = False
        return self

    def _sheets_where(self, predicate: Callable[[SheetSpec], bool]) -> List[RawSheet]:
        return [sheet for spec, sheet in zip(self.specs, self.sheets) if predicate(spec)]

    @property
    def books(self) -> List[Book]:
        books: List[Book] = []
        for sheet in self._sheets_where(lambda spec: spec.has_books):
            books.extend(map_to_books(sheet))
        return books

    @property
    def highlights(self) -> List[Highlight]:
        highlights: List[Highlight] = []
        for sheet in self._sheets_where(lambda spec: spec.has_highlights):
            highlights.extend(map_to_highlights(sheet))
        return highlights

    def highlight_index(self) -> BookHighlightsIndex:
        return index_highlights_by_book(self.highlights)

    def catalog(self) -> List[CatalogEntry]:
        return build_catalog(self.books, self.highlight_index())

    def find(self, book_id: str) -> Optional[CatalogEntry]:
        for entry in self.catalog():
            if entry.book.book_id == book_id:
                return entry
        return None

    @property
    def is_empty(self) -> bool:
        return all(sheet.is_empty for sheet in self.sheets)
