from typing import List, Sequence

from sheet_highlights.collection import HighlightsCollection
from sheet_highlights.config import ConfigError
from sheet_highlights.models import RawSheet, SheetSpec
from sheet_highlights.parsers import parse_sheet

BOOKS = SheetSpec("1", "Books", "books")
HIGHLIGHTS = SheetSpec("2", "Highlights", "highlights")
NOTES = SheetSpec("3", "Reading Log", "table")


def sheet_from_csv(spec: SheetSpec, text: str) -> RawSheet:
    table = parse_sheet(text)
    return RawSheet(sheet_id=spec.sheet_id, sheet_name=spec.name, headers=table.headers, rows=table.rows)


def static_fetch(sheets: List[RawSheet]):
    def fetch_all(specs: Sequence[SheetSpec]) -> List[RawSheet]:
        return sheets

    return fetch_all


def test_refresh_derives_books_highlights_and_catalog() -> None:
    sheets = [
        sheet_from_csv(BOOKS, "Book ID,Title,Author\n1,Dune,Herbert\n2,Emma,Austen\n"),
        sheet_from_csv(HIGHLIGHTS, "Book ID,Highlight,Page\n1,Fear is the mind-killer.,12\n1,Spice must flow,40\n"),
        sheet_from_csv(NOTES, "Book ID,Highlight\n2,never mapped\n"),
    ]
    collection = HighlightsCollection([BOOKS, HIGHLIGHTS, NOTES], static_fetch(sheets)).refresh()

    assert collection.error is None
    assert collection.loading is False
    assert [book.title for book in collection.books] == ["Dune", "Emma"]
    assert [h.highlight for h in collection.highlights] == ["Fear is the mind-killer.", "Spice must flow"]

    catalog = collection.catalog()
    assert [len(entry.highlights) for entry in catalog] == [2, 0]
    assert collection.find("2").book.author == "Austen"
    assert collection.find("missing") is None


def test_failed_sheet_does_not_hide_other_sheets() -> None:
    sheets = [
        sheet_from_csv(BOOKS, "book_id,title\n1,Dune\n"),
        RawSheet.failed(HIGHLIGHTS.sheet_id, HIGHLIGHTS.name, "Failed to load sheet 'Highlights': 500"),
    ]
    collection = HighlightsCollection([BOOKS, HIGHLIGHTS], static_fetch(sheets)).refresh()

    assert collection.error is None
    assert [book.book_id for book in collection.books] == ["1"]
    assert collection.highlights == []
    assert collection.catalog()[0].highlights == ()


def test_orchestration_failure_sets_top_level_error() -> None:
    def broken(specs):
        raise ConfigError("A spreadsheet id is required to fetch sheets.")

    collection = HighlightsCollection([BOOKS], broken).refresh()

    assert collection.loading is False
    assert collection.sheets == []
    assert "spreadsheet id is required" in collection.error
    assert collection.books == []


def test_refresh_replaces_previous_state() -> None:
    results = [
        [sheet_from_csv(BOOKS, "book_id,title\n1,Dune\n")],
        [sheet_from_csv(BOOKS, "book_id,title\n2,Emma\n")],
    ]

    def fetch_all(specs):
        return results.pop(0)

    collection = HighlightsCollection([BOOKS], fetch_all)
    collection.refresh()
    collection.refresh()

    assert [book.title for book in collection.books] == ["Emma"]


def test_loading_flag_is_set_while_fetching() -> None:
    seen = []

    def fetch_all(specs):
        seen.append(collection.loading)
        return []

    collection = HighlightsCollection([], fetch_all)
    collection.refresh()

    assert seen == [True]
    assert collection.loading is False
    assert collection.is_empty
