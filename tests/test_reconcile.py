from sheet_highlights.models import Book, Highlight
from sheet_highlights.reconcile import build_catalog, distinct_books, index_highlights_by_book, lookup


def make_highlight(book_id: str, text: str) -> Highlight:
    return Highlight(book_id=book_id, highlight=text)


def test_index_preserves_source_order_per_book() -> None:
    highlights = [
        make_highlight("1", "first"),
        make_highlight("2", "other"),
        make_highlight("1", "second"),
        make_highlight("1", "third"),
    ]

    index = index_highlights_by_book(highlights)

    assert list(index) == ["1", "2"]
    assert [h.highlight for h in index["1"]] == ["first", "second", "third"]


def test_lookup_missing_book_returns_empty_list() -> None:
    index = index_highlights_by_book([make_highlight("1", "text")])

    assert lookup(index, "404") == []
    assert lookup({}, "1") == []


def test_lookup_is_exact_match_only() -> None:
    index = index_highlights_by_book([make_highlight("B1", "text")])

    assert lookup(index, "b1") == []
    assert lookup(index, " B1") == []
    assert [h.highlight for h in lookup(index, "B1")] == ["text"]


def test_lookup_returns_a_copy() -> None:
    index = index_highlights_by_book([make_highlight("1", "text")])

    lookup(index, "1").clear()

    assert len(index["1"]) == 1


def test_distinct_books_keeps_first_occurrence() -> None:
    books = [Book(book_id="1", title="Dune"), Book(book_id="2"), Book(book_id="1", title="Dune (dup)")]

    assert [book.title for book in distinct_books(books)] == ["Dune", ""]


def test_build_catalog_pairs_books_with_highlights() -> None:
    books = [Book(book_id="1", title="Dune"), Book(book_id="2", title="Emma")]
    index = index_highlights_by_book([make_highlight("1", "spice"), make_highlight("3", "orphan")])

    catalog = build_catalog(books, index)

    assert [entry.book.title for entry in catalog] == ["Dune", "Emma"]
    assert [h.highlight for h in catalog[0].highlights] == ["spice"]
    assert catalog[1].highlights == ()


def test_highlight_id_is_stable_and_content_based() -> None:
    first = Highlight(book_id="1", highlight="text", extras=(("Page", "3"),))
    same = Highlight(book_id="1", highlight="text", extras=(("Page", "3"),))
    other = Highlight(book_id="1", highlight="text", extras=(("Page", "4"),))

    assert first.highlight_id == same.highlight_id
    assert first.highlight_id != other.highlight_id
