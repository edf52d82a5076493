"""Markdown rendering for sheets, book catalogs and book details."""
from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

from .collection import HighlightsCollection
from .models import Book, CatalogEntry, Highlight, RawSheet

VIEWS = ("sheets", "table", "cards")

NO_DATA = "_No data._"
NO_HIGHLIGHTS = "No book highlights found."


def escape_cell(value: str) -> str:
    """Make ``value`` safe to place inside a Markdown table cell."""

    return value.replace("\\", "\\\\").replace("|", "\\|").replace("\r", " ").replace("\n", "<br>")


def _image(value: str) -> str:
    return f"![cover]({value})"


def _hyperlink(value: str) -> str:
    return f"[link]({value})"


def _quoted(value: str) -> str:
    return f'"{value}"'


# Evaluated in order; the first rule whose keyword occurs in the lower-cased
# header decides how the cell is rendered.
CELL_RULES: Tuple[Tuple[Tuple[str, ...], Callable[[str], str]], ...] = (
    (("cover", "image"), _image),
    (("link", "url", "goodreads"), _hyperlink),
    (("highlight", "quote"), _quoted),
)


def render_cell(header: str, value: str) -> str:
    if not value:
        return ""
    lowered = header.lower()
    for keywords, render in CELL_RULES:
        if any(keyword in lowered for keyword in keywords):
            return render(value)
    return value


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    lines = [
        "| " + " | ".join(escape_cell(header) for header in headers) + " |",
        "|" + "|".join(" --- " for _ in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(escape_cell(cell) for cell in row) + " |")
    return lines


def render_error(message: str) -> str:
    return f"> **Error:** {message}"


def render_sheet(sheet: RawSheet) -> str:
    """Render one sheet as a section containing a Markdown table."""

    lines = [f"## {sheet.sheet_name}", ""]
    if sheet.error is not None:
        lines.append(render_error(sheet.error))
    elif not sheet.headers or sheet.is_empty:
        lines.append(NO_DATA)
    else:
        rendered_rows = [
            [render_cell(header, value) for header, value in zip(sheet.headers, row)]
            for row in sheet.rows
        ]
        lines.extend(_table(sheet.headers, rendered_rows))
    lines.append("")
    return "\n".join(lines)


BOOK_TABLE_HEADERS = ("Cover", "Title", "Author", "Genre", "Year", "Highlight", "Goodreads")


def render_book_table(catalog: Sequence[CatalogEntry]) -> str:
    """Render one table row per highlight, or per book when it has none."""

    rows: List[List[str]] = []
    for entry in catalog:
        book = entry.book
        cover = _image(book.cover_image) if book.cover_image else ""
        link = f"[View on Goodreads]({book.goodreads_link})" if book.goodreads_link else ""
        texts = [highlight.highlight for highlight in entry.highlights] or [""]
        for text in texts:
            rows.append(
                [
                    cover,
                    book.title,
                    book.author,
                    book.genre,
                    book.publication_year,
                    _quoted(text) if text else "",
                    link,
                ]
            )
    return "\n".join(_table(BOOK_TABLE_HEADERS, rows)) + "\n"


def _byline(book: Book) -> str:
    details = [value for value in (book.genre, book.publication_year) if value]
    byline = f"_by {book.author}_" if book.author else ""
    if details:
        byline = f"{byline} · {' · '.join(details)}" if byline else " · ".join(details)
    return byline


def render_book_card(entry: CatalogEntry) -> str:
    book = entry.book
    lines = [f"### {book.title or 'Untitled'}", ""]
    byline = _byline(book)
    if byline:
        lines.extend([byline, ""])
    if book.cover_image:
        lines.extend([_image(book.cover_image), ""])
    count = len(entry.highlights)
    summary = f"{count} highlight{'s' if count != 1 else ''} · id `{book.book_id}`"
    if book.goodreads_link:
        summary += f" · [View on Goodreads]({book.goodreads_link})"
    lines.extend([summary, ""])
    return "\n".join(lines)


def render_book_cards(catalog: Sequence[CatalogEntry]) -> str:
    return "\n".join(render_book_card(entry) for entry in catalog)


def render_highlight(highlight: Highlight) -> str:
    lines: List[str] = []
    quote = highlight.highlight.strip().replace("\n", "\n> ")
    lines.append(f"> {quote}")
    for header, value in highlight.extras:
        if value:
            lines.append("")
            lines.append(f"**{header}:** {render_cell(header, value)}")
    lines.append("")
    lines.append(f"<!-- highlight-id: {highlight.highlight_id} -->")
    lines.append("")
    return "\n".join(lines)


def render_book_detail(entry: CatalogEntry) -> str:
    """Render the detail panel for one book and all of its highlights."""

    book = entry.book
    heading_lines = [f"# {book.title or 'Untitled'}", ""]
    byline = _byline(book)
    if byline:
        heading_lines.extend([byline, ""])
    if book.cover_image:
        heading_lines.extend([_image(book.cover_image), ""])
    if book.goodreads_link:
        heading_lines.extend([f"[View on Goodreads]({book.goodreads_link})", ""])
    heading_lines.extend([f"## Highlights ({len(entry.highlights)})", ""])

    if not entry.highlights:
        heading_lines.extend(["_No highlights for this book yet._", ""])
        return "\n".join(heading_lines)

    body = "\n".join(render_highlight(highlight) for highlight in entry.highlights)
    return "\n".join(heading_lines) + body


def render_collection(collection: HighlightsCollection, view: str = "cards") -> str:
    """Render the whole collection.

    A top-level error replaces all content. The ``sheets`` view shows every
    sheet as a raw table with per-sheet errors inline; the ``table`` and
    ``cards`` views show the book catalog.
    """

    if view not in VIEWS:
        raise ValueError(f"Unknown view {view!r}; expected one of {', '.join(VIEWS)}")

    lines = ["# Book Highlights Collection", ""]
    if collection.loading:
        lines.append("Loading book highlights...")
        return "\n".join(lines) + "\n"
    if collection.error:
        lines.append(render_error(collection.error))
        return "\n".join(lines) + "\n"

    if view == "sheets":
        if not collection.sheets:
            lines.append(NO_HIGHLIGHTS)
            return "\n".join(lines) + "\n"
        return "\n".join(lines) + "\n".join(render_sheet(sheet) for sheet in collection.sheets)

    for sheet in collection.sheets:
        if sheet.error is not None:
            lines.extend([render_error(sheet.error), ""])

    catalog = collection.catalog()
    if not catalog:
        lines.append(NO_HIGHLIGHTS)
        return "\n".join(lines) + "\n"

    rendered = render_book_table(catalog) if view == "table" else render_book_cards(catalog)
    return "\n".join(lines) + rendered
