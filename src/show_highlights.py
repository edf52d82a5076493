"""Command line entry point for viewing book highlights kept in a Google spreadsheet."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import requests

from sheet_highlights.collection import HighlightsCollection
from sheet_highlights.config import AppConfig, ConfigError, load_config, parse_sheet_spec
from sheet_highlights.fetchers import GoogleSheetsFetcher
from sheet_highlights.mapping import BOOK_RULES, HIGHLIGHT_RULES, describe_bindings
from sheet_highlights.markdown import VIEWS, render_book_detail, render_collection

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNKNOWN_BOOK = 2


def _parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, help="Path to JSON configuration file", default=None)
    parser.add_argument("--spreadsheet", help="Id of the public Google spreadsheet", default=None)
    parser.add_argument(
        "--sheet",
        action="append",
        dest="sheets",
        metavar="ID:NAME[:KIND]",
        help="Sheet to load (repeatable; KIND is books, highlights, combined or table)",
        default=None,
    )
    parser.add_argument("--view", choices=VIEWS, default="cards", help="How to display the collection")
    parser.add_argument("--book", help="Show the detail panel for this book id", default=None)
    parser.add_argument(
        "--show-mapping",
        action="store_true",
        help="Print how each sheet's headers map onto book and highlight fields",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser.parse_args(list(argv))


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _combine_config(args: argparse.Namespace) -> AppConfig:
    try:
        file_config = load_config(args.config)
    except FileNotFoundError as exc:
        raise SystemExit(f"Configuration file not found: {args.config}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise SystemExit(f"Failed to read configuration file: {exc}") from exc
    config = AppConfig.from_mapping(file_config)

    if args.spreadsheet is not None:
        config.spreadsheet_id = args.spreadsheet.strip()
    if args.sheets:
        config.sheets = [parse_sheet_spec(value) for value in args.sheets]
    return config


def _print_mapping(collection: HighlightsCollection) -> None:
    for spec, sheet in zip(collection.specs, collection.sheets):
        print(f"## {sheet.sheet_name} ({spec.kind})")
        if not sheet.ok:
            print(f"  error: {sheet.error}")
            continue
        rules = HIGHLIGHT_RULES if spec.kind == "highlights" else BOOK_RULES
        for header, target in describe_bindings(sheet.headers, rules):
            print(f"  {header!r} -> {target or '(unmapped)'}")
        if spec.kind == "combined":
            for header, target in describe_bindings(sheet.headers, HIGHLIGHT_RULES):
                if target:
                    print(f"  {header!r} -> {target} (highlights)")
        print()


def main(argv: Optional[Iterable[str]] = None, session: Optional[requests.Session] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.verbose)

    try:
        config = _combine_config(args)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    def fetch_all(specs):
        fetcher = GoogleSheetsFetcher.from_config(config, session=session)
        return fetcher.fetch_all(specs)

    collection = HighlightsCollection(config.sheets, fetch_all).refresh()

    if args.show_mapping and not collection.error:
        _print_mapping(collection)

    if args.book is not None and not collection.error:
        entry = collection.find(args.book)
        if entry is None:
            print(f"No book with id {args.book!r} in the collection.", file=sys.stderr)
            return EXIT_UNKNOWN_BOOK
        print(render_book_detail(entry))
        return EXIT_OK

    print(render_collection(collection, view=args.view))
    return EXIT_ERROR if collection.error else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
