"""Utilities for reading book highlights from a public Google spreadsheet."""

from .config import AppConfig
from .models import Book, Highlight, RawSheet, SheetSpec

__all__ = ["AppConfig", "Book", "Highlight", "RawSheet", "SheetSpec"]
