"""HTTP fetchers for retrieving highlight sheets from remote services."""
from .google_sheets import GoogleSheetsFetcher, SheetFetchError

__all__ = ["GoogleSheetsFetcher", "SheetFetchError"]
