"""Fetch sheets from a public Google spreadsheet through its CSV export."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

import requests

from sheet_highlights.config import (
    DEFAULT_EXPORT_URL_TEMPLATE,
    DEFAULT_USER_AGENT,
    AppConfig,
    ConfigError,
)
from sheet_highlights.models import RawSheet, SheetSpec
from sheet_highlights.parsers import parse_sheet

logger = logging.getLogger(__name__)


class SheetFetchError(RuntimeError):
    """Raised when a sheet's CSV export cannot be downloaded."""


class GoogleSheetsFetcher:
    """Download and parse the CSV export of spreadsheet tabs.

    Every sheet is fetched independently. :meth:`fetch_sheet` never raises:
    a failed download or parse is reported through :attr:`RawSheet.error`
    so that one broken tab never hides the others.

    Parameters
    ----------
    spreadsheet_id:
        The id from the spreadsheet URL
        (``https://docs.google.com/spreadsheets/d/<id>/edit``). The sheet must
        be shared publicly; no credentials are sent.
    export_url_template:
        ``str.format`` template receiving ``spreadsheet_id`` and ``sheet_id``.
    max_workers:
        Upper bound on concurrent downloads in :meth:`fetch_all`. ``None``
        starts one download per sheet.
    timeout:
        Per-request timeout in seconds. ``None`` waits indefinitely.
    session:
        Optional ``requests.Session`` shared by every download. Primarily
        intended for tests so that HTTP requests can be mocked; it must be
        safe to call from several threads. Without it each download opens
        and closes its own session, since ``requests.Session`` is not
        guaranteed to be thread-safe.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        *,
        export_url_template: str = DEFAULT_EXPORT_URL_TEMPLATE,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not spreadsheet_id or not spreadsheet_id.strip():
            raise ConfigError("A spreadsheet id is required to fetch sheets.")
        if max_workers is not None and max_workers < 1:
            raise ConfigError("max_workers must be at least 1")
        self.spreadsheet_id = spreadsheet_id.strip()
        self.export_url_template = export_url_template
        self.max_workers = max_workers
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session

    @classmethod
    def from_config(
        cls, config: AppConfig, session: Optional[requests.Session] = None
    ) -> "GoogleSheetsFetcher":
        return cls(
            config.spreadsheet_id,
            export_url_template=config.export_url_template,
            max_workers=config.max_workers,
            timeout=config.timeout,
            user_agent=config.user_agent,
            session=session,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def export_url(self, sheet_id: str) -> str:
        return self.export_url_template.format(
            spreadsheet_id=self.spreadsheet_id, sheet_id=sheet_id
        )

    def fetch_sheet(self, spec: SheetSpec) -> RawSheet:
        """Fetch and parse one sheet, capturing any failure in the result."""

        try:
            csv_text = self._download(spec)
            table = parse_sheet(csv_text)
        except Exception as exc:
            message = f"Failed to load sheet '{spec.name}': {exc}"
            logger.warning(message)
            return RawSheet.failed(spec.sheet_id, spec.name, message)

        logger.info(
            "Loaded sheet %s (%d column(s), %d row(s))",
            spec.name,
            len(table.headers),
            len(table.rows),
        )
        return RawSheet(
            sheet_id=spec.sheet_id,
            sheet_name=spec.name,
            headers=table.headers,
            rows=table.rows,
        )

    def fetch_all(self, specs: Sequence[SheetSpec]) -> List[RawSheet]:
        """Fetch every sheet concurrently and return results in ``specs`` order."""

        if not specs:
            return []
        workers = len(specs) if self.max_workers is None else min(self.max_workers, len(specs))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sheet-fetch") as executor:
            futures = [executor.submit(self.fetch_sheet, spec) for spec in specs]
            return [future.result() for future in futures]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @property
    def _default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/csv, text/plain;q=0.9, */*;q=0.1",
        }

    def _download(self, spec: SheetSpec) -> str:
        url = self.export_url(spec.sheet_id)
        logger.debug("Fetching sheet %s from %s", spec.name, url)
        if self._session is not None:
            response = self._session.get(url, headers=self._default_headers, timeout=self.timeout)
        else:
            with requests.Session() as session:
                response = session.get(url, headers=self._default_headers, timeout=self.timeout)
        self._ensure_success(response)
        return response.content.decode("utf-8-sig")

    def _ensure_success(self, response: object) -> None:
        status = getattr(response, "status_code", None)
        if status is None or status >= 400:
            raise SheetFetchError(f"request failed with status code {status}")
