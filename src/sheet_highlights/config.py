"""Configuration helpers for the highlights viewer."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import SHEET_KINDS, SheetSpec

DEFAULT_SPREADSHEET_ID = "1Hwu1Dk8RBD5ospxLfKt_L4HO0NO_KRL-S3znt28E814"
DEFAULT_EXPORT_URL_TEMPLATE = (
    "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=csv&gid={sheet_id}"
)
DEFAULT_USER_AGENT = "sheet-highlights/1.0"


class ConfigError(ValueError):
    """Raised when the sheet configuration cannot be used."""


def _default_sheets() -> List[SheetSpec]:
    return [SheetSpec(sheet_id="0", name="Book Highlights", kind="combined")]


def parse_sheet_spec(data: Any) -> SheetSpec:
    """Build a :class:`SheetSpec` from a mapping or an ``ID:NAME[:KIND]`` string."""

    if isinstance(data, str):
        if ":" not in data:
            raise ConfigError(f"Sheet must be given as ID:NAME[:KIND], got {data!r}")
        sheet_id, name = (part.strip() for part in data.split(":", 1))
        kind = None
        # The name may itself contain colons; only a known kind is split off.
        head, _, tail = name.rpartition(":")
        if head and tail.strip().lower() in SHEET_KINDS:
            name, kind = head.strip(), tail.strip()
        data = {"id": sheet_id, "name": name, "kind": kind}

    if not isinstance(data, dict):
        raise ConfigError(f"Sheet entry must be an object, got {type(data).__name__}")

    sheet_id = str(data.get("id") or "").strip()
    if not sheet_id:
        raise ConfigError(f"Sheet entry is missing an id: {data!r}")
    name = str(data.get("name") or "").strip() or f"Sheet {sheet_id}"
    kind = str(data.get("kind") or "").strip().lower() or SheetSpec.infer_kind(name)
    if kind not in SHEET_KINDS:
        raise ConfigError(f"Unknown sheet kind {kind!r} for {name}; expected one of {', '.join(SHEET_KINDS)}")
    return SheetSpec(sheet_id=sheet_id, name=name, kind=kind)


@dataclass
class AppConfig:
    """Holds the spreadsheet location and the sheets to load."""

    spreadsheet_id: str = DEFAULT_SPREADSHEET_ID
    sheets: List[SheetSpec] = field(default_factory=_default_sheets)
    export_url_template: str = DEFAULT_EXPORT_URL_TEMPLATE
    max_workers: Optional[int] = None
    timeout: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "AppConfig":
        kwargs: Dict[str, Any] = {}
        if "spreadsheet_id" in data and data["spreadsheet_id"] is not None:
            kwargs["spreadsheet_id"] = str(data["spreadsheet_id"]).strip()
        if "sheets" in data and data["sheets"] is not None:
            if not isinstance(data["sheets"], list):
                raise ConfigError("'sheets' must be a list")
            kwargs["sheets"] = [parse_sheet_spec(entry) for entry in data["sheets"]]
        if "export_url_template" in data and data["export_url_template"]:
            kwargs["export_url_template"] = str(data["export_url_template"])
        if "max_workers" in data and data["max_workers"] is not None:
            try:
                kwargs["max_workers"] = int(data["max_workers"])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"'max_workers' must be an integer, got {data['max_workers']!r}") from exc
            if kwargs["max_workers"] < 1:
                raise ConfigError("'max_workers' must be at least 1")
        if "timeout" in data and data["timeout"] is not None:
            try:
                kwargs["timeout"] = float(data["timeout"])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"'timeout' must be a number, got {data['timeout']!r}") from exc
        if "user_agent" in data and data["user_agent"]:
            kwargs["user_agent"] = str(data["user_agent"])
        return cls(**kwargs)


def load_config(path: Optional[Path]) -> Dict[str, Any]:
    """Load a JSON configuration file if provided."""

    if path is None:
        return {}
    with path.expanduser().resolve().open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")
    return data
