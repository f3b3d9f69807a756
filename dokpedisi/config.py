"""Configuration - typed loading of environment variables"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from dokpedisi.domain.models import LEGACY_COLUMN_MAP, ColumnMap

ROW_SOURCES = ("sheets_api", "csv_export")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {raw!r}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class AppConfig:
    """Application settings"""
    spreadsheet_id: str
    sheet_name: str = "SURATMASUK"
    row_source: str = "sheets_api"
    fetch_timeout_seconds: float = 15.0
    gcs_bucket_name: str = ""
    column_layout: str = LEGACY_COLUMN_MAP.name
    column_agenda_no: int = LEGACY_COLUMN_MAP.agenda_no
    column_created_at: int = LEGACY_COLUMN_MAP.created_at
    column_sender: int = LEGACY_COLUMN_MAP.sender
    column_subject: int = LEGACY_COLUMN_MAP.subject
    column_history_start: int = LEGACY_COLUMN_MAP.history_start
    enable_sheet_writes: bool = True

    @property
    def column_map(self) -> ColumnMap:
        """ColumnMap built from the configured layout and column indices"""
        return ColumnMap(
            name=self.column_layout,
            agenda_no=self.column_agenda_no,
            created_at=self.column_created_at,
            sender=self.column_sender,
            subject=self.column_subject,
            history_start=self.column_history_start,
        )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load settings from the environment (and .env)"""
        load_dotenv()

        spreadsheet_id = os.getenv("SPREADSHEET_ID")
        if not spreadsheet_id:
            raise ValueError("SPREADSHEET_ID is not set in environment")

        row_source = os.getenv("ROW_SOURCE", "sheets_api").strip().lower()
        if row_source not in ROW_SOURCES:
            raise ValueError(
                f"ROW_SOURCE must be one of {', '.join(ROW_SOURCES)}, got {row_source!r}"
            )

        return cls(
            spreadsheet_id=spreadsheet_id,
            sheet_name=os.getenv("SHEET_NAME", "SURATMASUK"),
            row_source=row_source,
            fetch_timeout_seconds=_float_env("FETCH_TIMEOUT_SECONDS", 15.0),
            gcs_bucket_name=os.getenv("GCS_BUCKET_NAME", ""),
            column_layout=os.getenv("COLUMN_LAYOUT", LEGACY_COLUMN_MAP.name),
            column_agenda_no=_int_env("COLUMN_AGENDA_NO", LEGACY_COLUMN_MAP.agenda_no),
            column_created_at=_int_env("COLUMN_CREATED_AT", LEGACY_COLUMN_MAP.created_at),
            column_sender=_int_env("COLUMN_SENDER", LEGACY_COLUMN_MAP.sender),
            column_subject=_int_env("COLUMN_SUBJECT", LEGACY_COLUMN_MAP.subject),
            column_history_start=_int_env(
                "COLUMN_HISTORY_START", LEGACY_COLUMN_MAP.history_start
            ),
            enable_sheet_writes=_bool_env("ENABLE_SHEET_WRITES", True),
        )
