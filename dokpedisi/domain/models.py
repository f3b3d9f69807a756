"""Domain models - plain data structures with no external dependencies"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

# Fallback for any date that cannot be parsed
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)

RawRow = Sequence[str]

# The header occupies sheet row 1
FIRST_DATA_ROW = 2


class DocumentStatus(Enum):
    """Status of a document, derived from its expedition history"""

    SIGNED = "Signed"
    UNKNOWN = "Unknown"


class DateSource(Enum):
    """Which parsing rule produced a row date"""

    DMY = "DMY"  # D/M/YYYY
    FALLBACK = "FALLBACK"
    EPOCH = "EPOCH"


@dataclass(frozen=True)
class ColumnMap:
    """
    Column layout of the agenda sheet (0-based indices).

    The layout has shifted between sheet versions, so it is injected as
    configuration instead of being hard-coded in the parser.
    """

    agenda_no: int
    created_at: int
    sender: int
    subject: int
    history_start: int  # first (details, recipient, signature) triplet
    name: str = "custom"

    def __post_init__(self) -> None:
        for attr in ("agenda_no", "created_at", "sender", "subject", "history_start"):
            if getattr(self, attr) < 0:
                raise ValueError(f"ColumnMap.{attr} must be >= 0")


LEGACY_COLUMN_MAP = ColumnMap(
    name="legacy",
    agenda_no=0,
    created_at=1,
    sender=2,
    subject=3,
    history_start=6,
)


@dataclass(frozen=True)
class RawFields:
    """Header fields of one sheet row, after trimming and date parsing"""

    agenda_no: str
    created_at: datetime.datetime
    created_at_source: DateSource
    sender: str
    perihal: str
    cells: tuple[str, ...] = ()
    sheet_row: int | None = None  # 1-based row number in the sheet


@dataclass(frozen=True)
class ExpeditionHistoryEntry:
    """One hand-off of a document to a recipient"""

    timestamp: datetime.datetime
    recipient: str
    order: int  # 1-based, no gaps
    signature: str | None = None  # URL or inline data URL
    notes: str | None = None
    details: str | None = None  # e.g. "Diterima pada 2024-01-16 jam 10:00. Catatan: -"


@dataclass(frozen=True)
class Document:
    """
    An agenda document and its expedition history.

    Status, current recipient, last expedition summary, received date and
    signature are read-only views of the last history entry.
    """

    id: str
    agenda_no: str
    sender: str
    perihal: str
    created_at: datetime.datetime
    expedition_history: tuple[ExpeditionHistoryEntry, ...] = ()
    is_from_google_sheets: bool = True
    sheet_row: int | None = None  # None for local documents

    @property
    def last_entry(self) -> ExpeditionHistoryEntry | None:
        return self.expedition_history[-1] if self.expedition_history else None

    @property
    def current_status(self) -> DocumentStatus:
        return DocumentStatus.SIGNED if self.expedition_history else DocumentStatus.UNKNOWN

    @property
    def position(self) -> DocumentStatus:
        """Legacy alias of current_status"""
        return self.current_status

    @property
    def current_recipient(self) -> str | None:
        last = self.last_entry
        return last.recipient if last else None

    @property
    def last_expedition(self) -> str | None:
        last = self.last_entry
        return last.details if last else None

    @property
    def tanggal_terima(self) -> datetime.datetime | None:
        last = self.last_entry
        return last.timestamp if last else None

    @property
    def signature(self) -> str | None:
        last = self.last_entry
        return last.signature if last else None


@dataclass(frozen=True)
class ExpeditionEvent:
    """Input of a new hand-off, applied to one or more documents"""

    recipient: str
    date: datetime.date
    time: str  # "HH:MM" or "HH:MM:SS"
    notes: str | None = None
    signature: str | None = None


@dataclass(frozen=True)
class ExpeditionUpdate:
    """
    Payload sent to the persistence collaborator after an append.

    sheet_row identifies the row to write; agenda_no is repeated so the
    writer can check that the row still holds the same document.
    """

    agenda_no: str
    last_expedition_summary: str
    current_location: str
    status: str
    signature: str | None = None
    sheet_row: int | None = None

    @classmethod
    def from_document(cls, document: Document) -> ExpeditionUpdate:
        return cls(
            sheet_row=document.sheet_row,
            agenda_no=document.agenda_no,
            last_expedition_summary=document.last_expedition or "",
            current_location=document.current_recipient or "",
            status=document.current_status.value,
            signature=document.signature,
        )


@dataclass(frozen=True)
class IngestionReport:
    """Result of one ingestion pass over raw rows"""

    documents: list[Document] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0  # rows without an agenda number


@dataclass(frozen=True)
class IngestionResult:
    """Result of a refresh; documents is empty and error is set when the fetch failed"""

    documents: list[Document] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0
    error: str | None = None
    fetched_at: datetime.datetime | None = None


@dataclass(frozen=True)
class ExpeditionOutcome:
    """Result of recording an expedition locally and persisting it"""

    documents: list[Document] = field(default_factory=list)
    persisted_agenda_nos: list[str] = field(default_factory=list)
    failed_agenda_nos: list[str] = field(default_factory=list)
    local_agenda_nos: list[str] = field(default_factory=list)  # not in the sheet, not written
