"""Domain layer - models and interfaces with no external dependencies"""

from dokpedisi.domain.errors import (
    DokpedisiError,
    ExternalFetchError,
    ExternalWriteError,
    SignatureUploadError,
    ValidationError,
)
from dokpedisi.domain.models import (
    EPOCH,
    LEGACY_COLUMN_MAP,
    ColumnMap,
    DateSource,
    Document,
    DocumentStatus,
    ExpeditionEvent,
    ExpeditionHistoryEntry,
    ExpeditionOutcome,
    ExpeditionUpdate,
    IngestionReport,
    IngestionResult,
    RawFields,
)
from dokpedisi.domain.ports import (
    ExpeditionWriter,
    SheetRowSource,
    SignatureStorage,
)

__all__ = [
    # Models
    "EPOCH",
    "LEGACY_COLUMN_MAP",
    "ColumnMap",
    "DateSource",
    "Document",
    "DocumentStatus",
    "ExpeditionEvent",
    "ExpeditionHistoryEntry",
    "ExpeditionOutcome",
    "ExpeditionUpdate",
    "IngestionReport",
    "IngestionResult",
    "RawFields",
    # Errors
    "DokpedisiError",
    "ValidationError",
    "ExternalFetchError",
    "ExternalWriteError",
    "SignatureUploadError",
    # Ports
    "SheetRowSource",
    "ExpeditionWriter",
    "SignatureStorage",
]
