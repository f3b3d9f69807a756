"""DocumentStore - state container around the pure document core

Keeps the current collection together with loading/error/last-sync
bookkeeping, and sends new expeditions to the persistence collaborator.
The parsing and append logic itself lives in the pure service modules.

One store is shared by every request of the API process, and the sync
routes run in a thread pool. Mutations (refresh, local creation, recording
an expedition) are serialized by a re-entrant lock that is held until the
sheet writes of an expedition are done, so two hand-offs on the same
document append two entries and never pick the same free history slot.
Reads use the collection reference that was current when they started.
"""

from __future__ import annotations

import datetime
import logging
import threading
from collections.abc import Collection

from dokpedisi.domain.errors import ExternalFetchError, ExternalWriteError
from dokpedisi.domain.models import (
    LEGACY_COLUMN_MAP,
    ColumnMap,
    Document,
    DocumentStatus,
    ExpeditionEvent,
    ExpeditionOutcome,
    ExpeditionUpdate,
    IngestionResult,
)
from dokpedisi.domain.ports import ExpeditionWriter, SheetRowSource, SignatureStorage
from dokpedisi.logging_config import log_context
from dokpedisi.services.document_assembler import create_local_document
from dokpedisi.services.document_collection import (
    filter_by_status,
    find_by_id,
    find_by_ids,
    ingest_report,
    search,
    sort_documents,
)
from dokpedisi.services.expedition import append_expedition

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    In-memory document collection backed by the agenda sheet.

    Flow:
    1. refresh(): fetch rows -> ingest -> replace sheet documents
    2. record_expedition(): append locally -> write sheet documents back
    """

    def __init__(
        self,
        row_source: SheetRowSource,
        writer: ExpeditionWriter,
        signature_storage: SignatureStorage,
        column_map: ColumnMap = LEGACY_COLUMN_MAP,
    ) -> None:
        """
        Args:
            row_source: source of raw sheet rows
            writer: persistence of new expeditions
            signature_storage: storage of signature images
            column_map: column layout of the sheet
        """
        self._row_source = row_source
        self._writer = writer
        self._signature_storage = signature_storage
        self._column_map = column_map
        self._lock = threading.RLock()

        self.documents: list[Document] = []
        self.is_loading = False
        self.error: str | None = None
        self.last_sync: datetime.datetime | None = None
        self.last_result: IngestionResult | None = None
        self._local_sequence = 0

    @property
    def is_loaded(self) -> bool:
        return self.last_result is not None

    def _local_documents(self) -> list[Document]:
        return [d for d in self.documents if not d.is_from_google_sheets]

    # ── Loading ──────────────────────────────────────────────────────────────

    def refresh(self) -> IngestionResult:
        """
        Reload the collection from the sheet.

        Sheet documents are replaced wholesale; locally created documents
        are kept. A failed fetch does not raise: the result carries no
        documents and an error message, and the store keeps only its local
        documents.

        Returns:
            IngestionResult of this refresh (also kept as last_result)
        """
        with self._lock:
            self.last_result = self._refresh()
            return self.last_result

    def _refresh(self) -> IngestionResult:
        self.is_loading = True
        logger.info("Refreshing documents from sheet (layout=%s)", self._column_map.name)
        try:
            rows = self._row_source.fetch_rows()
        except ExternalFetchError as e:
            logger.exception("Failed to fetch sheet rows")
            self.documents = self._local_documents()
            self.error = str(e)
            return IngestionResult(error=self.error)
        finally:
            self.is_loading = False

        report = ingest_report(rows, self._column_map)
        now = datetime.datetime.now(datetime.UTC)

        self.documents = sort_documents([*report.documents, *self._local_documents()])
        self.error = None
        self.last_sync = now

        return IngestionResult(
            documents=report.documents,
            total_rows=report.total_rows,
            skipped_rows=report.skipped_rows,
            fetched_at=now,
        )

    def ensure_loaded(self) -> IngestionResult:
        """Refresh on first use only; returns the result of the load that happened"""
        with self._lock:
            if self.last_result is None:
                return self.refresh()
            return self.last_result

    # ── Queries ──────────────────────────────────────────────────────────────

    def get(self, document_id: str) -> Document | None:
        return find_by_id(self.documents, document_id)

    def find_by_ids(self, ids: Collection[str]) -> list[Document]:
        return find_by_ids(self.documents, ids)

    def search(self, term: str, status: DocumentStatus | None = None) -> list[Document]:
        """Documents matching term, optionally restricted to one status"""
        return filter_by_status(search(self.documents, term), status)

    # ── Mutations ────────────────────────────────────────────────────────────

    def add_local_document(
        self,
        agenda_no: str,
        sender: str,
        perihal: str,
        created_at: datetime.datetime | None = None,
    ) -> Document:
        """
        Add a document that does not come from the sheet.

        Raises:
            ValidationError: agenda_no is blank
        """
        with self._lock:
            document = create_local_document(
                agenda_no, sender, perihal, self._local_sequence + 1, created_at
            )
            self._local_sequence += 1
            self.documents = sort_documents([*self.documents, document])
            return document

    def record_expedition(
        self, target_ids: Collection[str], event: ExpeditionEvent
    ) -> ExpeditionOutcome:
        """
        Append an expedition to the targeted documents and persist it.

        The local append happens first. Only documents read from the sheet
        are written back; local documents have no sheet row and are listed
        in local_agenda_nos. Write failures are collected in the outcome;
        the local collection is not rolled back, so it can be ahead of the
        sheet after a failed write.

        Args:
            target_ids: ids of the documents handed over
            event: expedition data

        Returns:
            ExpeditionOutcome with the updated documents and write results

        Raises:
            ValidationError: invalid request (nothing is changed)
        """
        with self._lock:
            self.documents = append_expedition(self.documents, target_ids, event)
            updated = self.find_by_ids(target_ids)

            persisted: list[str] = []
            failed: list[str] = []
            local: list[str] = []
            for document in updated:
                context = log_context(
                    doc_id=document.id,
                    agenda_no=document.agenda_no,
                    sheet_row=document.sheet_row,
                )
                if not document.is_from_google_sheets:
                    logger.info("Local document, expedition kept in memory only", extra=context)
                    local.append(document.agenda_no)
                    continue
                try:
                    self._writer.write(ExpeditionUpdate.from_document(document))
                    persisted.append(document.agenda_no)
                except ExternalWriteError:
                    logger.exception("Failed to persist expedition", extra=context)
                    failed.append(document.agenda_no)

        if failed:
            logger.warning(
                "%d of %d expedition write(s) failed, local state is ahead of the sheet",
                len(failed),
                len(updated) - len(local),
            )
        return ExpeditionOutcome(
            documents=updated,
            persisted_agenda_nos=persisted,
            failed_agenda_nos=failed,
            local_agenda_nos=local,
        )

    def store_signature(self, image: str) -> str:
        """Store a captured signature and return its reference"""
        return self._signature_storage.store(image)
