"""Factory - dependency wiring

Builds every adapter from AppConfig and assembles the DocumentStore.
"""

import logging

from dokpedisi.adapters.cloud_storage import GCSSignatureStorage, InlineSignatureStorage
from dokpedisi.adapters.credentials import get_google_credentials
from dokpedisi.adapters.csv_export import CsvExportRowSource
from dokpedisi.adapters.google_sheets import (
    GoogleSheetsExpeditionWriter,
    GoogleSheetsRowSource,
    NullExpeditionWriter,
)
from dokpedisi.config import AppConfig
from dokpedisi.domain.ports import ExpeditionWriter, SheetRowSource, SignatureStorage
from dokpedisi.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


def create_document_store(config: AppConfig | None = None) -> DocumentStore:
    """
    Build a DocumentStore with all of its collaborators.

    Args:
        config: application settings (default: loaded from the environment)

    Returns:
        DocumentStore: not yet loaded; call refresh() or ensure_loaded()

    Raises:
        ValueError: a required setting is missing or invalid
    """
    if config is None:
        config = AppConfig.from_env()

    column_map = config.column_map
    logger.info(
        "Creating document store: sheet=%s, row_source=%s, layout=%s",
        config.sheet_name,
        config.row_source,
        column_map.name,
    )

    # Credentials are only needed by the Sheets API adapters
    needs_credentials = config.row_source == "sheets_api" or config.enable_sheet_writes
    creds = get_google_credentials() if needs_credentials else None

    row_source: SheetRowSource
    if config.row_source == "csv_export":
        row_source = CsvExportRowSource(
            spreadsheet_id=config.spreadsheet_id,
            sheet_name=config.sheet_name,
            timeout=config.fetch_timeout_seconds,
        )
    else:
        row_source = GoogleSheetsRowSource(
            spreadsheet_id=config.spreadsheet_id,
            sheet_name=config.sheet_name,
            credentials=creds,
            timeout=config.fetch_timeout_seconds,
        )

    writer: ExpeditionWriter
    if config.enable_sheet_writes:
        writer = GoogleSheetsExpeditionWriter(
            spreadsheet_id=config.spreadsheet_id,
            sheet_name=config.sheet_name,
            credentials=creds,
            column_map=column_map,
            timeout=config.fetch_timeout_seconds,
        )
    else:
        logger.warning("Sheet writes disabled, expeditions will not be persisted")
        writer = NullExpeditionWriter()

    signature_storage: SignatureStorage
    if config.gcs_bucket_name:
        signature_storage = GCSSignatureStorage(bucket_name=config.gcs_bucket_name)
        logger.info("Signature storage: gs://%s", config.gcs_bucket_name)
    else:
        signature_storage = InlineSignatureStorage()
        logger.info("GCS_BUCKET_NAME not set, signatures are kept inline")

    return DocumentStore(
        row_source=row_source,
        writer=writer,
        signature_storage=signature_storage,
        column_map=column_map,
    )
