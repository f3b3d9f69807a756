"""Services layer - document reconciliation and expedition logic"""

from dokpedisi.services.document_assembler import assemble_document, create_local_document
from dokpedisi.services.document_collection import (
    filter_by_status,
    find_by_ids,
    ingest,
    ingest_report,
    search,
)
from dokpedisi.services.document_store import DocumentStore
from dokpedisi.services.expedition import append_expedition, validate_expedition
from dokpedisi.services.history_extractor import compose_details, extract_history
from dokpedisi.services.row_parser import parse_row, parse_row_date

__all__ = [
    "parse_row",
    "parse_row_date",
    "extract_history",
    "compose_details",
    "assemble_document",
    "create_local_document",
    "ingest",
    "ingest_report",
    "find_by_ids",
    "search",
    "filter_by_status",
    "append_expedition",
    "validate_expedition",
    "DocumentStore",
]
