"""Shared test fixtures

Mock objects and sample data available to every test.

Mocks:
- MagicMock(spec=ABC) keeps the method signatures of the port
"""

import datetime
from unittest.mock import MagicMock

import pytest
from dokpedisi.domain.models import (
    Document,
    ExpeditionEvent,
    ExpeditionHistoryEntry,
)
from dokpedisi.domain.ports import (
    ExpeditionWriter,
    SheetRowSource,
    SignatureStorage,
)

# ========== Sample data ==========


@pytest.fixture
def row_with_history() -> list[str]:
    """Agenda row with two recorded expeditions"""
    return [
        "001/SM/2024",
        "15/1/2024",
        "Dinas Pendidikan",
        "Undangan Rapat",
        "",
        "",
        "Diterima pada 2024-01-16 jam 10:00. Catatan: -",
        "Kepala Sekolah",
        "https://storage.googleapis.com/sig/1.png",
        "Diterima pada 2024-01-17 jam 08:15. Catatan: Segera ditindaklanjuti",
        "Wakasek Kurikulum",
        "",
    ]


@pytest.fixture
def row_without_history() -> list[str]:
    """Agenda row that has not been handed over yet"""
    return ["002/SM/2024", "20/1/2024", "Kemenag", "Surat Edaran"]


@pytest.fixture
def row_without_agenda() -> list[str]:
    """Row with a blank agenda number (skipped on ingestion)"""
    return ["   ", "21/1/2024", "Kecamatan", "Pemberitahuan"]


@pytest.fixture
def row_with_broken_history() -> list[str]:
    """First history group has no recipient, so the later group is never read"""
    return [
        "003/SM/2024",
        "10/1/2024",
        "Puskesmas",
        "Imunisasi",
        "",
        "",
        "Diterima pada 2024-01-11 jam 09:00. Catatan: -",
        "",
        "",
        "Diterima pada 2024-01-12 jam 09:00. Catatan: -",
        "Guru BK",
        "",
    ]


@pytest.fixture
def sample_rows(
    row_with_history, row_without_history, row_without_agenda, row_with_broken_history
) -> list[list[str]]:
    """Data rows as returned by a SheetRowSource (header removed)"""
    return [
        row_with_history,
        row_without_history,
        row_without_agenda,
        row_with_broken_history,
    ]


@pytest.fixture
def sample_entry() -> ExpeditionHistoryEntry:
    return ExpeditionHistoryEntry(
        timestamp=datetime.datetime(2024, 1, 16, tzinfo=datetime.UTC),
        recipient="Kepala Sekolah",
        order=1,
        signature="https://storage.googleapis.com/sig/1.png",
        notes=None,
        details="Diterima pada 2024-01-16 jam 10:00. Catatan: -",
    )


@pytest.fixture
def sample_document(sample_entry) -> Document:
    """Sheet document with one expedition"""
    return Document(
        id="001/SM/2024-0",
        agenda_no="001/SM/2024",
        sender="Dinas Pendidikan",
        perihal="Undangan Rapat",
        created_at=datetime.datetime(2024, 1, 15, tzinfo=datetime.UTC),
        expedition_history=(sample_entry,),
    )


@pytest.fixture
def fresh_document() -> Document:
    """Sheet document without history"""
    return Document(
        id="AG-001-0",
        agenda_no="AG-001",
        sender="Finance",
        perihal="Budget Request",
        created_at=datetime.datetime(2024, 1, 15, tzinfo=datetime.UTC),
    )


@pytest.fixture
def sample_event() -> ExpeditionEvent:
    return ExpeditionEvent(
        recipient="John Doe",
        date=datetime.date(2024, 1, 20),
        time="09:30",
        notes="Reviewed",
    )


# ========== Port mocks ==========


@pytest.fixture
def mock_row_source(sample_rows) -> MagicMock:
    """SheetRowSource mock returning sample_rows"""
    mock = MagicMock(spec=SheetRowSource)
    mock.fetch_rows.return_value = sample_rows
    return mock


@pytest.fixture
def mock_writer() -> MagicMock:
    """ExpeditionWriter mock"""
    return MagicMock(spec=ExpeditionWriter)


@pytest.fixture
def mock_signature_storage() -> MagicMock:
    """SignatureStorage mock"""
    mock = MagicMock(spec=SignatureStorage)
    mock.store.return_value = "https://storage.googleapis.com/bucket/signatures/abc.png"
    return mock
