"""CLI entrypoint tests"""

from unittest.mock import patch

import pytest
from dokpedisi.domain.errors import ExternalFetchError
from dokpedisi.entrypoints import cli
from dokpedisi.services.document_store import DocumentStore


@pytest.fixture
def store(mock_row_source, mock_writer, mock_signature_storage) -> DocumentStore:
    return DocumentStore(mock_row_source, mock_writer, mock_signature_storage)


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("dokpedisi.entrypoints.cli.setup_logging"):
        yield


class TestMain:
    def test_lists_documents(self, store, caplog):
        caplog.set_level("INFO")
        with patch("dokpedisi.entrypoints.cli.create_document_store", return_value=store):
            cli.main([])

        assert "Loaded 3 document(s) from 4 row(s), 1 skipped" in caplog.text
        assert "001/SM/2024" in caplog.text

    def test_search(self, store, caplog):
        caplog.set_level("INFO")
        with patch("dokpedisi.entrypoints.cli.create_document_store", return_value=store):
            cli.main(["--search", "puskesmas"])

        assert "1 document(s) matched" in caplog.text

    def test_status_filter(self, store, caplog):
        caplog.set_level("INFO")
        with patch("dokpedisi.entrypoints.cli.create_document_store", return_value=store):
            cli.main(["--status", "Signed"])

        assert "1 document(s) matched" in caplog.text
        assert "Wakasek Kurikulum" in caplog.text

    def test_fetch_error_exits_1(self, store, mock_row_source):
        mock_row_source.fetch_rows.side_effect = ExternalFetchError("offline")

        with patch("dokpedisi.entrypoints.cli.create_document_store", return_value=store):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])

        assert exc_info.value.code == 1

    def test_keyboard_interrupt_exits_130(self):
        with patch(
            "dokpedisi.entrypoints.cli.create_document_store",
            side_effect=KeyboardInterrupt,
        ):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])

        assert exc_info.value.code == 130

    def test_config_error_exits_1(self):
        with patch(
            "dokpedisi.entrypoints.cli.create_document_store",
            side_effect=ValueError("SPREADSHEET_ID is not set in environment"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])

        assert exc_info.value.code == 1
