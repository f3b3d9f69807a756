"""DocumentStore tests

Collaborators are replaced by MagicMock(spec=Port).
"""

import datetime
import logging
import threading
import time

import pytest
from dokpedisi.domain.errors import (
    ExternalFetchError,
    ExternalWriteError,
    ValidationError,
)
from dokpedisi.domain.models import ExpeditionUpdate
from dokpedisi.services import document_store as document_store_module
from dokpedisi.services.document_store import DocumentStore


@pytest.fixture
def store(mock_row_source, mock_writer, mock_signature_storage) -> DocumentStore:
    return DocumentStore(
        row_source=mock_row_source,
        writer=mock_writer,
        signature_storage=mock_signature_storage,
    )


class TestRefresh:
    """refresh() tests"""

    def test_loads_documents(self, store, mock_row_source):
        # Act
        result = store.refresh()

        # Assert
        mock_row_source.fetch_rows.assert_called_once()
        assert result.error is None
        assert result.total_rows == 4
        assert result.skipped_rows == 1
        assert len(result.documents) == 3
        assert [d.id for d in store.documents] == [d.id for d in result.documents]
        assert store.last_sync == result.fetched_at
        assert store.is_loading is False
        assert store.is_loaded is True

    def test_fetch_failure_gives_empty_result(self, store, mock_row_source):
        # Arrange
        mock_row_source.fetch_rows.side_effect = ExternalFetchError("timeout")

        # Act
        result = store.refresh()

        # Assert
        assert result.documents == []
        assert result.error == "timeout"
        assert store.error == "timeout"
        assert store.documents == []
        assert store.is_loading is False
        assert store.is_loaded is True

    def test_fetch_failure_keeps_local_documents(self, store, mock_row_source):
        store.refresh()
        local = store.add_local_document("LOCAL-1", "Sender", "Perihal")
        mock_row_source.fetch_rows.side_effect = ExternalFetchError("offline")

        store.refresh()

        assert store.documents == [local]

    def test_refresh_keeps_local_documents(self, store):
        local = store.add_local_document(
            "LOCAL-1", "Sender", "Perihal", datetime.datetime(2030, 1, 1)
        )

        store.refresh()

        assert store.documents[0] == local
        assert len(store.documents) == 4

    def test_error_is_cleared_after_successful_refresh(self, store, mock_row_source):
        mock_row_source.fetch_rows.side_effect = [ExternalFetchError("x"), []]

        store.refresh()
        store.refresh()

        assert store.error is None

    def test_ensure_loaded_fetches_once(self, store, mock_row_source):
        first = store.ensure_loaded()
        second = store.ensure_loaded()

        mock_row_source.fetch_rows.assert_called_once()
        assert first is second
        assert second.skipped_rows == 1

    def test_last_result_tracks_latest_refresh(self, store, mock_row_source):
        store.refresh()
        mock_row_source.fetch_rows.return_value = []

        result = store.refresh()

        assert store.last_result is result
        assert store.last_result.skipped_rows == 0


class TestRecordExpedition:
    """record_expedition() tests"""

    def test_appends_and_persists(self, store, mock_writer, sample_event):
        # Arrange
        store.refresh()

        # Act
        outcome = store.record_expedition(["002/SM/2024-1"], sample_event)

        # Assert
        assert [d.id for d in outcome.documents] == ["002/SM/2024-1"]
        assert outcome.persisted_agenda_nos == ["002/SM/2024"]
        assert outcome.failed_agenda_nos == []
        assert store.get("002/SM/2024-1").current_recipient == "John Doe"

        mock_writer.write.assert_called_once()
        update = mock_writer.write.call_args[0][0]
        assert isinstance(update, ExpeditionUpdate)
        assert update.agenda_no == "002/SM/2024"
        assert update.sheet_row == 3
        assert update.current_location == "John Doe"
        assert update.status == "Signed"
        assert update.last_expedition_summary == (
            "Diterima pada 2024-01-20 jam 09:30. Catatan: Reviewed"
        )

    def test_write_failure_is_collected(self, store, mock_writer, sample_event):
        store.refresh()
        mock_writer.write.side_effect = [ExternalWriteError("quota"), None]

        outcome = store.record_expedition(
            ["001/SM/2024-0", "002/SM/2024-1"], sample_event
        )

        assert outcome.failed_agenda_nos == ["002/SM/2024"]
        assert outcome.persisted_agenda_nos == ["001/SM/2024"]
        # Local state is not rolled back
        assert store.get("002/SM/2024-1").current_recipient == "John Doe"

    def test_write_failure_is_logged_with_document_context(
        self, store, mock_writer, sample_event, caplog
    ):
        store.refresh()
        mock_writer.write.side_effect = ExternalWriteError("quota")

        with caplog.at_level(logging.ERROR, logger="dokpedisi.services.document_store"):
            store.record_expedition(["002/SM/2024-1"], sample_event)

        record = next(r for r in caplog.records if r.getMessage() == "Failed to persist expedition")
        assert record.extra_fields == {
            "doc_id": "002/SM/2024-1",
            "agenda_no": "002/SM/2024",
            "sheet_row": 3,
        }

    def test_validation_error_changes_nothing(self, store, mock_writer, sample_event):
        store.refresh()
        before = list(store.documents)

        with pytest.raises(ValidationError):
            store.record_expedition([], sample_event)

        assert store.documents == before
        mock_writer.write.assert_not_called()


class TestLocalDocumentsAndSignatures:
    def test_local_ids_are_unique(self, store):
        first = store.add_local_document("AG-1", "", "")
        second = store.add_local_document("AG-1", "", "")

        assert first.id != second.id
        assert store.find_by_ids([first.id, second.id]) != []

    def test_blank_agenda_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add_local_document("", "Sender", "Perihal")
        assert store.documents == []

    def test_store_signature(self, store, mock_signature_storage):
        ref = store.store_signature("data:image/png;base64,iVBORw0KGgo=")

        mock_signature_storage.store.assert_called_once_with(
            "data:image/png;base64,iVBORw0KGgo="
        )
        assert ref == "https://storage.googleapis.com/bucket/signatures/abc.png"

    def test_search(self, store):
        store.refresh()
        assert [d.agenda_no for d in store.search("puskesmas")] == ["003/SM/2024"]


class TestWriteTargets:
    """Which sheet row an expedition is written to"""

    def test_repeated_agenda_number_writes_its_own_row(
        self, store, mock_row_source, mock_writer, sample_event
    ):
        # Arrange: AG-1 appears on sheet rows 2 and 3
        mock_row_source.fetch_rows.return_value = [
            ["AG-1", "1/1/2024", "Dinas", "Undangan"],
            ["AG-1", "2/1/2024", "Dinas", "Lampiran"],
        ]
        store.refresh()

        # Act
        store.record_expedition(["AG-1-1"], sample_event)

        # Assert
        update = mock_writer.write.call_args[0][0]
        assert update.agenda_no == "AG-1"
        assert update.sheet_row == 3
        assert store.get("AG-1-0").expedition_history == ()

    def test_local_document_is_not_written(
        self, store, mock_row_source, mock_writer, sample_event
    ):
        mock_row_source.fetch_rows.return_value = [["AG-1", "1/1/2024", "Dinas", "Undangan"]]
        store.refresh()
        local = store.add_local_document("AG-1", "Walikota", "Undangan")

        outcome = store.record_expedition([local.id], sample_event)

        mock_writer.write.assert_not_called()
        assert outcome.local_agenda_nos == ["AG-1"]
        assert outcome.persisted_agenda_nos == []
        assert outcome.failed_agenda_nos == []
        assert store.get(local.id).current_recipient == "John Doe"
        assert store.get("AG-1-0").expedition_history == ()

    def test_mixed_local_and_sheet_targets(self, store, mock_writer, sample_event):
        store.refresh()
        local = store.add_local_document("L-1", "", "")

        outcome = store.record_expedition([local.id, "002/SM/2024-1"], sample_event)

        mock_writer.write.assert_called_once()
        assert mock_writer.write.call_args[0][0].agenda_no == "002/SM/2024"
        assert outcome.persisted_agenda_nos == ["002/SM/2024"]
        assert outcome.local_agenda_nos == ["L-1"]


class TestConcurrentCallers:
    """One store shared by the API worker threads"""

    def test_concurrent_expeditions_both_append(
        self, store, mock_writer, sample_event, monkeypatch
    ):
        # Arrange: a slow append widens the read-modify-write window
        original = document_store_module.append_expedition

        def slow_append(*args, **kwargs):
            result = original(*args, **kwargs)
            time.sleep(0.05)
            return result

        monkeypatch.setattr(document_store_module, "append_expedition", slow_append)
        store.refresh()

        # Act
        threads = [
            threading.Thread(
                target=store.record_expedition, args=(["002/SM/2024-1"], sample_event)
            )
            for _ in range(2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Assert
        assert mock_writer.write.call_count == 2
        assert [e.order for e in store.get("002/SM/2024-1").expedition_history] == [1, 2]

    def test_concurrent_first_use_loads_once(self, store, mock_row_source, sample_rows):
        def slow_fetch():
            time.sleep(0.05)
            return sample_rows

        mock_row_source.fetch_rows.side_effect = slow_fetch

        threads = [threading.Thread(target=store.ensure_loaded) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        mock_row_source.fetch_rows.assert_called_once()
        assert len(store.documents) == 3
