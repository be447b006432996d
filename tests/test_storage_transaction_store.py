"""Tests for the transaction storage layer (TransactionStore)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from reprise.errors import (
    DirectoryCreationError,
    FileSystemReadError,
    FileSystemWriteError,
    InvalidTransactionIdError,
    TransactionSerializationError,
)
from reprise.http.base import HttpRequest, HttpResponse
from reprise.recording.models import RecordedTransaction
from reprise.storage.transaction_store import TransactionStore, clean_recordings


def _make_transaction(
    transaction_id: str = "1735689600000__GET_users-42",
    url: str = "https://api.example.com/users/42",
    response_body=None,
) -> RecordedTransaction:
    """Build a RecordedTransaction with realistic field values."""
    method = transaction_id.split("__", 1)[1].split("_", 1)[0]
    return RecordedTransaction(
        id=transaction_id,
        request=HttpRequest(
            method=method,
            url=url,
            headers={"Accept": "application/json"},
        ),
        response=HttpResponse(
            status=200,
            headers={"Content-Type": "application/json"},
            body=response_body if response_body is not None else {"id": 42, "name": "Ada"},
        ),
    )


class TestEnsureReady:
    """Tests for directory creation."""

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path / "tests" / "recordings")
        store.ensure_ready()
        assert store.recordings_dir.is_dir()

    def test_idempotent(self, tmp_path: Path) -> None:
        """Calling ensure_ready twice does not raise."""
        store = TransactionStore(tmp_path / "recordings")
        store.ensure_ready()
        store.ensure_ready()
        assert store.recordings_dir.is_dir()

    def test_path_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "recordings"
        blocker.write_text("not a directory")
        store = TransactionStore(blocker)
        with pytest.raises(DirectoryCreationError) as exc_info:
            store.ensure_ready()
        assert exc_info.value.path == blocker
        assert isinstance(exc_info.value.cause, OSError)


class TestWrite:
    """Tests for writing transaction files."""

    def test_writes_file_named_after_id(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        path = store.write(_make_transaction())
        assert path == tmp_path / "1735689600000__GET_users-42.json"
        assert path.exists()

    def test_no_tmp_file_left_behind(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        store.write(_make_transaction())
        assert list(tmp_path.glob("*.tmp")) == []

    def test_file_is_readable_json(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        path = store.write(_make_transaction())
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["request"]["url"] == "https://api.example.com/users/42"
        assert data["response"]["body"]["value"] == {"id": 42, "name": "Ada"}

    def test_unserializable_body(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        transaction = _make_transaction(response_body={"when": object()})
        with pytest.raises(FileSystemWriteError) as exc_info:
            store.write(transaction)
        assert exc_info.value.operation == "serialize"
        assert not store.path_for(transaction.id).exists()

    def test_non_string_header_value(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        transaction = RecordedTransaction(
            id="1__GET_counts",
            request=HttpRequest(method="GET", url="https://api.example.com/counts"),
            response=HttpResponse(status=200, headers={"X-Count": 5}),  # type: ignore[dict-item]
        )
        with pytest.raises(FileSystemWriteError) as exc_info:
            store.write(transaction)
        assert exc_info.value.operation == "serialize"
        assert isinstance(exc_info.value.cause, TransactionSerializationError)
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        """write() does not create the directory; that is ensure_ready's job."""
        store = TransactionStore(tmp_path / "absent")
        with pytest.raises(FileSystemWriteError) as exc_info:
            store.write(_make_transaction())
        assert exc_info.value.operation == "write"


class TestRead:
    """Tests for reading single transactions."""

    def test_round_trip(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        original = _make_transaction()
        store.write(original)
        loaded = store.read(original.id)
        assert loaded == original
        assert loaded.timestamp == 1735689600000
        assert loaded.slug == "users-42"

    def test_missing_file(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        with pytest.raises(FileSystemReadError) as exc_info:
            store.read("1__GET_nothing")
        assert exc_info.value.operation == "read"

    def test_invalid_id(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        with pytest.raises(InvalidTransactionIdError):
            store.read("../../etc/passwd")

    def test_corrupt_file_names_path(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        path = tmp_path / "5__GET_broken.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(TransactionSerializationError) as exc_info:
            store.read("5__GET_broken")
        assert exc_info.value.path == path


class TestListIds:
    """Tests for enumerating transaction files."""

    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        assert TransactionStore(tmp_path / "absent").list_ids() == []

    def test_sorted_by_timestamp(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        for transaction_id in ["300__GET_c", "20__GET_b", "1000__POST_a"]:
            store.write(_make_transaction(transaction_id))
        assert store.list_ids() == ["20__GET_b", "300__GET_c", "1000__POST_a"]

    def test_ignores_other_files(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        store.write(_make_transaction("1__GET_a"))
        (tmp_path / "notes.txt").write_text("hello")
        (tmp_path / ".hidden.json").write_text("{}")
        (tmp_path / "2__GET_b.json.tmp").write_text("partial")
        (tmp_path / "subdir.json").mkdir()
        assert store.list_ids() == ["1__GET_a"]

    def test_invalid_names_sort_last(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        store.write(_make_transaction("9__GET_a"))
        (tmp_path / "manual-fixture.json").write_text("{}")
        assert store.list_ids() == ["9__GET_a", "manual-fixture"]


class TestLoadAll:
    """Tests for bulk loading with corrupt-file isolation."""

    def test_loads_valid_files(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        store.write(_make_transaction("1__GET_users-1", "https://api.example.com/users/1"))
        store.write(_make_transaction("2__GET_users-2", "https://api.example.com/users/2"))
        result = store.load_all()
        assert [t.id for t in result.transactions] == ["1__GET_users-1", "2__GET_users-2"]
        assert result.failures == []

    def test_corrupt_file_isolated(self, tmp_path: Path) -> None:
        """A corrupt file is reported while the rest still loads."""
        store = TransactionStore(tmp_path)
        store.write(_make_transaction("1__GET_users-1"))
        (tmp_path / "2__GET_broken.json").write_text("{ truncated", encoding="utf-8")
        (tmp_path / "3__GET_wrong-shape.json").write_text('{"foo": 1}', encoding="utf-8")
        store.write(_make_transaction("4__GET_users-4"))

        result = store.load_all()
        assert [t.id for t in result.transactions] == ["1__GET_users-1", "4__GET_users-4"]
        assert [f.path.name for f in result.failures] == [
            "2__GET_broken.json",
            "3__GET_wrong-shape.json",
        ]
        assert all(
            isinstance(f.error, TransactionSerializationError) for f in result.failures
        )

    def test_invalid_file_name_isolated(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        valid = store.write(_make_transaction("1__GET_users-1"))
        (tmp_path / "Hand_Written.json").write_text(valid.read_text(encoding="utf-8"))

        result = store.load_all()
        assert len(result.transactions) == 1
        assert len(result.failures) == 1
        assert isinstance(result.failures[0].error, InvalidTransactionIdError)

    def test_non_utf8_file_isolated(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path)
        (tmp_path / "1__GET_binary.json").write_bytes(b"\xff\xfe\x00garbage")
        result = store.load_all()
        assert result.transactions == []
        assert len(result.failures) == 1

    def test_read_all_logs_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = TransactionStore(tmp_path)
        store.write(_make_transaction("1__GET_users-1"))
        (tmp_path / "2__GET_broken.json").write_text("nope", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="reprise.storage.transaction_store"):
            transactions = store.read_all()

        assert [t.id for t in transactions] == ["1__GET_users-1"]
        assert "2__GET_broken.json" in caplog.text


class TestClean:
    """Tests for removing recordings."""

    def test_removes_directory(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path / "recordings")
        store.ensure_ready()
        store.write(_make_transaction())
        assert store.clean() is True
        assert not store.recordings_dir.exists()

    def test_missing_directory_returns_false(self, tmp_path: Path) -> None:
        assert clean_recordings(tmp_path / "absent") is False

    def test_store_usable_after_clean(self, tmp_path: Path) -> None:
        store = TransactionStore(tmp_path / "recordings")
        store.ensure_ready()
        store.clean()
        store.ensure_ready()
        store.write(_make_transaction())
        assert store.list_ids() == ["1735689600000__GET_users-42"]
