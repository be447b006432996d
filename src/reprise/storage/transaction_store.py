"""Filesystem storage for recorded transactions.

Each transaction is one JSON file named after its transaction id inside
the recordings directory. Files are written once and never modified.
Writes are atomic (write to .tmp, then rename) so an interrupted write
never leaves a partial file where read_all() would pick it up.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from reprise.errors import (
    BodySerializationError,
    DirectoryCreationError,
    FileSystemReadError,
    FileSystemWriteError,
    InvalidTransactionIdError,
    TransactionSerializationError,
)
from reprise.recording.ids import decode_id
from reprise.recording.models import RecordedTransaction
from reprise.recording.serializer import TransactionSerializer

logger = logging.getLogger(__name__)

TRANSACTION_SUFFIX = ".json"
TMP_SUFFIX = ".tmp"


@dataclass
class LoadFailure:
    """A transaction file that was skipped during a bulk load."""

    path: Path
    error: TransactionSerializationError | InvalidTransactionIdError


@dataclass
class TransactionLoadResult:
    """Outcome of loading every transaction in a directory."""

    transactions: list[RecordedTransaction] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)


class TransactionStore:
    """Persist and enumerate RecordedTransaction files.

    File layout:
        <recordings_dir>/
            {millis}__{METHOD}_{slug}.json    # one file per transaction

    Ids are unique per process (see TransactionIdFactory), so concurrent
    writes always target distinct files and need no locking.
    """

    def __init__(
        self,
        recordings_dir: Path,
        serializer: TransactionSerializer | None = None,
    ) -> None:
        self.recordings_dir = Path(recordings_dir)
        self.serializer = serializer or TransactionSerializer()

    def path_for(self, transaction_id: str) -> Path:
        """Return the file path a transaction id is stored at."""
        return self.recordings_dir / f"{transaction_id}{TRANSACTION_SUFFIX}"

    def ensure_ready(self) -> None:
        """Create the recordings directory if it does not exist.

        Idempotent and safe to call from several first callers at once.

        Raises:
            DirectoryCreationError: If the directory cannot be created.
        """
        try:
            self.recordings_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreationError(self.recordings_dir, exc) from exc

    def write(self, transaction: RecordedTransaction) -> Path:
        """Persist one transaction as a new file.

        Args:
            transaction: The transaction to store.

        Returns:
            Path of the written file.

        Raises:
            FileSystemWriteError: If a body or header/status field cannot
                be serialized (operation 'serialize') or the file cannot be
                written (operation 'write' or 'rename').
        """
        target = self.path_for(transaction.id)
        tmp_file = target.with_name(target.name + TMP_SUFFIX)

        try:
            document = self.serializer.serialize(transaction.request, transaction.response)
        except (BodySerializationError, TransactionSerializationError) as exc:
            raise FileSystemWriteError(target, "serialize", exc) from exc
        content = self.serializer.dumps(document)

        try:
            tmp_file.write_text(content, encoding="utf-8")
        except OSError as exc:
            tmp_file.unlink(missing_ok=True)
            raise FileSystemWriteError(target, "write", exc) from exc

        try:
            tmp_file.replace(target)
        except OSError as exc:
            tmp_file.unlink(missing_ok=True)
            raise FileSystemWriteError(target, "rename", exc) from exc

        return target

    def read(self, transaction_id: str) -> RecordedTransaction:
        """Load a single transaction by id.

        Raises:
            InvalidTransactionIdError: If transaction_id is malformed.
            FileSystemReadError: If the file cannot be read.
            TransactionSerializationError: If the file is corrupt.
        """
        decode_id(transaction_id)
        return self._read_file(self.path_for(transaction_id), transaction_id)

    def list_ids(self) -> list[str]:
        """List the ids of all transaction files, oldest first.

        Files whose names are not valid ids are included so that
        load_all() can report them. A missing directory yields [].

        Raises:
            FileSystemReadError: If the directory cannot be listed.
        """
        if not self.recordings_dir.exists():
            return []
        try:
            names = [
                entry.name
                for entry in self.recordings_dir.iterdir()
                if entry.name.endswith(TRANSACTION_SUFFIX)
                and not entry.name.startswith(".")
                and entry.is_file()
            ]
        except OSError as exc:
            raise FileSystemReadError(self.recordings_dir, "list", exc) from exc
        return sorted(
            (name.removesuffix(TRANSACTION_SUFFIX) for name in names),
            key=_sort_key,
        )

    def load_all(self) -> TransactionLoadResult:
        """Load every transaction in the directory, isolating corrupt files.

        A file that is not valid JSON, does not match the document schema,
        or whose name is not a valid id is skipped and reported in
        failures; the remaining files still load.

        Raises:
            FileSystemReadError: If the directory or a file cannot be read.
        """
        result = TransactionLoadResult()
        for transaction_id in self.list_ids():
            path = self.path_for(transaction_id)
            try:
                result.transactions.append(self._read_file(path, transaction_id))
            except (TransactionSerializationError, InvalidTransactionIdError) as exc:
                result.failures.append(LoadFailure(path=path, error=exc))
        return result

    def read_all(self) -> list[RecordedTransaction]:
        """Load every valid transaction, logging a warning per skipped file."""
        result = self.load_all()
        for failure in result.failures:
            logger.warning("Skipping unreadable recording %s: %s", failure.path, failure.error)
        return result.transactions

    def clean(self) -> bool:
        """Remove the recordings directory and everything in it.

        Returns:
            True if the directory existed and was removed.

        Raises:
            FileSystemWriteError: If removal fails.
        """
        return clean_recordings(self.recordings_dir)

    def _read_file(self, path: Path, transaction_id: str) -> RecordedTransaction:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileSystemReadError(path, "read", exc) from exc
        except UnicodeDecodeError as exc:
            raise TransactionSerializationError("deserialize", exc, path=path) from exc

        try:
            request, response = self.serializer.deserialize(self.serializer.loads(content))
        except TransactionSerializationError as exc:
            raise TransactionSerializationError("deserialize", exc.cause, path=path) from exc
        return RecordedTransaction(id=transaction_id, request=request, response=response)


def _sort_key(transaction_id: str) -> tuple[int, str]:
    """Order by timestamp when the id is valid; invalid names sort last."""
    try:
        return (decode_id(transaction_id).timestamp, transaction_id)
    except InvalidTransactionIdError:
        return (2**63, transaction_id)


def clean_recordings(recordings_dir: Path) -> bool:
    """Delete a recordings directory recursively.

    Returns:
        True if the directory existed and was removed, False otherwise.

    Raises:
        FileSystemWriteError: If the directory cannot be removed.
    """
    recordings_dir = Path(recordings_dir)
    if not recordings_dir.exists():
        return False
    try:
        shutil.rmtree(recordings_dir)
    except OSError as exc:
        raise FileSystemWriteError(recordings_dir, "remove", exc) from exc
    logger.info("Removed recordings directory %s", recordings_dir)
    return True
