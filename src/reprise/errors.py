"""Error taxonomy for the record/replay engine.

Every failure the engine can surface is one of the classes below. The
persistence-side errors share PersistenceError as a base so the recorder
can isolate them from the live request path with a single except clause.
Each error keeps its structured fields as attributes in addition to the
formatted message.
"""

from __future__ import annotations

from pathlib import Path


class RepriseError(Exception):
    """Base class for all reprise errors."""


class PersistenceError(RepriseError):
    """Base class for failures while storing or loading transactions."""


class DirectoryCreationError(PersistenceError):
    """Raised when the recordings directory cannot be created.

    Attributes:
        path: The directory that could not be created.
        cause: The underlying OS error.
    """

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to create directory {self.path}: {cause}")


class FileSystemWriteError(PersistenceError):
    """Raised when a transaction file cannot be written.

    Attributes:
        path: The file that was being written.
        operation: Which step failed (e.g. 'serialize', 'write', 'rename').
        cause: The underlying exception.
    """

    def __init__(self, path: Path | str, operation: str, cause: BaseException) -> None:
        self.path = Path(path)
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation} recording {self.path}: {cause}")


class FileSystemReadError(PersistenceError):
    """Raised when the recordings directory or a file in it cannot be read.

    Attributes:
        path: The directory or file being read.
        operation: Which step failed ('list' or 'read').
        cause: The underlying OS error.
    """

    def __init__(self, path: Path | str, operation: str, cause: BaseException) -> None:
        self.path = Path(path)
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation} {self.path}: {cause}")


class BodySerializationError(PersistenceError):
    """Raised when a request or response body cannot be encoded for storage.

    Attributes:
        body_type: Python type name of the offending body.
        cause: The underlying encoding error.
    """

    def __init__(self, body_type: str, cause: BaseException) -> None:
        self.body_type = body_type
        self.cause = cause
        super().__init__(f"Cannot serialize body of type '{body_type}': {cause}")


class TransactionSerializationError(PersistenceError):
    """Raised when a stored transaction document is structurally invalid.

    Attributes:
        operation: 'serialize' or 'deserialize'.
        cause: The underlying parse or validation error.
        path: The file the document came from, when known.
    """

    def __init__(
        self,
        operation: str,
        cause: BaseException,
        path: Path | str | None = None,
    ) -> None:
        self.operation = operation
        self.cause = cause
        self.path = Path(path) if path is not None else None
        where = f" ({self.path})" if self.path is not None else ""
        super().__init__(f"Failed to {operation} transaction{where}: {cause}")


class RedactionError(RepriseError):
    """Raised when a redactor fails while preparing a transaction for storage.

    Attributes:
        side: 'request' or 'response'.
        cause: The exception raised by the redactor.
    """

    def __init__(self, side: str, cause: BaseException) -> None:
        self.side = side
        self.cause = cause
        super().__init__(f"Redactor failed on {side}: {cause!r}")


class TransactionNotFoundError(RepriseError):
    """Raised on replay when no stored transaction matches a request.

    Attributes:
        method: HTTP method of the unmatched request.
        url: Full URL of the unmatched request.
    """

    def __init__(self, method: str, url: str) -> None:
        self.method = method
        self.url = url
        super().__init__(
            f"No recorded transaction found for {method} {url}. "
            f"Record it first with mode 'record'."
        )


class InvalidTransactionIdError(RepriseError, ValueError):
    """Raised when a string is not a well-formed transaction id.

    Attributes:
        value: The rejected input.
        reason: Short description of what is wrong with it.
    """

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid transaction id {value!r}: {reason}")
