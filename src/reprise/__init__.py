"""reprise: record real HTTP transactions once, replay them deterministically."""

from reprise.errors import (
    BodySerializationError,
    DirectoryCreationError,
    FileSystemReadError,
    FileSystemWriteError,
    InvalidTransactionIdError,
    PersistenceError,
    RedactionError,
    RepriseError,
    TransactionNotFoundError,
    TransactionSerializationError,
)
from reprise.factory import build_client
from reprise.http import BaseHttpClient, HttpRequest, HttpResponse, HttpxClient
from reprise.recording import (
    HttpRecorder,
    HttpReplayer,
    IdentityRedactor,
    PatternRedactor,
    RedactionContext,
    Redactor,
)
from reprise.storage import TransactionStore

__version__ = "0.1.0"

__all__ = [
    "BaseHttpClient",
    "BodySerializationError",
    "DirectoryCreationError",
    "FileSystemReadError",
    "FileSystemWriteError",
    "HttpRecorder",
    "HttpReplayer",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "IdentityRedactor",
    "InvalidTransactionIdError",
    "PatternRedactor",
    "PersistenceError",
    "RedactionContext",
    "RedactionError",
    "Redactor",
    "RepriseError",
    "TransactionNotFoundError",
    "TransactionSerializationError",
    "TransactionStore",
    "__version__",
    "build_client",
]
