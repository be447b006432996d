"""Filesystem persistence for recorded transactions."""

from reprise.storage.transaction_store import (
    LoadFailure,
    TransactionLoadResult,
    TransactionStore,
    clean_recordings,
)

__all__ = [
    "LoadFailure",
    "TransactionLoadResult",
    "TransactionStore",
    "clean_recordings",
]
