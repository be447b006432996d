"""Helpers shared by the reprise CLI commands."""

from __future__ import annotations

from pathlib import Path

from reprise.models.config import find_project_root, load_project_config
from reprise.storage.transaction_store import TransactionStore


def resolve_recordings_dir(path: str | None) -> Path:
    """Return the recordings directory from --path or reprise.yaml."""
    if path is not None:
        return Path(path).resolve()
    project_root = find_project_root()
    project_config = load_project_config(project_root)
    return project_config.recording.recordings_dir(project_root)


def open_store(path: str | None) -> TransactionStore:
    """Create a TransactionStore for the resolved recordings directory."""
    return TransactionStore(resolve_recordings_dir(path))
