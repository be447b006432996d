"""Project configuration model for reprise.

Captures reprise.yaml fields with defaults suited to a test suite that
keeps its recordings under tests/recordings.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

CONFIG_FILENAME = "reprise.yaml"

# Environment variable that overrides recording.mode for a single run.
MODE_ENV_VAR = "REPRISE_MODE"

RecordingMode = Literal["record", "replay", "passthrough"]

DEFAULT_EXCLUDED_HEADERS: list[str] = [
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-auth-token",
    "access-token",
    "refresh-token",
    "bearer",
    "x-csrf-token",
    "x-xsrf-token",
]


class RecordingConfig(BaseModel):
    """Configuration for recording and replay behavior.

    Controls where transactions live, which headers are never persisted,
    whether content redaction runs, and which client a test run gets.
    """

    model_config = {"extra": "forbid"}

    path: str = "tests/recordings"
    mode: RecordingMode = "replay"
    excluded_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_HEADERS)
    )
    redaction: bool = True
    redact_all_headers: bool = False
    custom_redaction_patterns: list[str] = Field(default_factory=list)
    masked_headers: list[str] = Field(default_factory=list)
    masked_json_paths: list[str] = Field(default_factory=list)
    clean_before_record: bool = False
    sequential: bool = False

    def recordings_dir(self, project_root: Path) -> Path:
        """Resolve path against the project root unless it is absolute."""
        path = Path(self.path)
        return path if path.is_absolute() else project_root / path

    def effective_mode(self) -> RecordingMode:
        """Return the mode, honoring the REPRISE_MODE override."""
        override = os.environ.get(MODE_ENV_VAR, "").strip().lower()
        if override in ("record", "replay", "passthrough"):
            return override  # type: ignore[return-value]
        return self.mode


class ProjectConfig(BaseModel):
    """Project-level configuration loaded from reprise.yaml."""

    model_config = {"extra": "forbid"}

    recording: RecordingConfig = Field(default_factory=RecordingConfig)


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from start (default: cwd) looking for reprise.yaml.

    Args:
        start: Starting path (file or directory). Defaults to cwd.

    Returns:
        Path to the directory containing reprise.yaml, or cwd if none
        is found.
    """
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return Path.cwd()


def load_project_config(project_root: Path | None = None) -> ProjectConfig:
    """Load ProjectConfig from reprise.yaml. Returns defaults if not found.

    Args:
        project_root: Path to the project root directory. If None,
            uses find_project_root() to locate it.

    Returns:
        Validated ProjectConfig instance.
    """
    if project_root is None:
        project_root = find_project_root()
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return ProjectConfig()
    import yaml

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if raw is None:
        return ProjectConfig()
    return ProjectConfig.model_validate(raw)
