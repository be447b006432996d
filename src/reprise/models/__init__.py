"""Configuration models."""

from reprise.models.config import (
    ProjectConfig,
    RecordingConfig,
    find_project_root,
    load_project_config,
)

__all__ = [
    "ProjectConfig",
    "RecordingConfig",
    "find_project_root",
    "load_project_config",
]
