"""Select the client a test run should use.

Recording and replay are mutually exclusive for a run. build_client()
reads the configured mode (or the REPRISE_MODE override) and returns a
replayer, a recorder around a real client, or the real client itself.
"""

from __future__ import annotations

import logging
from pathlib import Path

from reprise.http.base import BaseHttpClient
from reprise.http.httpx_client import HttpxClient
from reprise.models.config import RecordingConfig, RecordingMode
from reprise.recording.recorder import HttpRecorder
from reprise.recording.redaction import build_redactor
from reprise.recording.replayer import HttpReplayer
from reprise.storage.transaction_store import TransactionStore, clean_recordings

logger = logging.getLogger(__name__)


def build_client(
    config: RecordingConfig,
    project_root: Path | None = None,
    inner: BaseHttpClient | None = None,
    mode: RecordingMode | None = None,
) -> BaseHttpClient:
    """Build the client for a test run.

    Args:
        config: Recording configuration.
        project_root: Base for a relative recordings path. Defaults to cwd.
        inner: Real client used in record and passthrough modes. Defaults
            to a new HttpxClient.
        mode: Overrides config.effective_mode() when given.

    Returns:
        An HttpReplayer, an HttpRecorder wrapping inner, or inner.

    Raises:
        ValueError: If a custom redaction pattern fails to compile.
        FileSystemWriteError: If clean_before_record is set and the
            recordings directory cannot be removed.
    """
    effective_mode = mode or config.effective_mode()
    recordings_dir = config.recordings_dir(project_root or Path.cwd())
    store = TransactionStore(recordings_dir)

    if effective_mode == "replay":
        logger.debug("Replaying recordings from %s", recordings_dir)
        return HttpReplayer(store, sequential=config.sequential)

    real_client = inner or HttpxClient()
    if effective_mode == "passthrough":
        return real_client

    if config.clean_before_record:
        clean_recordings(recordings_dir)

    logger.debug("Recording to %s", recordings_dir)
    return HttpRecorder(
        real_client,
        store,
        redactor=build_redactor(config),
        excluded_headers=config.excluded_headers,
    )
