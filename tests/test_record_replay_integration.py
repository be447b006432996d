"""End-to-end record then replay against an httpx mock transport."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from reprise.factory import build_client
from reprise.http.httpx_client import HttpxClient
from reprise.models.config import RecordingConfig
from reprise.recording.ids import TransactionIdFactory
from reprise.recording.recorder import HttpRecorder
from reprise.recording.replayer import HttpReplayer
from reprise.storage.transaction_store import TransactionStore


def _user_api(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/users/42":
        return httpx.Response(
            200,
            json={"id": 42, "name": "Ada Lovelace", "api_key": "sk-live-abcdef"},
            headers={"Set-Cookie": "session=xyz", "X-Request-Id": "req-1"},
        )
    return httpx.Response(404, json={"error": "not found"})


@pytest.mark.asyncio
async def test_record_then_replay_round_trip(tmp_path: Path) -> None:
    """A recorded call replays with the same status and body, offline."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(_user_api))
    real = HttpxClient(client=http)
    store = TransactionStore(tmp_path / "recordings")
    recorder = HttpRecorder(
        real,
        store,
        excluded_headers=["authorization", "set-cookie"],
        id_factory=TransactionIdFactory(clock=lambda: 1735689600000),
    )

    live = await recorder.request(
        "GET",
        "https://api.example.com/users/42",
        headers={"Authorization": "Bearer s3cret"},
    )
    await http.aclose()

    assert live.status == 200
    assert live.body["name"] == "Ada Lovelace"
    files = [p.name for p in (tmp_path / "recordings").iterdir()]
    assert files == ["1735689600000__GET_users-42.json"]

    written = (tmp_path / "recordings" / files[0]).read_text(encoding="utf-8")
    assert "s3cret" not in written
    assert "session=xyz" not in written
    assert json.loads(written)["request"]["method"] == "GET"

    replayer = HttpReplayer(TransactionStore(tmp_path / "recordings"))
    replayed = await replayer.request("GET", "https://api.example.com/users/42")

    assert replayed.status == live.status
    assert replayed.body == live.body
    assert replayed.headers["x-request-id"] == "req-1"


@pytest.mark.asyncio
async def test_factory_record_and_replay_modes(tmp_path: Path) -> None:
    """build_client wires the same directory for recording and replay."""
    config = RecordingConfig(path="recordings", redaction=True)
    http = httpx.AsyncClient(transport=httpx.MockTransport(_user_api))
    inner = HttpxClient(client=http)

    recorder = build_client(config, project_root=tmp_path, inner=inner, mode="record")
    await recorder.request("GET", "https://api.example.com/users/42")
    await recorder.request("GET", "https://api.example.com/users/missing")
    await http.aclose()

    replayer = build_client(config, project_root=tmp_path, mode="replay")
    found = await replayer.request("GET", "https://api.example.com/users/42")
    missing = await replayer.request("GET", "https://api.example.com/users/missing")

    assert found.status == 200
    assert found.body["api_key"] == "[REDACTED]"
    assert missing.status == 404
    assert missing.body == {"error": "not found"}
