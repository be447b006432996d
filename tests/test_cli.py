"""Tests for the reprise clean, list and show CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from reprise import __version__
from reprise.cli.main import app
from reprise.http.base import HttpRequest, HttpResponse
from reprise.recording.models import RecordedTransaction
from reprise.storage.transaction_store import TransactionStore

runner = CliRunner()
WIDE = {"COLUMNS": "200"}


def _seed(directory: Path) -> TransactionStore:
    """Write two realistic transactions into directory."""
    store = TransactionStore(directory)
    store.ensure_ready()
    store.write(
        RecordedTransaction(
            id="1735689600000__GET_users-42",
            request=HttpRequest(
                method="GET",
                url="https://api.example.com/users/42",
                headers={"Accept": "application/json"},
            ),
            response=HttpResponse(
                status=200,
                headers={"Content-Type": "application/json"},
                body={"id": 42, "name": "Ada"},
            ),
        )
    )
    store.write(
        RecordedTransaction(
            id="1735689601000__DELETE_users-7",
            request=HttpRequest(method="DELETE", url="https://api.example.com/users/7"),
            response=HttpResponse(status=404, body="gone"),
        )
    )
    return store


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestCleanCommand:
    """Tests for reprise clean."""

    def test_removes_recordings(self, tmp_path: Path):
        recordings = tmp_path / "recordings"
        _seed(recordings)
        result = runner.invoke(app, ["clean", "--path", str(recordings)], env=WIDE)
        assert result.exit_code == 0
        assert "Removed" in result.output
        assert not recordings.exists()

    def test_nothing_to_clean(self, tmp_path: Path):
        result = runner.invoke(app, ["clean", "-p", str(tmp_path / "absent")], env=WIDE)
        assert result.exit_code == 0
        assert "Nothing to clean" in result.output

    def test_uses_reprise_yaml(self, tmp_path: Path, monkeypatch):
        """Without --path, the directory comes from reprise.yaml."""
        (tmp_path / "reprise.yaml").write_text("recording:\n  path: fixtures/http\n")
        recordings = tmp_path / "fixtures" / "http"
        _seed(recordings)
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["clean"], env=WIDE)

        assert result.exit_code == 0
        assert not recordings.exists()


class TestListCommand:
    """Tests for reprise list."""

    def test_lists_transactions(self, tmp_path: Path):
        _seed(tmp_path)
        result = runner.invoke(app, ["list", "--path", str(tmp_path)], env=WIDE)
        assert result.exit_code == 0
        assert "1735689600000__GET_users-42" in result.output
        assert "1735689601000__DELETE_users-7" in result.output
        assert "https://api.example.com/users/42" in result.output
        assert "2 transaction(s)" in result.output

    def test_oldest_first(self, tmp_path: Path):
        _seed(tmp_path)
        result = runner.invoke(app, ["list", "--path", str(tmp_path)], env=WIDE)
        assert result.output.index("users-42") < result.output.index("users-7")

    def test_empty_directory(self, tmp_path: Path):
        result = runner.invoke(app, ["list", "--path", str(tmp_path / "absent")], env=WIDE)
        assert result.exit_code == 0
        assert "No recordings found" in result.output

    def test_corrupt_file_warns(self, tmp_path: Path):
        _seed(tmp_path)
        (tmp_path / "5__GET_broken.json").write_text("{")
        result = runner.invoke(app, ["list", "--path", str(tmp_path)], env=WIDE)
        assert result.exit_code == 0
        assert "5__GET_broken.json" in result.output
        assert "2 transaction(s)" in result.output

    def test_strict_fails_on_corrupt_file(self, tmp_path: Path):
        _seed(tmp_path)
        (tmp_path / "5__GET_broken.json").write_text("{")
        result = runner.invoke(
            app, ["list", "--path", str(tmp_path), "--strict"], env=WIDE
        )
        assert result.exit_code == 1


class TestShowCommand:
    """Tests for reprise show."""

    def test_shows_request_and_response(self, tmp_path: Path):
        _seed(tmp_path)
        result = runner.invoke(
            app, ["show", "1735689600000__GET_users-42", "--path", str(tmp_path)], env=WIDE
        )
        assert result.exit_code == 0
        assert "GET https://api.example.com/users/42" in result.output
        assert "Accept" in result.output
        assert "200" in result.output
        assert '"name": "Ada"' in result.output

    def test_shows_text_body(self, tmp_path: Path):
        _seed(tmp_path)
        result = runner.invoke(
            app, ["show", "1735689601000__DELETE_users-7", "--path", str(tmp_path)], env=WIDE
        )
        assert result.exit_code == 0
        assert "gone" in result.output
        assert "(empty)" in result.output

    def test_unknown_id(self, tmp_path: Path):
        result = runner.invoke(
            app, ["show", "1__GET_nothing", "--path", str(tmp_path)], env=WIDE
        )
        assert result.exit_code == 1
        assert "No recording '1__GET_nothing'" in result.output

    def test_malformed_id(self, tmp_path: Path):
        result = runner.invoke(app, ["show", "not-an-id", "--path", str(tmp_path)], env=WIDE)
        assert result.exit_code == 1
        assert "Invalid transaction id" in result.output

    def test_corrupt_file(self, tmp_path: Path):
        (tmp_path / "5__GET_broken.json").write_text("{")
        result = runner.invoke(app, ["show", "5__GET_broken", "--path", str(tmp_path)], env=WIDE)
        assert result.exit_code == 1
        assert "Corrupt recording" in result.output
