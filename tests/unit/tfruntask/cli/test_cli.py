"""Unit tests for the tfruntask CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from tfruntask import __version__
from tfruntask.cli import main as cli_main
from tfruntask.infrastructure.config import Settings
from tfruntask.infrastructure.security.signature import compute_signature

runner = CliRunner()


@pytest.fixture
def payload_file(tmp_path: Path, task_request_data: dict[str, Any]) -> Path:
    path = tmp_path / "request.json"
    path.write_text(json.dumps(task_request_data))
    return path


@pytest.mark.unit
class TestSignatureCommands:
    def test_sign(self, payload_file: Path) -> None:
        result = runner.invoke(cli_main.app, ["sign", str(payload_file), "--hmac-key", "k"])

        assert result.exit_code == 0
        assert result.stdout.strip() == compute_signature(payload_file.read_bytes(), "k")

    def test_verify_valid(self, payload_file: Path) -> None:
        signature = compute_signature(payload_file.read_bytes(), "k")
        result = runner.invoke(
            cli_main.app,
            ["verify", str(payload_file), "--signature", signature, "--hmac-key", "k"],
        )

        assert result.exit_code == 0
        assert "Signature is valid" in result.stdout

    def test_verify_mismatch(self, payload_file: Path) -> None:
        result = runner.invoke(
            cli_main.app,
            ["verify", str(payload_file), "--signature", "deadbeef", "--hmac-key", "k"],
        )

        assert result.exit_code == 1
        assert "does not match" in result.stdout

    def test_sign_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(cli_main.app, ["sign", str(tmp_path / "nope.json"), "--hmac-key", "k"])
        assert result.exit_code != 0


@pytest.mark.unit
class TestServeCommand:
    def test_flags_override_settings(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: dict[str, Any] = {}

        def fake_run(app: Any, **kwargs: Any) -> None:
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr(cli_main.uvicorn, "run", fake_run)

        result = runner.invoke(
            cli_main.app,
            ["serve", "--port", "8123", "--path", "hook", "--output-dir", str(tmp_path)],
        )

        assert result.exit_code == 0, result.stdout
        assert calls["port"] == 8123
        assert calls["log_config"] is None
        assert calls["app"].state.container.settings().path == "/hook"
        assert calls["app"].state.container.settings().output_dir == tmp_path


@pytest.mark.unit
class TestReplayCommand:
    def test_replay_without_api_token(
        self, monkeypatch: pytest.MonkeyPatch, payload_file: Path, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(
            cli_main, "get_settings", lambda: Settings(output_dir=tmp_path / "runs", api_token="")
        )
        task_request_data = json.loads(payload_file.read_text())
        task_request_data["stage"] = "pre_apply"
        payload_file.write_text(json.dumps(task_request_data))

        result = runner.invoke(cli_main.app, ["replay", str(payload_file)])

        assert result.exit_code == 0, result.stdout
        assert "save-request" in result.stdout
        assert "skipped" in result.stdout
        assert "Pre Apply Stage - Success" in result.stdout
        assert (tmp_path / "runs" / "my-workspace" / "run-i3Df5to9ELvibKpQ" / "3_pre_apply").is_dir()

    def test_replay_unknown_stage(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(output_dir=tmp_path))
        payload = tmp_path / "request.json"
        payload.write_text(json.dumps({"stage": "post_destroy"}))

        result = runner.invoke(cli_main.app, ["replay", str(payload)])

        assert result.exit_code == 1

    def test_replay_invalid_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(cli_main, "get_settings", lambda: Settings(output_dir=tmp_path))
        payload = tmp_path / "request.json"
        payload.write_text("{broken")

        result = runner.invoke(cli_main.app, ["replay", str(payload)])

        assert result.exit_code == 1


@pytest.mark.unit
def test_version() -> None:
    result = runner.invoke(cli_main.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout
