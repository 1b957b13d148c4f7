"""Tests for the CLI entry point and logging setup."""

import json

import structlog
from click.testing import CliRunner

from gog_secrets.main import cli
from gog_secrets.utils.logging_config import configure_logging


class TestConfigureLogging:
    def test_json_to_stderr(self, capsys):
        configure_logging("info")

        structlog.get_logger("test").info("token_stored", email="a@b.com")

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "token_stored"
        assert event["email"] == "a@b.com"
        assert event["level"] == "info"

    def test_level_filters(self, capsys):
        configure_logging("WARNING")

        structlog.get_logger("test").info("hidden")

        assert capsys.readouterr().err == ""


class TestCli:
    def test_auth_group_registered(self):
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "auth" in result.output

    def test_log_level_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOG_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("GOG_LOG_LEVEL", "ERROR")

        result = CliRunner().invoke(cli, ["auth", "keyring"])

        assert result.exit_code == 0
        assert "Backend: auto" in result.output
