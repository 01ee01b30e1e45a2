"""
Tests for CLI commands.

Uses typer's CliRunner against a throwaway project directory.
"""

import pytest
from typer.testing import CliRunner

from feedwatch.cli.main import app
from feedwatch.core.delivery import DeliveryStatus
from feedwatch.core.state import DeliveryStore

runner = CliRunner()

CONFIG = """
monitor:
  feeds: {metar: 1, synop: 3}
remote:
  host: ${FEEDWATCH_TEST_HOST}
  base_path: ${FEEDWATCH_TEST_PATH}
store:
  path: state/feedwatch.duckdb
logging:
  file_enabled: false
  console_type: plain
  level: WARNING
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.delenv("FEEDWATCH_TEST_HOST", raising=False)
    monkeypatch.delenv("FEEDWATCH_TEST_PATH", raising=False)
    (tmp_path / "config.yaml").write_text(CONFIG)
    return tmp_path


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "feedwatch version" in result.output

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "feedwatch version" in result.output


class TestHelp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "feedwatch" in result.output.lower()

    @pytest.mark.parametrize("command", ["serve", "generate", "reconcile", "status"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


class TestGenerate:
    def test_seeds_day(self, project):
        result = runner.invoke(app, ["generate", "--date", "2024-01-01", "-d", str(project)])

        assert result.exit_code == 0, result.output
        assert "32 created" in result.output

        store = DeliveryStore(str(project / "state" / "feedwatch.duckdb"))
        try:
            assert store.count() == 32
        finally:
            store.close()

    def test_second_run_changes_nothing(self, project):
        runner.invoke(app, ["generate", "--date", "2024-01-01", "-d", str(project)])
        result = runner.invoke(app, ["generate", "--date", "2024-01-01", "-d", str(project)])

        assert result.exit_code == 0
        assert "0 created" in result.output
        assert "32 unchanged" in result.output

    def test_bad_date(self, project):
        result = runner.invoke(app, ["generate", "--date", "01/01/2024", "-d", str(project)])
        assert result.exit_code != 0

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["generate", "-d", str(tmp_path)])

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output


class TestStatus:
    def test_prints_day(self, project):
        runner.invoke(app, ["generate", "--date", "2024-01-01", "-d", str(project)])

        result = runner.invoke(app, ["status", "synop", "--date", "2024-01-01", "-d", str(project)])

        assert result.exit_code == 0, result.output
        assert "synop03.csv" in result.output
        assert DeliveryStatus.EXPECTED.value in result.output

    def test_unknown_feed(self, project):
        result = runner.invoke(app, ["status", "radar", "-d", str(project)])

        assert result.exit_code == 1
        assert "Unknown feed type" in result.output


class TestReconcile:
    def test_unconfigured_remote_skips(self, project):
        result = runner.invoke(app, ["reconcile", "-d", str(project)])

        assert result.exit_code == 1
        assert "Pass skipped" in result.output
