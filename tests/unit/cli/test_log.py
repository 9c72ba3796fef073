"""Unit tests for log command.

Tests for the CLI access log viewer.
"""

import json
from pathlib import Path

import pytest
from dirinv.cli.main import app
from dirinv.core.paths import get_config_path
from dirinv.inventory.access_log import AccessLog
from dirinv.inventory.models import AccessLogKind
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def populated_log(isolated_env: Path) -> Path:
    """Access log at the default location with a few entries."""
    path = isolated_env / "dirinv-access.log"
    with AccessLog(path) as log:
        log.record(AccessLogKind.UNREADABLE, "/t/ghost", "scan", "Entry unreadable")
        log.record(AccessLogKind.MODIFIED, "/t/a.txt", "rename", "/t/a.txt -> /t/z.txt")
        log.record(AccessLogKind.FAILED, "/t/b", "chmod", "Invalid permission format")
    return path


class TestLogCommand:
    """Tests for dirinv log command."""

    def test_log_empty(self) -> None:
        """Shows a message when no log exists."""
        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0
        assert "No access log entries found." in result.stdout

    def test_log_table(self, populated_log: Path) -> None:
        """Shows all tags in a table."""
        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0
        assert "Access Log" in result.stdout
        for tag in ("UNREADABLE", "MODIFIED", "FAILED"):
            assert tag in result.stdout

    def test_log_json_newest_first(self, populated_log: Path) -> None:
        """--json prints entries newest first."""
        result = runner.invoke(app, ["log", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [e["tag"] for e in data] == ["FAILED", "MODIFIED", "UNREADABLE"]

    def test_log_limit(self, populated_log: Path) -> None:
        """-n limits the number of entries."""
        result = runner.invoke(app, ["log", "-n", "1", "--json"])

        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 1

    def test_log_tag_filter(self, populated_log: Path) -> None:
        """--tag keeps only matching entries."""
        result = runner.invoke(app, ["log", "--tag", "modified", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [e["path"] for e in data] == ["/t/a.txt"]

    def test_log_configured_path(self, tmp_path: Path) -> None:
        """The log location comes from the config file."""
        custom = tmp_path / "custom.log"
        with AccessLog(custom) as log:
            log.record(AccessLogKind.FAILED, "/x", "rename", "boom")
        config_path = get_config_path()
        config_path.parent.mkdir(parents=True)
        config_path.write_text(f'access_log_path = "{custom}"\n')

        result = runner.invoke(app, ["log", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)[0]["message"] == "boom"
