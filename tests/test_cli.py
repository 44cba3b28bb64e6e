"""
Tests for the Guardian Moderation CLI.
"""

import asyncio
import os
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner, Result

from guardian_moderation.cli import cli
from guardian_moderation.cli.main import resolve_log_level
from guardian_moderation.core.config import Config, MonitoringConfig
from guardian_moderation.core.persistence import JSONBlockedSearchLog
from guardian_moderation.features.moderation import BlockedSearchEntry


@pytest.fixture
def data_dir(temp_dir: Path) -> Path:
    return temp_dir / "data"


@pytest.fixture
def invoke(data_dir: Path):
    runner = CliRunner()

    def run(args: List[str]) -> Result:
        return runner.invoke(cli, args, env={"GM_STORAGE__DATA_DIR": str(data_dir)})

    return run


def submitted_id(result: Result) -> str:
    return result.output.split()[0]


class TestFilterCommands:
    """Test the filter command group."""

    def test_check_blocked(self, invoke) -> None:
        result = invoke(["filter", "check", "xxx videos"])
        assert result.exit_code == 0
        assert "blocked (keyword: xxx)" in result.output

    def test_check_allowed(self, invoke) -> None:
        result = invoke(["filter", "check", "dinosaurs"])
        assert result.exit_code == 0
        assert "allowed" in result.output

    def test_validate_blocked_query_fails(self, invoke) -> None:
        result = invoke(["filter", "validate", "porn"])
        assert result.exit_code == 1

    def test_validate_valid_query(self, invoke) -> None:
        result = invoke(["filter", "validate", "dinosaurs"])
        assert result.exit_code == 0
        assert "valid" in result.output


class TestRequestCommands:
    """Test the requests command group against the JSON store."""

    def test_submit_and_list(self, invoke) -> None:
        result = invoke(
            ["requests", "submit", "song-1", "--kind", "song", "--kid", "kid-1", "--name", "Rug Island"]
        )
        assert result.exit_code == 0

        listed = invoke(["requests", "list"])
        assert listed.exit_code == 0
        assert "Rug Island" in listed.output
        assert submitted_id(result) in listed.output

    def test_empty_list(self, invoke) -> None:
        result = invoke(["requests", "list", "--status", "denied"])
        assert result.exit_code == 0
        assert "No denied requests" in result.output

    def test_deny_override_flow(self, invoke) -> None:
        request_id = submitted_id(
            invoke(["requests", "submit", "video-1", "--kind", "video", "--kid", "kid-1"])
        )

        denied = invoke(["requests", "deny", request_id, "--reason", "Too scary"])
        assert denied.exit_code == 0
        assert "reason: Too scary" in denied.output

        again = invoke(["requests", "deny", request_id])
        assert again.exit_code != 0
        assert "INVALID_TRANSITION" in again.output

        overridden = invoke(["requests", "override", request_id])
        assert overridden.exit_code == 0
        assert "approved" in overridden.output

        undone = invoke(["requests", "undo-approval", request_id])
        assert undone.exit_code == 0
        assert "pending" in undone.output

    def test_unknown_request(self, invoke) -> None:
        result = invoke(["requests", "approve", "missing"])
        assert result.exit_code != 0
        assert "REQUEST_NOT_FOUND" in result.output

    def test_album_review(self, invoke, temp_dir: Path) -> None:
        catalog = temp_dir / "catalog.yaml"
        catalog.write_text(
            yaml.safe_dump(
                {
                    "album-1": [
                        {"track_ref": "t1", "name": "One"},
                        {"track_ref": "t2", "name": "Two"},
                    ]
                }
            )
        )
        request_id = submitted_id(
            invoke(["requests", "submit", "album-1", "--kind", "album", "--kid", "kid-1"])
        )

        approved = invoke(["requests", "approve", request_id, "--catalog", str(catalog)])
        assert approved.exit_code == 0

        children = invoke(["requests", "children", request_id])
        assert "t1  approved" in children.output
        assert "t2  approved" in children.output

    def test_complete_review(self, invoke) -> None:
        request_id = submitted_id(
            invoke(["requests", "submit", "album-2", "--kind", "album", "--kid", "kid-1"])
        )
        invoke(["requests", "approve-track", request_id, "t1"])

        result = invoke(["requests", "complete-review", request_id, "--note", "Only one"])

        assert result.exit_code == 0
        assert "partially_approved" in result.output


class TestBlockedCommands:
    """Test the blocked command group."""

    def test_empty(self, invoke) -> None:
        result = invoke(["blocked", "list"])
        assert result.exit_code == 0
        assert "No blocked searches" in result.output

    def test_list_and_mark_read(self, invoke, data_dir: Path) -> None:
        async def seed() -> None:
            log = JSONBlockedSearchLog(data_dir)
            await log.append(BlockedSearchEntry("beer", "beer", "kid-1"))
            await log.append(BlockedSearchEntry("gun", "gun", "kid-2"))

        asyncio.run(seed())

        listed = invoke(["blocked", "list", "--kid", "kid-1"])
        assert "(1 unread)" in listed.output
        assert '"beer"' in listed.output
        assert '"gun"' not in listed.output

        marked = invoke(["blocked", "mark-read"])
        assert "Marked 2 searches as read" in marked.output


class TestConfigCommands:
    """Test the config command group."""

    def test_show_json(self, invoke) -> None:
        result = invoke(["config", "show", "--format", "json", "--section", "moderation"])
        assert result.exit_code == 0
        assert '"batch_undo_window_s": 30.0' in result.output

    def test_show_unknown_section(self, invoke) -> None:
        result = invoke(["config", "show", "--section", "nope"])
        assert result.exit_code != 0

    def test_malformed_config_file(self, invoke, temp_dir: Path) -> None:
        path = temp_dir / "moderation.yaml"
        path.write_text("moderation: [unclosed")

        result = invoke(["--config", str(path), "filter", "check", "dinosaurs"])

        assert result.exit_code != 0
        assert "Error loading configuration" in result.output
        assert isinstance(result.exception, SystemExit)


class TestLogLevel:
    """Test how the CLI picks its log level."""

    def test_configured_level_is_default(self) -> None:
        config = Config(monitoring=MonitoringConfig(log_level="info"))
        assert resolve_log_level(config, verbose=False, debug=False) == "INFO"

    def test_flags_override_config(self) -> None:
        config = Config(monitoring=MonitoringConfig(log_level="ERROR"))
        assert resolve_log_level(config, verbose=True, debug=False) == "INFO"
        assert resolve_log_level(config, verbose=True, debug=True) == "DEBUG"

    def test_env_level(self) -> None:
        with patch.dict(os.environ, {"GM_MONITORING__LOG_LEVEL": "ERROR"}):
            config = Config.from_env()
        assert resolve_log_level(config, verbose=False, debug=False) == "ERROR"
