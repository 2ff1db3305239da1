"""Tests for configuration loading."""
import logging
from pathlib import Path

import pytest

from bear_mcp.config import (
    BEAR_DATABASE_LOCATIONS,
    DEFAULT_LOG_LEVEL,
    BearConfig,
    _USER_ENV,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove BEAR_MCP_* variables so defaults apply."""
    for name in (
        "BEAR_MCP_LOG_LEVEL",
        "BEAR_MCP_LOG_DIR",
        "BEAR_MCP_DATABASE_PATH",
        "BEAR_MCP_URL_SCHEME",
        "BEAR_MCP_OPEN_COMMAND",
        "BEAR_MCP_SERVER_NAME",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLogLevel:
    """Tests for log level parsing."""

    def test_default_is_info(self, clean_env):
        cfg = BearConfig()
        assert cfg.log_level == DEFAULT_LOG_LEVEL
        assert cfg.get_logging_level() == logging.INFO

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            (" Error ", logging.ERROR),
        ],
    )
    def test_from_environment(self, clean_env, value, expected):
        clean_env.setenv("BEAR_MCP_LOG_LEVEL", value)
        assert BearConfig().get_logging_level() == expected

    def test_unknown_value_falls_back_to_info(self, clean_env):
        clean_env.setenv("BEAR_MCP_LOG_LEVEL", "verbose")

        cfg = BearConfig()

        assert cfg.log_level == "info"
        assert cfg.get_logging_level() == logging.INFO

    def test_assignment_is_normalized(self, clean_env):
        cfg = BearConfig()
        cfg.log_level = "DEBUG"
        assert cfg.log_level == "debug"


class TestDatabaseCandidates:
    """Tests for the database search order."""

    def test_default_locations(self, clean_env, tmp_path):
        clean_env.setenv("HOME", str(tmp_path))

        candidates = BearConfig().candidate_database_paths()

        assert candidates == [Path.home() / loc for loc in BEAR_DATABASE_LOCATIONS]
        assert "9K33E3U3T4.net.shinyfrog.bear" in str(candidates[0])
        assert "net.shinyfrog.bear/Data/Documents" in str(candidates[1])
        assert all(c.name == "database.sqlite" for c in candidates)

    def test_explicit_path_checked_first(self, clean_env, tmp_path):
        explicit = tmp_path / "custom.sqlite"
        clean_env.setenv("BEAR_MCP_DATABASE_PATH", str(explicit))

        candidates = BearConfig().candidate_database_paths()

        assert candidates[0] == explicit
        assert len(candidates) == len(BEAR_DATABASE_LOCATIONS) + 1


class TestWriteSettings:
    """Tests for URL scheme and opener settings."""

    def test_defaults(self, clean_env):
        cfg = BearConfig()
        assert cfg.url_scheme == "bear"
        assert cfg.open_command in ("open", "xdg-open")

    def test_opener_per_platform(self, clean_env, monkeypatch):
        monkeypatch.setattr("bear_mcp.config.sys.platform", "darwin")
        assert BearConfig().open_command == "open"
        monkeypatch.setattr("bear_mcp.config.sys.platform", "linux")
        assert BearConfig().open_command == "xdg-open"

    def test_overrides_from_environment(self, clean_env):
        clean_env.setenv("BEAR_MCP_URL_SCHEME", "bear-test")
        clean_env.setenv("BEAR_MCP_OPEN_COMMAND", "open -g")

        cfg = BearConfig()

        assert cfg.url_scheme == "bear-test"
        assert cfg.open_command == "open -g"

    def test_log_dir_unset_by_default(self, clean_env):
        assert BearConfig().log_dir is None


def test_user_env_path():
    """_USER_ENV points to ~/.bear-mcp/.env."""
    assert _USER_ENV == Path.home() / ".bear-mcp" / ".env"


class TestServerSettings:
    """Tests for the MCP server identity."""

    def test_default_name(self, clean_env):
        assert BearConfig().server_name == "bear"

    def test_name_read_per_instance(self, clean_env):
        clean_env.setenv("BEAR_MCP_SERVER_NAME", "bear-work")
        assert BearConfig().server_name == "bear-work"
