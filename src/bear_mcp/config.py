"""Configuration module for the Bear MCP server."""

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config: survives reinstalls
_USER_ENV = Path.home() / ".bear-mcp" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "info"

# Accepted BEAR_MCP_LOG_LEVEL values mapped onto stdlib levels
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Where Bear keeps its database, most common first
BEAR_DATABASE_LOCATIONS = (
    # iCloud sync
    Path("Library/Group Containers/9K33E3U3T4.net.shinyfrog.bear"
         "/Application Data/database.sqlite"),
    # Local storage (no iCloud)
    Path("Library/Containers/net.shinyfrog.bear/Data/Documents"
         "/Application Data/database.sqlite"),
)


def _default_open_command() -> str:
    return "open" if sys.platform == "darwin" else "xdg-open"


class BearConfig(BaseModel):
    """Configuration for the Bear MCP server."""

    # Minimum log severity: debug, info, warn or error
    log_level: str = Field(
        default_factory=lambda: os.getenv("BEAR_MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        validate_default=True,
    )
    # Optional rotating log file directory (stderr logging is always on)
    log_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("BEAR_MCP_LOG_DIR"))
            if os.getenv("BEAR_MCP_LOG_DIR")
            else None
        )
    )
    # Explicit database location, probed before the standard Bear locations
    database_path: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("BEAR_MCP_DATABASE_PATH")).expanduser()
            if os.getenv("BEAR_MCP_DATABASE_PATH")
            else None
        )
    )
    # Write path configuration
    url_scheme: str = Field(
        default_factory=lambda: os.getenv("BEAR_MCP_URL_SCHEME", "bear")
    )
    open_command: str = Field(
        default_factory=lambda: os.getenv(
            "BEAR_MCP_OPEN_COMMAND", _default_open_command()
        )
    )
    # Server configuration
    server_name: str = Field(
        default_factory=lambda: os.getenv("BEAR_MCP_SERVER_NAME", "bear")
    )

    model_config = {"validate_assignment": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Optional[str]) -> str:
        """Fall back to the default level instead of rejecting bad values."""
        level = str(value or "").strip().lower()
        if level not in LOG_LEVELS:
            if level:
                logger.warning(
                    "Unknown log level %r, using %r", value, DEFAULT_LOG_LEVEL
                )
            return DEFAULT_LOG_LEVEL
        return level

    def get_logging_level(self) -> int:
        """Get the stdlib logging level for the configured severity."""
        return LOG_LEVELS[self.log_level]

    def candidate_database_paths(self) -> List[Path]:
        """Get the ordered list of places to look for Bear's database."""
        home = Path.home()
        candidates = [home / location for location in BEAR_DATABASE_LOCATIONS]
        if self.database_path is not None:
            candidates.insert(0, self.database_path)
        return candidates


# Create a global config instance
config = BearConfig()
