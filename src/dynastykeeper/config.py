"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import pathlib

from pydantic import field_validator
from pydantic_settings import BaseSettings

PACKAGE_ROOT = pathlib.Path(__file__).resolve().parent

# Bundled FBS team directory (name -> conference). Overridable per install.
DEFAULT_TEAMS_FILE = PACKAGE_ROOT / "data" / "fbs_teams.json"

VALID_ENVS = frozenset({"development", "production"})


class Settings(BaseSettings):
    """Dynasty keeper configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///dynastykeeper.db"

    # Environment
    dynasty_env: str = "development"

    # Team directory used for conference resolution
    dynasty_teams_file: str = ""

    # New dynasties start here unless the caller picks a year
    dynasty_default_start_year: int = 2024

    # Where the backup script writes snapshot files
    dynasty_snapshot_dir: str = "backups"

    # Logging
    dynasty_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @field_validator("dynasty_env")
    @classmethod
    def _known_env(cls, value: str) -> str:
        if value not in VALID_ENVS:
            msg = f"dynasty_env must be one of {sorted(VALID_ENVS)}, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("dynasty_default_start_year")
    @classmethod
    def _plausible_year(cls, value: int) -> int:
        if value <= 1900:
            msg = f"dynasty_default_start_year must be after 1900, got {value}"
            raise ValueError(msg)
        return value

    def teams_file_path(self) -> pathlib.Path:
        """Return the team directory file, falling back to the bundled one."""
        if self.dynasty_teams_file:
            return pathlib.Path(self.dynasty_teams_file)
        return DEFAULT_TEAMS_FILE
