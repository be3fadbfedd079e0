"""Environment-driven settings for switchbooks."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DB_PATH_ENV = "SWITCHBOOKS_DB_PATH"
COMPANY_ENV = "SWITCHBOOKS_COMPANY"
LOG_LEVEL_ENV = "SWITCHBOOKS_LOG_LEVEL"
LOG_FORMAT_ENV = "SWITCHBOOKS_LOG_FORMAT"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("console", "json")


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    database_path: Optional[str]
    company: Optional[str]
    log_level: str = "WARNING"
    log_format: str = "console"

    def resolve_database_path(self) -> str:
        """Return the configured database path, defaulting to ~/.switchbooks/switchbooks.db."""
        if self.database_path is not None:
            return self.database_path
        db_dir = Path.home() / ".switchbooks"
        db_dir.mkdir(exist_ok=True)
        return str(db_dir / "switchbooks.db")


def get_settings() -> Settings:
    """Read settings from environment variables.

    Unknown log levels or formats fall back to the defaults.
    """
    log_level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if log_level not in LOG_LEVELS:
        log_level = "WARNING"
    log_format = os.environ.get(LOG_FORMAT_ENV, "console").lower()
    if log_format not in LOG_FORMATS:
        log_format = "console"

    return Settings(
        database_path=os.environ.get(DB_PATH_ENV),
        company=os.environ.get(COMPANY_ENV),
        log_level=log_level,
        log_format=log_format,
    )
