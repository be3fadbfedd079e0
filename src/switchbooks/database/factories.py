"""Database factory functions for creating database instances."""

from typing import Optional

from switchbooks.config.settings import get_settings
from switchbooks.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SWITCHBOOKS_DB_PATH
            environment variable, then defaults to ~/.switchbooks/switchbooks.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = get_settings().resolve_database_path()

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
