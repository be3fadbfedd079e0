"""Database layer for switchbooks application."""

from switchbooks.database.base import Database
from switchbooks.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
