"""Database layer for covtrack application."""

from covtrack.database.base import Database
from covtrack.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
