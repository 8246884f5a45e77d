"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from covtrack.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV_VAR = "COVTRACK_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".covtrack" / "covtrack.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the database file: explicit path, then environment, then default.

    ``~`` is expanded and the parent directory is created if missing.
    """
    chosen = database_path or os.environ.get(DB_PATH_ENV_VAR) or str(DEFAULT_DB_PATH)
    path = Path(chosen).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks the
            COVTRACK_DB_PATH environment variable, then defaults to
            ~/.covtrack/covtrack.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    logger.debug("Using database %s", path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
