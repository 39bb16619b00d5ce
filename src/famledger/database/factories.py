"""Database factory functions."""

import os
from pathlib import Path
from typing import Optional

from famledger.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DB_DIR = ".famledger"
DEFAULT_DB_NAME = "famledger.db"


def default_database_path() -> Path:
    """~/.famledger/famledger.db"""
    return Path.home() / DEFAULT_DB_DIR / DEFAULT_DB_NAME


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed database.

    The path is taken from database_path, then FAMLEDGER_DB_PATH, then the
    default under the home directory. "~" is expanded and missing parent
    directories are created.
    """
    database_path = database_path or os.environ.get("FAMLEDGER_DB_PATH")
    path = Path(database_path).expanduser() if database_path else default_database_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    db = SQLAlchemyDatabase(f"sqlite:///{path}")
    db.database_path = str(path)
    return db
