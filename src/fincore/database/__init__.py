"""Database layer for fincore."""

from fincore.database.base import Database
from fincore.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
