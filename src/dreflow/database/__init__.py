"""Database layer for dreflow application."""

from dreflow.database.base import Database
from dreflow.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
