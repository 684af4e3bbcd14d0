"""
Link store backends for TinyLink.

`get_storage()` picks one from configuration; the Postgres backend is only
imported when selected, so psycopg is not needed for memory/SQLite use.
"""

from .base import BaseStorage, LinkRecord
from .storage import Storage
from .sqlite_storage import SQLiteStorage
from .storage_factory import get_storage

__all__ = ["BaseStorage", "LinkRecord", "Storage", "SQLiteStorage", "get_storage"]
