"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the link store backend so the rest of
the app can stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the Postgres backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- TINYLINK_STORAGE_BACKEND: "sqlite" (default), "memory" or "postgres"
- TINYLINK_DB_PATH:         SQLite file if backend=="sqlite"
- TINYLINK_DB_DSN:          DSN string if backend=="postgres"
- TINYLINK_DB_TIMEOUT:      seconds; passed to SQL backends

LLM Prompt
----------
You are extending storage backends. Read env lazily inside the factory
function. Don't import heavy DB modules unless needed.
"""

import logging
import os
from typing import Optional

from tinylink.config import read_db_timeout
from tinylink.storage.base import BaseStorage
from tinylink.storage.storage import Storage
from tinylink.storage.sqlite_storage import SQLiteStorage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a link store based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "sqlite" or "postgres". If omitted, reads TINYLINK_STORAGE_BACKEND.
    kwargs : dict
        Backend overrides: path="..." for sqlite, dsn="..." for postgres,
        timeout=<seconds> for either.

    Raises
    ------
    ValueError
        Unknown backend, or postgres without a DSN.
    """
    be = (backend or os.getenv("TINYLINK_STORAGE_BACKEND", "sqlite")).strip().lower()
    timeout = kwargs.get("timeout") or read_db_timeout()

    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "sqlite":
        path = kwargs.get("path") or os.getenv("TINYLINK_DB_PATH", "links.db")
        return SQLiteStorage(path, timeout=timeout)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("TINYLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env TINYLINK_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from tinylink.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn, timeout=timeout)

    raise ValueError(f"Unknown storage backend: {be!r}")
