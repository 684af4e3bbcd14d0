"""
SQLiteStorage – file-backed storage for TinyLink
================================================

The default durable backend. Persists links in a single SQLite database file
using the same `links` table the service has always used, so an existing
`links.db` keeps working.

Key Design Points
-----------------
- **Connections**: one short-lived connection per call, opened with a busy
  timeout (`TINYLINK_DB_TIMEOUT`). SQLite serializes writers itself, so no
  process-wide lock is needed and nothing is held across requests.
- **WAL journal**: readers don't block the writer and vice versa.
- **Uniqueness**: `INSERT ... ON CONFLICT(code) DO NOTHING` and the affected
  row count decide AlreadyExists; the PRIMARY KEY does the arbitration.
  The insert and its read-back share one write transaction.
- **Click counting**: `BEGIN IMMEDIATE` takes the write lock up front, then
  `UPDATE ... clicks = clicks + 1` and the target read run in the same
  transaction. Two redirects of the same code can't interleave.
- **Timestamps**: written by SQLite's `datetime('now')` (UTC, seconds) and
  parsed back into aware datetimes.

The path must name a file; ":memory:" would give every connection its own
empty database.

Example
-------
>>> store = SQLiteStorage("links.db")
>>> store.create("go", "https://golang.org").click_count
0
>>> store.resolve_and_record_click("go")
'https://golang.org'
"""

import contextlib
import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from ..errors import AlreadyExists, NotFound, StorageUnavailable
from .base import BaseStorage, LinkRecord

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS links(
  code TEXT PRIMARY KEY,
  url TEXT NOT NULL,
  clicks INTEGER NOT NULL DEFAULT 0,
  last_clicked TEXT,
  created_at TEXT DEFAULT (datetime('now'))
)
"""

_COLUMNS = "code, url, clicks, last_clicked, created_at"
_TS_FORMAT = "%Y-%m-%d %H:%M:%S"


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.strptime(value, _TS_FORMAT).replace(tzinfo=timezone.utc)


def _to_record(row: sqlite3.Row) -> LinkRecord:
    return LinkRecord(
        code=row["code"],
        target_url=row["url"],
        click_count=row["clicks"] or 0,
        last_clicked_at=_parse_ts(row["last_clicked"]),
        created_at=_parse_ts(row["created_at"]),
    )


class SQLiteStorage(BaseStorage):
    """SQLite implementation of the link store contract.

    Parameters
    ----------
    path : str
        Database file; created on first use.
    timeout : float
        Seconds to wait for a locked database before giving up.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout
        self.init_schema()

    # ---- Internal helpers -------------------------------------------------

    @contextlib.contextmanager
    def _conn(self):
        """Open a connection in autocommit mode and translate driver errors."""
        self._ensure_open()
        try:
            con = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as exc:
            log.exception("Cannot open SQLite database %s", self.path)
            raise StorageUnavailable(f"Cannot open database: {exc}") from exc
        con.row_factory = sqlite3.Row
        try:
            yield con
        except sqlite3.Error as exc:
            log.exception("SQLite operation failed on %s", self.path)
            raise StorageUnavailable(f"Database error: {exc}") from exc
        finally:
            con.close()

    @contextlib.contextmanager
    def _write(self):
        """Connection inside a BEGIN IMMEDIATE transaction; commits on success."""
        with self._conn() as con:
            con.execute("BEGIN IMMEDIATE")
            try:
                yield con
            except BaseException:
                if con.in_transaction:
                    con.execute("ROLLBACK")
                raise
            con.execute("COMMIT")

    def init_schema(self) -> None:
        """Create the links table if missing and switch to WAL."""
        with self._conn() as con:
            con.execute("PRAGMA journal_mode=WAL")
            con.execute(SCHEMA)
            # Databases from before created_at existed
            columns = {r["name"] for r in con.execute("PRAGMA table_info(links)")}
            if "created_at" not in columns:
                con.execute("ALTER TABLE links ADD COLUMN created_at TEXT")
        log.info("SQLite link store ready at %s", self.path)

    # ---- Contract methods -------------------------------------------------

    def create(self, code: str, target_url: str) -> LinkRecord:
        with self._write() as con:
            cur = con.execute(
                "INSERT INTO links (code, url) VALUES (?, ?) ON CONFLICT(code) DO NOTHING",
                (code, target_url),
            )
            if cur.rowcount != 1:
                log.debug("create rejected, code taken: %s", code)
                raise AlreadyExists(code)
            row = con.execute(f"SELECT {_COLUMNS} FROM links WHERE code = ?", (code,)).fetchone()
        return _to_record(row)

    def get(self, code: str) -> Optional[LinkRecord]:
        with self._conn() as con:
            row = con.execute(f"SELECT {_COLUMNS} FROM links WHERE code = ?", (code,)).fetchone()
        return _to_record(row) if row else None

    def list(self) -> List[LinkRecord]:
        with self._conn() as con:
            rows = con.execute(f"SELECT {_COLUMNS} FROM links ORDER BY rowid DESC").fetchall()
        return [_to_record(r) for r in rows]

    def delete(self, code: str) -> None:
        with self._conn() as con:
            cur = con.execute("DELETE FROM links WHERE code = ?", (code,))
            if cur.rowcount != 1:
                raise NotFound(code)

    def resolve_and_record_click(self, code: str) -> Optional[str]:
        with self._write() as con:
            cur = con.execute(
                "UPDATE links SET clicks = clicks + 1, last_clicked = datetime('now') WHERE code = ?",
                (code,),
            )
            if cur.rowcount != 1:
                return None
            row = con.execute("SELECT url FROM links WHERE code = ?", (code,)).fetchone()
        return row["url"]
