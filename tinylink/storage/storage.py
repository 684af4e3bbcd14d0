"""
Storage module for TinyLink (in-memory implementation).

Responsibilities:
    - Save links and their target URLs
    - Count clicks and stamp the last click time
    - Provide retrieval, listing and deletion by code
    - Enforce code uniqueness

Design:
    - In-memory reference implementation of the BaseStorage contract.
    - A single lock is held for the duration of one operation only, which is
      enough to make create (check-and-insert) and resolve (read-modify-write)
      atomic across threads.
    - Dict insertion order doubles as creation order; a deleted and re-created
      code moves to the end, i.e. becomes the most recent.
    - Not durable. For persistence use SQLiteStorage or DBStorage.

LLM Prompt Example:
    "Explain how this in-memory storage can be swapped for a database-backed layer
     (SQLite/Postgres) without changing the manager or API code, by adhering to a
     narrow, explicit BaseStorage interface."
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import AlreadyExists, NotFound
from .base import BaseStorage, LinkRecord

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.links = { code: LinkRecord }   (insertion ordered)
        """
        self.links: Dict[str, LinkRecord] = {}
        self._lock = threading.Lock()

    def create(self, code: str, target_url: str) -> LinkRecord:
        with self._lock:
            self._ensure_open()
            if code in self.links:
                log.debug("create rejected, code taken: %s", code)
                raise AlreadyExists(code)
            record = LinkRecord(code=code, target_url=target_url, created_at=utc_now())
            self.links[code] = record
        return record

    def get(self, code: str) -> Optional[LinkRecord]:
        with self._lock:
            self._ensure_open()
            return self.links.get(code)

    def list(self) -> List[LinkRecord]:
        with self._lock:
            self._ensure_open()
            return list(reversed(self.links.values()))

    def delete(self, code: str) -> None:
        with self._lock:
            self._ensure_open()
            if self.links.pop(code, None) is None:
                raise NotFound(code)

    def resolve_and_record_click(self, code: str) -> Optional[str]:
        """
        Increment the click count for `code` under the store lock.

        Records are immutable, so the update swaps in a new LinkRecord; readers
        holding the old one keep a consistent snapshot.
        """
        with self._lock:
            self._ensure_open()
            record = self.links.get(code)
            if record is None:
                return None
            self.links[code] = replace(
                record,
                click_count=record.click_count + 1,
                last_clicked_at=utc_now(),
            )
            return record.target_url

    def close(self) -> None:
        with self._lock:
            super().close()
