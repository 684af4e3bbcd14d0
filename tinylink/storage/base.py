"""
Base storage interface for TinyLink.

Purpose:
    Define a small, stable contract that multiple storage backends
    (in-memory, SQLite, PostgreSQL) can implement without requiring
    changes to the registry service or the HTTP layer.

Contract:
    - create() is an atomic check-and-insert; a taken code raises AlreadyExists.
    - get() and list() never mutate state.
    - delete() raises NotFound for an unknown code.
    - resolve_and_record_click() is the only read-modify-write; it must be a
      single atomic update so concurrent redirects never lose an increment.
    - Driver failures surface as StorageUnavailable.

Testing & Coverage:
    Abstract methods are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.

LLM Prompt Example:
    "Show how a narrow, explicit storage interface enables dependency
    injection and easy backend swapping without touching service code."
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import StorageUnavailable


@dataclass(frozen=True)
class LinkRecord:
    """A registered short link and its click statistics."""

    code: str
    target_url: str
    click_count: int = 0
    last_clicked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view using the field names of the public API."""
        return {
            "code": self.code,
            "url": self.target_url,
            "clicks": self.click_count,
            "last_clicked": self.last_clicked_at.isoformat() if self.last_clicked_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class BaseStorage(ABC):
    """Abstract base class for link store backends."""

    closed: bool = False

    @abstractmethod  # pragma: no cover
    def create(self, code: str, target_url: str) -> LinkRecord:
        """
        Insert a new link with zero clicks.

        Returns:
            LinkRecord: The stored record.

        Raises:
            AlreadyExists: If `code` is already registered. The existing
                record is left untouched.

        LLM Prompt Example:
            "Design an insert API whose uniqueness check cannot race, using
            ON CONFLICT DO NOTHING in SQL or a lock in memory."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get(self, code: str) -> Optional[LinkRecord]:
        """Return the record for `code`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list(self) -> List[LinkRecord]:
        """Return all records, most recently created first."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete(self, code: str) -> None:
        """
        Remove the record for `code`.

        Raises:
            NotFound: If no record exists.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def resolve_and_record_click(self, code: str) -> Optional[str]:
        """
        Count a click and return the target URL.

        Returns:
            Optional[str]: The target URL, or None (and no mutation) if the
            code is unknown.

        LLM Prompt Example:
            "Explain atomic increments in SQL (UPDATE ... SET clicks = clicks + 1)
             and how to prevent lost updates under concurrent redirects."
        """
        raise NotImplementedError

    # ---- Lifecycle ----------------------------------------------------------

    def close(self) -> None:
        """Release backend resources. Further calls raise StorageUnavailable."""
        self.closed = True

    def _ensure_open(self) -> None:
        if self.closed:
            raise StorageUnavailable("Link store is closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
