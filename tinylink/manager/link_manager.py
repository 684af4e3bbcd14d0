"""
LinkManager module for TinyLink.

Responsibilities:
    - Validate create requests (code and URL present and non-blank)
    - Normalize target URLs once, before they are stored
    - Delegate to the injected link store
    - Report absent codes as NotFound

Design notes:
    - Stateless façade: the only attribute is the store it was handed, so one
      manager can serve any number of concurrent requests.
    - Normalization point is create time. Stored URLs are already absolute,
      and resolve returns them verbatim.
    - Validation errors are raised before the store is touched.
    - Store errors (AlreadyExists, StorageUnavailable) pass through unchanged;
      there are no retries here.

LLM Prompt Example:
    "Explain how a thin service layer over an injected repository keeps
    validation and error mapping out of both the HTTP routes and the storage
    backends."
"""

import logging
from typing import List, Optional

from ..errors import InvalidInput, NotFound
from ..storage.base import BaseStorage, LinkRecord

log = logging.getLogger(__name__)

_SCHEMES = ("http://", "https://")


def normalize_url(url: str) -> str:
    """
    Return `url` stripped, with "https://" prepended when it has no
    http/https scheme.

    >>> normalize_url("golang.org")
    'https://golang.org'
    >>> normalize_url("HTTP://example.com/a")
    'HTTP://example.com/a'
    """
    url = url.strip()
    if url.lower().startswith(_SCHEMES):
        return url
    return "https://" + url


def _blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _require(value: Optional[str], field: str) -> str:
    if _blank(value):
        raise InvalidInput(f"Missing fields: {field}")
    return value


class LinkManager:
    """Coordinates validation and store access for the link registry."""

    def __init__(self, storage: BaseStorage):
        """
        Args:
            storage (BaseStorage): Backend store; owned by the caller, which is
                also responsible for closing it.
        """
        self.storage = storage

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def create_link(self, code: Optional[str], url: Optional[str]) -> LinkRecord:
        """
        Register `code` -> `url`.

        Rules:
            - code and url must both be non-blank strings.
            - code is used as given (no trimming); it is the primary key.
            - url is normalized before storage.

        Returns:
            LinkRecord: The stored record (0 clicks).

        Raises:
            InvalidInput: Missing or blank code/url.
            AlreadyExists: Code already registered; nothing is overwritten.
            StorageUnavailable: Backend failure.
        """
        missing = [name for name, value in (("code", code), ("url", url)) if _blank(value)]
        if missing:
            raise InvalidInput(f"Missing fields: {', '.join(missing)}")

        record = self.storage.create(code, normalize_url(url))
        log.info("Created link %s -> %s", record.code, record.target_url)
        return record

    def list_links(self) -> List[LinkRecord]:
        """All links, newest first."""
        return self.storage.list()

    def get_link(self, code: str) -> LinkRecord:
        record = self.storage.get(_require(code, "code"))
        if record is None:
            raise NotFound(code)
        return record

    def delete_link(self, code: str) -> None:
        """Remove a link. Unknown codes raise NotFound rather than succeeding silently."""
        self.storage.delete(_require(code, "code"))
        log.info("Deleted link %s", code)

    def resolve(self, code: str) -> str:
        """
        Record a click for `code` and return its absolute target URL.

        Raises:
            NotFound: Unknown code; no record is created.
        """
        target = self.storage.resolve_and_record_click(_require(code, "code"))
        if target is None:
            log.debug("Resolve miss for %s", code)
            raise NotFound(code)
        return target
