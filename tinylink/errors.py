"""
Error taxonomy for TinyLink.

Every failure the registry can report is one of four classes, all rooted at
`LinkError` so callers can catch the whole family in one place:

    InvalidInput        missing/empty code or URL (client-caused)
    AlreadyExists       code collision on create (client-caused)
    NotFound            operation on an unknown code (client-caused)
    StorageUnavailable  persistence failure or closed store (server-caused)

Storage backends raise these deliberately; driver exceptions never leak past
the store boundary, they are chained onto `StorageUnavailable` instead.
"""

__all__ = [
    "LinkError",
    "InvalidInput",
    "AlreadyExists",
    "NotFound",
    "StorageUnavailable",
]


class LinkError(Exception):
    """Base class for all registry errors."""

    #: True when the caller (not the server) caused the failure.
    client_error = False


class InvalidInput(LinkError, ValueError):
    """A required field was missing or blank."""

    client_error = True


class AlreadyExists(LinkError):
    """A link with this code is already registered."""

    client_error = True

    def __init__(self, code: str):
        super().__init__(f"Code exists: {code}")
        self.code = code


class NotFound(LinkError):
    """No link is registered under this code."""

    client_error = True

    def __init__(self, code: str):
        super().__init__(f"Not found: {code}")
        self.code = code


class StorageUnavailable(LinkError):
    """The backing store failed or has been closed."""
