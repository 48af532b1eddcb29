"""Exception types raised by bookstack_sync.

Every failure in the sync pipeline surfaces as a ``BookStackSyncError``
subclass so callers can render a message from the kind alone:

- ``FormatError``: front matter present but not parseable.
- ``RemoteWriteError``: the BookStack API rejected or failed a page write.
- ``ConfigurationError``: server URL or API token missing or malformed.
"""

from __future__ import annotations


class BookStackSyncError(Exception):
    """Base class for all bookstack_sync errors."""


class FormatError(BookStackSyncError, ValueError):
    """Front matter block exists but cannot be parsed into a mapping."""


class ConfigurationError(BookStackSyncError, ValueError):
    """Required connection settings are empty or invalid."""


class RemoteWriteError(BookStackSyncError):
    """A create/update request did not complete with HTTP 200.

    Attributes:
        status: HTTP status code, or ``None`` when no response was
            received (connection refused, TLS failure, timeout).
        body: Raw response text, truncated, for diagnostics.
    """

    def __init__(
        self, message: str, status: int | None = None, body: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is None:
            return base
        return f"{base} (HTTP {self.status})"
