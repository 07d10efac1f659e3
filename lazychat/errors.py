"""Exception types raised by collaborators and caught at handler boundaries."""

from __future__ import annotations


class LazychatError(Exception):
    """Base class for expected, user-reportable failures."""


class PlatformError(LazychatError):
    """A platform client call failed (network, auth, rate limit, ...)."""


class ReadOnlyError(LazychatError):
    """A write operation was attempted without a connected client."""

    def __init__(self, message: str = "Archive mode - read only") -> None:
        super().__init__(message)


class NotAuthorizedError(LazychatError):
    """The current user may not modify the target message."""
