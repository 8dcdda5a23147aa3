"""
Error taxonomy — every failure binr reports to its callers.

All errors derive from ``BinrError`` so a caller can catch the whole
family at once. Where a builtin exception has the same meaning, the
binr error also derives from it (``InvalidArgumentError`` is a
``ValueError``, ``StorageError`` is an ``OSError``), so generic
handlers keep working.

    InvalidArgumentError   caller bug, never retried
    UpstreamError          HTTP / transport failure, caller may retry
    IntegrityError         checksum mismatch, never retried
    AlreadyExistsError     stale partial download in the way
    AlreadyLinkedError     versioned link already present (benign)
    StateCorruptionError   unparseable versioned-link filename on disk
    StorageError           filesystem failure
    ConfigError            invalid sources file or URL template
"""

from __future__ import annotations


class BinrError(Exception):
    """Base class for all binr errors."""


class InvalidArgumentError(BinrError, ValueError):
    """A required argument is missing or malformed."""


class UpstreamError(BinrError):
    """The remote end failed to provide what was asked for."""

    def __init__(self, message: str, *, url: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class IntegrityError(BinrError):
    """Downloaded content does not match its expected digest."""

    def __init__(self, message: str, *, expected: str = "", actual: str = "") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class AlreadyExistsError(BinrError, FileExistsError):
    """A download target already exists on disk."""


class AlreadyLinkedError(BinrError, FileExistsError):
    """The versioned link for a command is already in place."""


class StateCorruptionError(BinrError):
    """A namespace directory holds a link binr cannot interpret."""

    def __init__(self, message: str, *, filename: str) -> None:
        super().__init__(message)
        self.filename = filename


class StorageError(BinrError, OSError):
    """A filesystem operation failed."""


class ConfigError(BinrError):
    """Raised when a sources file is invalid or missing."""


__all__ = [
    "AlreadyExistsError",
    "AlreadyLinkedError",
    "BinrError",
    "ConfigError",
    "IntegrityError",
    "InvalidArgumentError",
    "StateCorruptionError",
    "StorageError",
    "UpstreamError",
]
