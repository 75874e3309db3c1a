from __future__ import annotations

from typing import Optional


class DirHandleError(Exception):
    """Base error for directory handles."""


class ValidationError(DirHandleError):
    """Raised when user input is invalid."""


class PathDecodeError(ValidationError):
    """Raised when a byte path cannot be decoded to text."""


class AccessDeniedError(DirHandleError):
    """Raised when an operation tries to access data outside allowed scope."""


class NotFoundError(DirHandleError):
    """Raised when a requested directory is not found."""


class DirectoryClosedError(DirHandleError):
    """Raised when reading from a handle that has been closed."""


class StreamError(DirHandleError):
    """An underlying directory stream primitive failed."""

    def __init__(self, message: str, *, errno: Optional[int] = None) -> None:
        super().__init__(message)
        self.errno = errno


class OpenFailedError(StreamError):
    """Raised when the directory stream cannot be opened."""


class ReadFailedError(StreamError):
    """Raised when pulling the next entry from an open stream fails."""


class CloseFailedError(StreamError):
    """Raised when the directory stream cannot be closed."""
