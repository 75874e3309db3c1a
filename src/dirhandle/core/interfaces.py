"""Core protocol definitions.

DirStream is the contract a DirectoryHandle consumes: a forward-only
cursor over one directory. StreamOpener builds one from a text path.
"""

from __future__ import annotations

from typing import Optional, Protocol

from dirhandle.core.models import Dirent


class DirStream(Protocol):
    """Contract for an open directory stream (blocking primitives)."""

    def next(self) -> Optional[Dirent]:
        ...

    def close(self) -> None:
        ...


class StreamOpener(Protocol):
    def __call__(self, path: str) -> DirStream:
        ...
