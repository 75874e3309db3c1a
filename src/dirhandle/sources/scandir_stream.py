from __future__ import annotations

import logging
import os
import stat
from typing import Optional

from dirhandle.core.errors import CloseFailedError, OpenFailedError, ReadFailedError
from dirhandle.core.models import DirKind, Dirent


"""os.scandir-backed DirStream implementation.

Each stream wraps one scandir iterator. Entries are yielded in whatever
order the OS enumerates them; '.' and '..' are never produced.
"""

logger = logging.getLogger(__name__)


def _kind_of(entry: os.DirEntry) -> DirKind:
    # Never follow symlinks: a link to a directory is reported as a link
    if entry.is_symlink():
        return "symlink"
    if entry.is_dir(follow_symlinks=False):
        return "directory"
    if entry.is_file(follow_symlinks=False):
        return "file"

    try:
        mode = entry.stat(follow_symlinks=False).st_mode
    except OSError:
        # Entry vanished between enumeration and stat
        return "unknown"

    if stat.S_ISBLK(mode):
        return "block_device"
    if stat.S_ISCHR(mode):
        return "char_device"
    if stat.S_ISFIFO(mode):
        return "fifo"
    if stat.S_ISSOCK(mode):
        return "socket"
    return "unknown"


class ScandirStream:
    # Blocking primitives only; callers handle threading and ordering.

    def __init__(self, path: str) -> None:
        self._path = path
        try:
            self._it = os.scandir(path)
        except OSError as e:
            raise OpenFailedError(
                f"Cannot open directory {path!r}: {e.strerror or e}", errno=e.errno
            ) from e
        logger.debug("opened directory stream for %r", path)

    def next(self) -> Optional[Dirent]:
        try:
            entry = next(self._it, None)
        except OSError as e:
            raise ReadFailedError(
                f"Cannot read directory {self._path!r}: {e.strerror or e}", errno=e.errno
            ) from e

        if entry is None:
            return None
        return Dirent(name=entry.name, kind=_kind_of(entry))

    def close(self) -> None:
        try:
            self._it.close()
        except OSError as e:
            raise CloseFailedError(
                f"Cannot close directory {self._path!r}: {e.strerror or e}", errno=e.errno
            ) from e
        logger.debug("closed directory stream for %r", self._path)


def open_dir_stream(path: str) -> ScandirStream:
    """Default StreamOpener used by DirectoryHandle."""
    return ScandirStream(path)
