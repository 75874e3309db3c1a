from __future__ import annotations

import errno
import logging
from pathlib import Path
from typing import Dict, List

from dirhandle.core.dir_handle import opendir
from dirhandle.core.errors import NotFoundError, OpenFailedError, ValidationError
from dirhandle.core.paths import resolve_under_root


"""Sandboxed directory reading under PROJECT_ROOT.

Reads one directory level through a DirectoryHandle, with the same
containment checks the rest of the project applies to user paths.
"""

logger = logging.getLogger(__name__)

_MISSING = {errno.ENOENT, errno.ENOTDIR}


class LocalDirSource:
    def __init__(self, *, project_root: Path) -> None:
        self._project_root = project_root.resolve()

    async def read_dir(self, *, path: str = ".", max_entries: int) -> List[Dict[str, str]]:
        if max_entries <= 0:
            raise ValidationError("max_entries must be positive")

        target = resolve_under_root(self._project_root, path)

        try:
            handle = await opendir(target)
        except OpenFailedError as e:
            if e.errno in _MISSING:
                raise NotFoundError(f"Not a directory: {path}") from e
            raise

        out: List[Dict[str, str]] = []
        async with handle:
            async for entry in handle:
                out.append({"name": entry.name, "kind": entry.kind})
                if len(out) >= max_entries:
                    logger.debug("read_dir %r stopped at %d entries", path, max_entries)
                    break
        return out
