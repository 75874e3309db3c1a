from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from dirhandle.config import PATH_ENCODING
from dirhandle.core.errors import AccessDeniedError, PathDecodeError, ValidationError

"""
Path utilities used across the project.

Turns constructor input (text, bytes or PathLike) into the text path a
handle stores, and resolves tool paths under a containment root.
"""

PathInput = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


def decode_path(path: PathInput) -> str:
    """Return `path` as text.

    Bytes are decoded strictly with PATH_ENCODING so that decoding the
    encoded form of a text path gives back the identical text.
    """
    raw = os.fspath(path)
    if isinstance(raw, bytes):
        try:
            return raw.decode(PATH_ENCODING)
        except UnicodeDecodeError as e:
            raise PathDecodeError(f"Path is not valid {PATH_ENCODING}: {raw!r}") from e
    return raw


def normalize_posix_relpath(p: str) -> str:
    """Normalize a user path to a clean POSIX relative path.

    Converts backslashes to '/', trims whitespace, removes leading '/'
    and repeated './' markers.
    """
    s = (p or "").strip()
    s = s.replace("\\", "/")        # Unify path separators across OSes.
    s = s.lstrip("/")               # Prevent accidental absolute paths.
    while s.startswith("./"):       # Drop repeated "./" prefixes.
        s = s[2:]
    return s


def resolve_under_root(project_root: Path, rel_path: str) -> Path:
    """Resolve `rel_path` against `project_root`, refusing to leave it."""
    if not (rel_path or "").strip():
        raise ValidationError("Path is empty")

    root = project_root.resolve()
    p = (root / normalize_posix_relpath(rel_path)).resolve()

    # Strong containment check to prevent directory traversal/outside access
    try:
        p.relative_to(root)
    except ValueError as e:
        raise AccessDeniedError("Access outside project root is not allowed") from e

    return p
