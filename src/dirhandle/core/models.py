"""Immutable value types shared by handles, streams and tools.

Dirent is the entry descriptor a directory stream yields; DirKind is the
type tag it carries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


DirKind = Literal[
    "file",
    "directory",
    "symlink",
    "block_device",
    "char_device",
    "fifo",
    "socket",
    "unknown",
]


@dataclass(frozen=True, slots=True)
class Dirent:
    """A single directory entry: its name and what kind of node it is."""

    name: str
    kind: DirKind = "unknown"

    def is_file(self) -> bool:
        return self.kind == "file"

    def is_directory(self) -> bool:
        return self.kind == "directory"

    def is_symbolic_link(self) -> bool:
        return self.kind == "symlink"

    def is_block_device(self) -> bool:
        return self.kind == "block_device"

    def is_character_device(self) -> bool:
        return self.kind == "char_device"

    def is_fifo(self) -> bool:
        return self.kind == "fifo"

    def is_socket(self) -> bool:
        return self.kind == "socket"
