"""MCP tool that reads one directory under the project root.

Registers the 'read_dir' tool which walks a DirectoryHandle to exhaustion
(or up to a cap) and returns each entry's name and kind.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from dirhandle.config import MAX_DIR_ENTRIES, PROJECT_ROOT
from dirhandle.sources.local_dir import LocalDirSource


def register(mcp: FastMCP, *, project_root: Optional[Path] = None) -> None:
    @mcp.tool(name="read_dir")
    async def read_dir(
        path: str = ".",
        max_entries: int = MAX_DIR_ENTRIES,
    ) -> List[Dict[str, str]]:
        """Read the entries of a directory under the project root.

        Params:
          - path: directory path relative to the project root (default: ".").
          - max_entries: stop after this many entries (default from config).

        Returns:
          A list of {"name", "kind"} dicts in the order the OS enumerates
          them. kind is one of file, directory, symlink, block_device,
          char_device, fifo, socket, unknown.

        Raises:
          ValidationError for empty paths or a non-positive max_entries,
          AccessDeniedError for paths outside the project root, and
          NotFoundError when the path is missing or not a directory.
        """
        src = LocalDirSource(project_root=project_root or PROJECT_ROOT)
        return await src.read_dir(path=path, max_entries=max_entries)
