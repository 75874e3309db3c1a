"""Server bootstrap for the dirhandle MCP service.

Creates the FastMCP instance, registers the directory tools, and starts
the MCP server (stdio transport). Logs go to stderr since stdout carries
the protocol.
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from dirhandle.config import LOG_LEVEL, PROJECT_ROOT

from dirhandle.tools.read_dir import register as register_read_dir

mcp = FastMCP("dirhandle-mcp")


def register_tools() -> None:
    register_read_dir(mcp, project_root=PROJECT_ROOT)


def register_all() -> None:
    register_tools()


register_all()


def main() -> None:
    logging.basicConfig(level=LOG_LEVEL, stream=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
