"""Quarry MCP server entrypoint using FastMCP.

Exposes the search platform (indexing, access-filtered search, resets) as tools.
Run with:
  - quarry-mcp
  - or: python -m quarry.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from quarry.config import Settings, load_settings
from quarry.logging_setup import setup_logging
from quarry.mcp.tools import register_search_tools
from quarry.platform import Platform

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.platform: Optional[Platform] = None

    def init_platform(self) -> None:
        """Load the platform and make sure its index exists."""
        self.platform = Platform(self.settings)
        self.platform.load_platform()
        self.platform.initialize_index()


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("Quarry MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    if _state is not None and _state.platform is not None and not _state.platform.test_platform():
        return "unavailable"
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    setup_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_platform()
    register_search_tools(mcp, get_state=lambda: _state)
    logger.info("Serving %s over %s", settings.app.name, settings.app.transport)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
