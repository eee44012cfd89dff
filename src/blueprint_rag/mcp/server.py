"""Blueprint RAG MCP server entrypoint using FastMCP.

Exposes retrieval tools built atop `RetrievalService`.
Run with:
  - blueprint-rag-mcp
  - or: python -m blueprint_rag.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from fastmcp import FastMCP

from blueprint_rag.config import Settings, load_settings
from blueprint_rag.log import configure_logging
from blueprint_rag.mcp.tools import register_rag_tools
from blueprint_rag.scheduler import SyncScheduler
from blueprint_rag.search.service import RetrievalService

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.service: Optional[RetrievalService] = None
        self.scheduler: Optional[SyncScheduler] = None

    def init_service(self) -> None:
        """Build the retrieval service from configuration."""
        self.service = RetrievalService.from_settings(self.settings)

    async def start_sync(self) -> None:
        """Run one sync immediately and schedule the periodic ones."""
        if self.service is None or not self.service.store.has_persisted_store:
            return
        await self.service.sync_persisted()
        self.scheduler = SyncScheduler()
        self.scheduler.schedule_sync(
            self.service,
            interval=timedelta(seconds=self.settings.search.sync_interval_seconds),
        )
        self.scheduler.start()

    def stop_sync(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None


# Global state and server instance
_state: Optional[AppState] = None


@asynccontextmanager
async def _lifespan(_server: FastMCP) -> AsyncIterator[None]:
    if _state is not None:
        await _state.start_sync()
    try:
        yield
    finally:
        if _state is not None:
            _state.stop_sync()


mcp = FastMCP("Blueprint RAG MCP Server", lifespan=_lifespan)


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    configure_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_service()
    register_rag_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    logger.info("Starting %s (transport=%s)", settings.app.name, transport)
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
