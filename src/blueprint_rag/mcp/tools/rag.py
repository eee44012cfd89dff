"""Retrieval tools for FastMCP.

Thin adapters over `RetrievalService`; the JSON shapes match what the
blueprint dashboards already render.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from blueprint_rag.documents import DEFAULT_DOCUMENT_TYPE
from blueprint_rag.ingestion import DocumentLoader
from blueprint_rag.search.service import RetrievalService


def register_rag_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register retrieval tools on the given FastMCP instance.

    The `get_state` callable should return an object with attribute
    `service` holding a `RetrievalService`.
    """

    def _service() -> RetrievalService:
        state = get_state()
        service = getattr(state, "service", None) if state is not None else None
        if service is None:
            raise RuntimeError("Retrieval service is not initialized.")
        return service

    @mcp.tool
    async def rag_search(
        query: str, platform: Optional[str] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Search platform documentation.

        Parameters
        ----------
        query: str
            Free-text query, e.g. "database integration".
        platform: str | None
            Optional platform filter (replit, lovable, bolt, cursor, windsurf).
        limit: int | None
            Maximum number of results (default from settings).
        """
        if not (query or "").strip():
            raise ValueError("query is required")
        return await _service().search_payload(query, platform, limit)

    @mcp.tool
    async def rag_add_document(
        title: str,
        content: str,
        platform: str,
        document_type: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        uploaded_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Add a document to the persisted corpus and return it."""
        doc = await _service().add_document(
            {
                "title": title,
                "content": content,
                "platform": platform,
                "documentType": document_type,
                "keywords": keywords or [],
                "uploadedBy": uploaded_by,
            }
        )
        return doc.to_dict()

    @mcp.tool
    async def rag_stats() -> Dict[str, Any]:
        """Return corpus sizes per platform, cache size and last sync time."""
        stats = await _service().get_document_stats()
        return stats.to_dict()

    @mcp.tool
    async def rag_platform_documents(platform: str) -> Dict[str, Any]:
        """List the built-in documents for a platform."""
        docs = _service().get_platform_documents(platform)
        return {
            "platform": platform,
            "documents": [dict(d.to_dict(), source="memory") for d in docs],
            "total": len(docs),
        }

    @mcp.tool
    async def rag_recommendations(query: str, platform: str) -> List[Dict[str, str]]:
        """Suggest up to three built-in documents related to the query."""
        return _service().get_contextual_recommendations(query, platform)

    @mcp.tool
    async def rag_clear_cache() -> str:
        """Drop all cached search results."""
        _service().clear_caches()
        return "ok"

    @mcp.tool
    async def rag_ingest_file(
        path: str,
        platform: str,
        document_type: Optional[str] = None,
        keywords: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Parse a local Markdown, HTML or text file and add its chunks to the corpus."""
        loader = DocumentLoader(_service())
        docs = await loader.load_file(
            path,
            platform,
            document_type=document_type or DEFAULT_DOCUMENT_TYPE,
            keywords=keywords or [],
        )
        return {"platform": platform, "chunks": [d.id for d in docs], "total": len(docs)}

    @mcp.tool
    async def rag_ingest_url(
        url: str,
        platform: str,
        document_type: Optional[str] = None,
        keywords: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Fetch a documentation page and add its chunks to the corpus."""
        loader = DocumentLoader(_service())
        docs = await loader.load_url(
            url,
            platform,
            document_type=document_type or DEFAULT_DOCUMENT_TYPE,
            keywords=keywords or [],
        )
        return {"platform": platform, "chunks": [d.id for d in docs], "total": len(docs)}
