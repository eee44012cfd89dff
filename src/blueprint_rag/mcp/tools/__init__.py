"""Tool registration modules for the Blueprint RAG MCP server."""

from .rag import register_rag_tools

__all__ = ["register_rag_tools"]
