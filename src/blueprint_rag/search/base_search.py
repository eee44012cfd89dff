"""Abstract retrieval interface and the scored result type.

Defines the minimal surface the rest of the application touches (search,
add, stats), enabling alternative backends and test doubles via a common
contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional

from blueprint_rag.documents import Document

ResultSource = Literal["memory", "database"]


@dataclass(slots=True)
class ScoredResult:
    """A document annotated for a single search call. Never persisted."""

    document: Document
    relevance_score: float
    snippet: str = ""
    source: ResultSource = "memory"

    @property
    def id(self) -> str:
        return self.document.id

    @property
    def title(self) -> str:
        return self.document.title

    def to_dict(self) -> Dict[str, Any]:
        doc = self.document
        return {
            "id": doc.id,
            "title": doc.title,
            "content": doc.content,
            "platform": doc.platform,
            "documentType": doc.document_type,
            "keywords": list(doc.keywords),
            "createdAt": doc.created_at.isoformat(),
            "updatedAt": doc.updated_at.isoformat(),
            "relevanceScore": self.relevance_score,
            "snippet": self.snippet,
            "source": self.source,
        }


class BaseSearch(ABC):
    """Abstract interface for retrieval implementations."""

    @abstractmethod
    async def search_documents(
        self, query: str, platform: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ScoredResult]:
        """Execute a search query and return ranked results. Never raises for read failures."""
        raise NotImplementedError

    @abstractmethod
    async def add_document(self, payload: Mapping[str, Any]) -> Document:
        """Persist a new document and make it visible to subsequent searches."""
        raise NotImplementedError

    @abstractmethod
    async def get_document_stats(self) -> Any:
        """Return corpus and cache statistics."""
        raise NotImplementedError
