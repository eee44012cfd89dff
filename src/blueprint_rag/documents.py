"""Core document types shared by the store, the scorer and the search facade."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

SUPPORTED_PLATFORMS: tuple[str, ...] = ("replit", "lovable", "bolt", "cursor", "windsurf")

DocumentOrigin = Literal["memory", "persisted"]

DEFAULT_DOCUMENT_TYPE = "document"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_supported_platform(platform: Optional[str]) -> bool:
    return bool(platform) and str(platform).lower() in SUPPORTED_PLATFORMS


@dataclass(slots=True)
class Document:
    """A searchable document from either the seed corpus or the persisted store.

    Attributes
    ----------
    id: str
        Unique within the combined corpus. Persisted ids carry a ``db_`` prefix.
    title, content: str
        Never empty.
    platform: str
        One of ``SUPPORTED_PLATFORMS``.
    document_type: str
        Free-form category, e.g. "database" or "ai-features".
    keywords: list[str]
        Ordered, possibly empty.
    origin: "memory" | "persisted"
        Which corpus the document came from.
    """

    id: str
    title: str
    content: str
    platform: str
    document_type: str = DEFAULT_DOCUMENT_TYPE
    keywords: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    origin: DocumentOrigin = "memory"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "platform": self.platform,
            "documentType": self.document_type,
            "keywords": list(self.keywords),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "origin": self.origin,
        }


@dataclass(slots=True)
class DocumentCounts:
    """Corpus size broken down by platform and by origin."""

    per_platform: Dict[str, int] = field(default_factory=dict)
    total_memory: int = 0
    total_persisted: int = 0
