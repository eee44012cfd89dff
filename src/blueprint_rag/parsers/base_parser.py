"""Abstract base classes and data structures for ingestion parsers.

Parsers turn uploaded files (Markdown, HTML, plain text) into line-oriented
text plus heading structure, which the chunker uses to split long documents
into searchable pieces.

Concrete implementations should subclass `BaseParser` and implement
`can_parse()` and `parse()`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class SectionInfo:
    """A heading found in a document.

    Attributes
    ----------
    title: str
        The human-readable heading text.
    level: int
        A hierarchical level where 1 is top-level (e.g., H1), 2 is H2, etc.
    """

    title: str
    level: int


@dataclass(slots=True)
class ParsedDocument:
    """Container for parsed document outputs. ``text`` keeps one block per line."""

    text: str = ""
    sections: List[SectionInfo] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> Optional[str]:
        """Explicit metadata title, else the first top-most heading."""
        meta_title = str(self.metadata.get("title") or "").strip()
        if meta_title:
            return meta_title
        if self.sections:
            top = min(s.level for s in self.sections)
            return next(s.title for s in self.sections if s.level == top)
        return None


class BaseParser(ABC):
    """Abstract parser interface."""

    @abstractmethod
    def can_parse(self, path: Path) -> bool:
        """Return True if this parser can handle the given file/path."""

    @abstractmethod
    def parse(self, path: Path) -> ParsedDocument:
        """Parse the file and return a `ParsedDocument`.

        Implementations should raise `blueprint_rag.exceptions.IngestionError` on failure.
        """
        raise NotImplementedError
