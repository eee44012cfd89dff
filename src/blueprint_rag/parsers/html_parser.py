"""HTML parser for converting documentation pages into a `ParsedDocument`
with line-oriented text and heading sections.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup  # type: ignore[import-untyped]

from blueprint_rag.exceptions import IngestionError

from .base_parser import BaseParser, ParsedDocument, SectionInfo

_DROP_TAGS = ("script", "style", "noscript", "nav", "footer")


class HTMLParser(BaseParser):
    """Parser for HTML content."""

    def can_parse(self, path: Path) -> bool:
        return path.suffix.lower() in {".html", ".htm"}

    def parse(self, path: Path) -> ParsedDocument:
        """Parse an HTML file from disk."""
        try:
            html = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise IngestionError(f"Cannot read {path}: {exc}") from exc
        return self.parse_html_content(html, metadata={"source_path": str(path)})

    def parse_html_content(
        self, html: str, *, metadata: Optional[Dict[str, Any]] = None
    ) -> ParsedDocument:
        """Parse HTML string content into a `ParsedDocument`.

        Visible text is kept one block per line so headings stay on their own
        lines; h1-h6 become sections with levels 1-6 in document order.
        """
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(list(_DROP_TAGS)):
            tag.decompose()

        meta = dict(metadata or {})
        if "title" not in meta and soup.title and soup.title.get_text(strip=True):
            meta["title"] = soup.title.get_text(" ", strip=True)
        if soup.title:
            soup.title.decompose()

        text = soup.get_text("\n", strip=True)

        sections: List[SectionInfo] = []
        for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            title = tag.get_text(" ", strip=True)
            if title:
                sections.append(SectionInfo(title=title, level=int(tag.name[1])))

        return ParsedDocument(text=text, sections=sections, metadata=meta)
