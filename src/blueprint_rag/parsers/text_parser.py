"""Plain-text parser for `.txt` research notes and exported docs."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from blueprint_rag.exceptions import IngestionError

from .base_parser import BaseParser, ParsedDocument, SectionInfo

# "# Heading" style lines, or short "1. Heading" lines
_HEADING = re.compile(r"^(#{1,6})\s+(.+)$|^\d+\.\s+(.{3,80})$")


class TextParser(BaseParser):
    """Parser for `.txt` files; markdown-like heading lines become sections."""

    def can_parse(self, path: Path) -> bool:
        return path.suffix.lower() in {".txt", ".text"}

    def parse(self, path: Path) -> ParsedDocument:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IngestionError(f"Cannot read {path}: {exc}") from exc
        return self.parse_text_content(text, metadata={"source_path": str(path)})

    def parse_text_content(
        self, text: str, *, metadata: Optional[Dict[str, Any]] = None
    ) -> ParsedDocument:
        lines = [ln.rstrip() for ln in text.splitlines()]
        sections: List[SectionInfo] = []
        for line in lines:
            m = _HEADING.match(line.strip())
            if not m:
                continue
            if m.group(1):
                sections.append(SectionInfo(title=m.group(2).strip(), level=len(m.group(1))))
            else:
                sections.append(SectionInfo(title=m.group(3).strip(), level=2))
        return ParsedDocument(
            text="\n".join(ln for ln in lines if ln.strip()),
            sections=sections,
            metadata=dict(metadata or {}),
        )
