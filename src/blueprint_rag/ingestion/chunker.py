"""Heading-aware splitting of long documents into searchable chunks."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import Iterable, List

MAX_CHUNK_SIZE = 3000
MIN_CHUNK_SIZE = 500

_HEADING_LINE = re.compile(r"^#|^\d+\.\s|\*\*")
_HEADING_MARKUP = re.compile(r"^#+\s*|\*\*")


@dataclass(slots=True)
class TextChunk:
    title: str
    content: str
    index: int


def _clean_heading(line: str) -> str:
    return _HEADING_MARKUP.sub("", line).strip()


def split_into_chunks(
    text: str,
    *,
    default_title: str,
    section_titles: Iterable[str] = (),
    max_chunk_size: int = MAX_CHUNK_SIZE,
    min_chunk_size: int = MIN_CHUNK_SIZE,
) -> List[TextChunk]:
    """Split ``text`` into chunks of at most ``max_chunk_size`` characters.

    A heading line (a known section title, a markdown heading, a numbered
    line or bold text) closes the running chunk once it holds more than
    ``min_chunk_size`` characters, and becomes the title of the chunks that
    follow. Chunk titles read ``"<heading> - Part <n>"``.
    """
    headings = {t.strip() for t in section_titles if t and t.strip()}
    chunks: List[TextChunk] = []
    lines: List[str] = []
    size = 0
    title = default_title

    def flush() -> None:
        nonlocal lines, size
        body = "\n".join(lines).strip()
        if body:
            index = len(chunks)
            chunks.append(TextChunk(title=f"{title} - Part {index + 1}", content=body, index=index))
        lines = []
        size = 0

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line in headings or _HEADING_LINE.search(line):
            if size > min_chunk_size:
                flush()
            cleaned = _clean_heading(line)
            if 3 <= len(cleaned) <= 100:
                title = cleaned
        pieces = textwrap.wrap(line, max_chunk_size) if len(line) > max_chunk_size else [line]
        for piece in pieces:
            if lines and size + len(piece) + 1 > max_chunk_size:
                flush()
            lines.append(piece)
            size += len(piece) + 1

    flush()
    return chunks
