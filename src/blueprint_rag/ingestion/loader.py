"""Loading of documentation files and pages into the persisted corpus.

Files and fetched pages are parsed, split into heading-titled chunks and
inserted one by one through `RetrievalService.add_document`, so the search
cache is invalidated exactly as for a regular upload.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from blueprint_rag.documents import (
    DEFAULT_DOCUMENT_TYPE,
    SUPPORTED_PLATFORMS,
    Document,
    is_supported_platform,
)
from blueprint_rag.exceptions import IngestionError, InvalidDocumentError, StorageError
from blueprint_rag.ingestion.chunker import MAX_CHUNK_SIZE, split_into_chunks
from blueprint_rag.parsers import BaseParser, HTMLParser, MarkdownParser, ParsedDocument, TextParser
from blueprint_rag.search.service import RetrievalService

logger = logging.getLogger(__name__)

USER_AGENT = "blueprint-rag-loader/0.1"


def matching_keywords(content: str, candidates: Sequence[str]) -> List[str]:
    """Return the candidate keywords that occur in ``content`` (case-insensitive)."""
    lowered = content.lower()
    return [kw for kw in candidates if kw and kw.lower() in lowered]


class DocumentLoader:
    """Parses, chunks and persists documentation for one platform at a time."""

    def __init__(
        self,
        service: RetrievalService,
        *,
        parsers: Optional[Sequence[BaseParser]] = None,
        timeout: float = 20.0,
        max_chunk_size: int = MAX_CHUNK_SIZE,
    ) -> None:
        self.service = service
        self.parsers: List[BaseParser] = list(parsers or (MarkdownParser(), HTMLParser(), TextParser()))
        self.timeout = timeout
        self.max_chunk_size = max_chunk_size
        self._html = HTMLParser()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    @staticmethod
    def _check_platform(platform: str) -> str:
        if not is_supported_platform(platform):
            raise InvalidDocumentError(
                f"Unsupported platform '{platform}'. Supported: {', '.join(SUPPORTED_PLATFORMS)}",
                fields=["platform"],
            )
        return platform.lower()

    def parse_file(self, path: Path) -> ParsedDocument:
        if not path.is_file():
            raise IngestionError(f"File not found: {path}")
        for parser in self.parsers:
            if parser.can_parse(path):
                return parser.parse(path)
        raise IngestionError(f"No parser available for '{path.suffix or path.name}'")

    async def load_parsed(
        self,
        parsed: ParsedDocument,
        platform: str,
        *,
        default_title: str,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        keywords: Sequence[str] = (),
        uploaded_by: Optional[str] = None,
    ) -> List[Document]:
        """Chunk an already parsed document and persist every chunk.

        Chunks are committed one at a time. If a later chunk fails, the earlier
        ones stay stored and the raised ``IngestionError`` carries their ids.
        """
        platform = self._check_platform(platform)
        chunks = split_into_chunks(
            parsed.text,
            default_title=parsed.title or default_title,
            section_titles=[s.title for s in parsed.sections],
            max_chunk_size=self.max_chunk_size,
        )
        stored: List[Document] = []
        for chunk in chunks:
            payload = {
                "title": chunk.title,
                "content": chunk.content,
                "platform": platform,
                "documentType": document_type,
                "keywords": matching_keywords(chunk.content, keywords),
                "uploadedBy": uploaded_by,
            }
            try:
                doc = await self.service.add_document(payload)
            except StorageError as exc:
                if not stored:
                    raise
                stored_ids = [d.id for d in stored]
                logger.warning(
                    "Ingestion of %s stopped at chunk %d of %d; kept %s",
                    default_title,
                    chunk.index + 1,
                    len(chunks),
                    ", ".join(stored_ids),
                )
                raise IngestionError(
                    f"Stored {len(stored)} of {len(chunks)} chunks before failing: {exc}",
                    stored_ids=stored_ids,
                ) from exc
            stored.append(doc)
        logger.info("Loaded %d chunks for platform %s from %s", len(stored), platform, default_title)
        return stored

    async def load_file(
        self,
        path: Path | str,
        platform: str,
        *,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        keywords: Sequence[str] = (),
        uploaded_by: Optional[str] = None,
    ) -> List[Document]:
        """Parse a Markdown, HTML or text file and persist its chunks."""
        path = Path(path)
        self._check_platform(platform)
        parsed = self.parse_file(path)
        default_title = f"{platform.capitalize()} {path.stem.replace('_', ' ').replace('-', ' ').strip()}"
        return await self.load_parsed(
            parsed,
            platform,
            default_title=default_title,
            document_type=document_type,
            keywords=keywords,
            uploaded_by=uploaded_by,
        )

    async def fetch_page(self, url: str) -> str:
        """Fetch an HTML page, raising `IngestionError` on transport or HTTP errors."""
        try:
            async with self._client() as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise IngestionError(f"Failed to fetch {url}: {exc}") from exc
        ct = resp.headers.get("content-type", "").lower()
        if "html" not in ct and "text" not in ct:
            raise IngestionError(f"Unsupported content type for {url}: {ct or 'unknown'}")
        return resp.text

    async def load_url(
        self,
        url: str,
        platform: str,
        *,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        keywords: Sequence[str] = (),
        uploaded_by: Optional[str] = None,
    ) -> List[Document]:
        """Fetch a documentation page and persist its chunks."""
        url = (url or "").strip()
        if not url:
            raise IngestionError("url is required")
        self._check_platform(platform)
        html = await self.fetch_page(url)
        parsed = self._html.parse_html_content(html, metadata={"source_url": url})
        return await self.load_parsed(
            parsed,
            platform,
            default_title=url,
            document_type=document_type,
            keywords=keywords,
            uploaded_by=uploaded_by,
        )
