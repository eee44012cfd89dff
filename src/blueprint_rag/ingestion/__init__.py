"""Document ingestion: parse files or pages, chunk them, persist the chunks."""

from .chunker import TextChunk, split_into_chunks
from .loader import DocumentLoader, matching_keywords

__all__ = ["DocumentLoader", "TextChunk", "matching_keywords", "split_into_chunks"]
