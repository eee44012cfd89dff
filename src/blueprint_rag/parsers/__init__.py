"""Parsers used by document ingestion."""

from .base_parser import BaseParser, ParsedDocument, SectionInfo
from .html_parser import HTMLParser
from .markdown_parser import MarkdownParser
from .text_parser import TextParser

__all__ = [
    "BaseParser",
    "ParsedDocument",
    "SectionInfo",
    "HTMLParser",
    "MarkdownParser",
    "TextParser",
]
