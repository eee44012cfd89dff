"""Keyword relevance scoring.

The weights below are the single canonical ranking used for every corpus:
a whole-query title hit outranks anything a handful of term matches can add.
"""

from __future__ import annotations

from typing import Sequence

from blueprint_rag.documents import Document

TITLE_PHRASE_WEIGHT = 100.0
CONTENT_PHRASE_WEIGHT = 50.0
TITLE_TERM_WEIGHT = 20.0
KEYWORD_TERM_WEIGHT = 15.0
OCCURRENCE_WEIGHT = 5.0
PLATFORM_WEIGHT = 25.0


def score_document(document: Document, terms: Sequence[str], raw_query: str = "") -> float:
    """Return a non-negative relevance score; ``0`` means not relevant."""
    title = (document.title or "").lower()
    content = (document.content or "").lower()
    keywords = [str(k).lower() for k in (document.keywords or [])]
    searchable = " ".join([title, content, " ".join(keywords)])

    score = 0.0
    phrase = (raw_query or "").strip().lower()
    if phrase:
        if phrase in title:
            score += TITLE_PHRASE_WEIGHT
        if phrase in content:
            score += CONTENT_PHRASE_WEIGHT

    for term in terms:
        if not term:
            continue
        if term in title:
            score += TITLE_TERM_WEIGHT
        if any(term in kw for kw in keywords):
            score += KEYWORD_TERM_WEIGHT
        score += searchable.count(term) * OCCURRENCE_WEIGHT

    platform = (document.platform or "").lower()
    if platform and any(term and term in platform for term in terms):
        score += PLATFORM_WEIGHT

    return max(0.0, score)
