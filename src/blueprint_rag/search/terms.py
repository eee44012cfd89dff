"""Query normalization into a bounded list of search terms."""

from __future__ import annotations

import re
from typing import List

MAX_TERMS = 10
MIN_TERM_LENGTH = 3

_NON_TERM_CHARS = re.compile(r"[^\w\s-]")


def extract_terms(query: str, *, max_terms: int = MAX_TERMS) -> List[str]:
    """Lower-case ``query``, strip punctuation and return at most ``max_terms`` terms.

    Terms shorter than three characters are dropped. An empty or all-short
    query yields an empty list.
    """
    if not query:
        return []
    cleaned = _NON_TERM_CHARS.sub(" ", str(query).lower())
    terms = [t for t in cleaned.split() if len(t) >= MIN_TERM_LENGTH]
    return terms[: max(0, int(max_terms))]


def normalize_query(query: str) -> str:
    """Collapse whitespace and lower-case ``query`` for use in cache keys."""
    return " ".join(str(query or "").lower().split())
