"""Merging of per-source results into a single ranked list."""

from __future__ import annotations

import re
from typing import Iterable, List

from blueprint_rag.search.base_search import ScoredResult

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def title_key(title: str) -> str:
    """Normalized title used to detect near-duplicate documents.

    Titles with no ASCII letters or digits fall back to their lower-cased,
    whitespace-collapsed form so distinct non-Latin titles stay distinct.
    """
    lowered = (title or "").lower()
    return _NON_ALNUM.sub("", lowered) or " ".join(lowered.split())


def rank_and_dedupe(results: Iterable[ScoredResult], limit: int) -> List[ScoredResult]:
    """Drop duplicate titles (first seen wins), sort by score and keep ``limit`` results.

    Sorting is stable, so results with equal scores keep their input order.
    """
    if limit <= 0:
        return []
    seen: set[str] = set()
    unique: List[ScoredResult] = []
    for result in results:
        key = title_key(result.document.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)
    unique.sort(key=lambda r: r.relevance_score, reverse=True)
    return unique[:limit]
