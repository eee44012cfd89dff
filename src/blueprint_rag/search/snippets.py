"""Preview snippets centred on the densest run of query terms."""

from __future__ import annotations

from typing import Sequence

ELLIPSIS = "..."
DEFAULT_MAX_LENGTH = 200
DEFAULT_WINDOW_WORDS = 25


def _truncate_head(content: str, max_length: int) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length].rstrip() + ELLIPSIS


def generate_snippet(
    content: str,
    terms: Sequence[str],
    max_length: int = DEFAULT_MAX_LENGTH,
    *,
    window_words: int = DEFAULT_WINDOW_WORDS,
) -> str:
    """Return the ``window_words``-word window of ``content`` with the most term occurrences.

    The first window with the highest count wins, so output is deterministic.
    Ellipses mark text cut on either edge. Without terms the head of the
    content is returned.
    """
    content = content or ""
    max_length = max(1, int(max_length))
    active = [t.lower() for t in terms if t]
    if not active:
        return _truncate_head(content, max_length)

    words = content.split()
    if not words:
        return ""
    size = max(1, int(window_words))
    lowered = [w.lower() for w in words]

    best_start = 0
    best_count = -1
    for start in range(0, max(1, len(words) - size + 1)):
        window = " ".join(lowered[start : start + size])
        count = sum(window.count(term) for term in active)
        if count > best_count:
            best_count = count
            best_start = start

    end = min(len(words), best_start + size)
    snippet = " ".join(words[best_start:end])
    cut_tail = end < len(words)
    if len(snippet) > max_length:
        snippet = snippet[:max_length].rstrip()
        cut_tail = True

    if best_start > 0:
        snippet = ELLIPSIS + snippet
    if cut_tail:
        snippet += ELLIPSIS
    return snippet
