from typing import List

from blueprint_rag.documents import Document
from blueprint_rag.search.base_search import ScoredResult
from blueprint_rag.search.ranking import rank_and_dedupe, title_key
from blueprint_rag.search.snippets import generate_snippet


def result(doc_id: str, title: str, score: float, source: str = "memory") -> ScoredResult:
    doc = Document(id=doc_id, title=title, content="content", platform="replit")
    return ScoredResult(document=doc, relevance_score=score, snippet="", source=source)  # type: ignore[arg-type]


# ---------- generate_snippet ----------


def test_snippet_without_terms_returns_head() -> None:
    content = "x" * 300
    assert generate_snippet(content, []) == "x" * 200 + "..."
    assert generate_snippet("short text", []) == "short text"


def test_snippet_selects_densest_window() -> None:
    words: List[str] = ["alpha"] * 40 + ["database", "schema", "database"] + ["omega"] * 20
    snippet = generate_snippet(" ".join(words), ["database"])
    assert snippet.startswith("...")
    assert snippet.endswith("...")
    assert snippet.count("database") == 2


def test_snippet_first_window_wins_ties() -> None:
    snippet = generate_snippet("db x x x x db", ["db"], window_words=3)
    assert snippet == "db x x..."


def test_snippet_whole_short_content_has_no_ellipsis() -> None:
    content = "Seamless database integration with PostgreSQL"
    assert generate_snippet(content, ["database"]) == content


def test_snippet_truncates_to_max_length() -> None:
    content = " ".join(["supercalifragilistic"] * 25)
    snippet = generate_snippet(content, ["supercalifragilistic"], max_length=50)
    assert snippet.endswith("...")
    assert len(snippet) <= 50 + len("...")


# ---------- rank_and_dedupe ----------


def test_title_key_normalization() -> None:
    assert title_key("Database Integration Support") == title_key("database-integration support!")


def test_dedupe_keeps_first_seen_even_with_lower_score() -> None:
    results = [
        result("repl_2", "Database Integration Support", 10),
        result("db_1", "Database-Integration Support!", 99, source="database"),
    ]
    ranked = rank_and_dedupe(results, 5)
    assert [r.id for r in ranked] == ["repl_2"]


def test_sort_is_descending_and_stable() -> None:
    results = [
        result("a", "Alpha", 5),
        result("b", "Beta", 20),
        result("c", "Gamma", 5),
        result("d", "Delta", 20),
    ]
    ranked = rank_and_dedupe(results, 10)
    assert [r.id for r in ranked] == ["b", "d", "a", "c"]


def test_limit_is_respected() -> None:
    results = [result(str(i), f"Title {i}", float(i)) for i in range(8)]
    assert len(rank_and_dedupe(results, 3)) == 3
    assert rank_and_dedupe(results, 0) == []
    assert rank_and_dedupe(results, -1) == []


def test_non_latin_titles_are_not_collapsed() -> None:
    results = [result("db_1", "数据库指南", 30), result("db_2", "部署说明", 20)]
    assert [r.id for r in rank_and_dedupe(results, 5)] == ["db_1", "db_2"]
    assert title_key("数据库  指南") == title_key("数据库 指南")
