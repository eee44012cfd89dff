import asyncio
import logging
import time
from typing import Any, List

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from blueprint_rag.config import SearchConfig
from blueprint_rag.documents import Document
from blueprint_rag.exceptions import InvalidDocumentError, SearchError
from blueprint_rag.search.cache import SearchCache
from blueprint_rag.search.service import RetrievalService
from blueprint_rag.storage.database import session_scope
from blueprint_rag.storage.document_store import DocumentStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def ids(results: List[Any]) -> List[str]:
    return [r.id for r in results]


# ---------- Scenarios over the seed corpus ----------


@pytest.mark.asyncio
async def test_database_query_finds_replit_document(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    results = await service.search_documents("database", "replit", 5)

    assert "repl_2" in ids(results)
    hit = next(r for r in results if r.id == "repl_2")
    assert hit.relevance_score > 0
    assert "database" in hit.snippet.lower()
    assert hit.source == "memory"


@pytest.mark.asyncio
async def test_platform_filter_excludes_other_platforms(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    results = await service.search_documents("database", "lovable", 5)
    assert "repl_2" not in ids(results)
    assert all(r.document.platform == "lovable" for r in results)


@pytest.mark.asyncio
async def test_unknown_term_returns_empty_list(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    assert await service.search_documents("xyzzy_nonexistent_term", None, 10) == []


@pytest.mark.asyncio
async def test_short_word_query_returns_empty_list(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    assert await service.search_documents("ai", None, 10) == []


@pytest.mark.asyncio
async def test_search_is_deterministic(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    first = await service.search_documents("ai code development", None, 10)
    service.clear_caches()
    second = await service.search_documents("ai code development", None, 10)

    assert first
    assert [(r.id, r.relevance_score, r.snippet) for r in first] == [
        (r.id, r.relevance_score, r.snippet) for r in second
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, 1, 2, 3, 10])
async def test_limit_is_respected(memory_store: DocumentStore, limit: int) -> None:
    service = RetrievalService(memory_store)
    results = await service.search_documents("development collaboration code", None, limit)
    assert len(results) <= limit


@pytest.mark.asyncio
async def test_results_sorted_by_score(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    results = await service.search_documents("development collaboration code", None, 10)
    scores = [r.relevance_score for r in results]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_duplicate_titles_never_both_returned() -> None:
    docs = {
        "replit": [
            Document(id="m1", title="Deploy Guide", content="deploy now", platform="replit"),
            Document(id="m2", title="deploy-guide!", content="deploy deploy deploy", platform="replit"),
        ]
    }
    service = RetrievalService(DocumentStore(None, memory_documents=docs))
    results = await service.search_documents("deploy", None, 5)
    assert ids(results) == ["m1"]


# ---------- Cache behaviour ----------


@pytest.mark.asyncio
async def test_cache_hit_then_recompute_after_ttl(
    memory_store: DocumentStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    clock = FakeClock()
    service = RetrievalService(memory_store, cache=SearchCache(ttl_seconds=300, clock=clock))

    calls = {"n": 0}
    original = memory_store.get_memory_documents

    def counting(platform=None):
        calls["n"] += 1
        return original(platform)

    monkeypatch.setattr(memory_store, "get_memory_documents", counting)

    first = await service.search_documents("database", "replit", 5)
    clock.now += 100
    again = await service.search_documents("database", "replit", 5)
    assert calls["n"] == 1
    assert ids(again) == ids(first)

    clock.now += 201
    await service.search_documents("database", "replit", 5)
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_insert_then_search_sees_new_document(store: DocumentStore) -> None:
    service = RetrievalService(store)
    assert await service.search_documents("zephyrquark", "bolt", 5) == []
    assert service.cache.size == 1

    added = await service.add_document(
        {"title": "Zephyrquark deploys", "content": "Deploying zephyrquark on Bolt.", "platform": "bolt"}
    )
    results = await service.search_documents("zephyrquark", "bolt", 5)

    assert ids(results) == [added.id]
    assert results[0].source == "database"


@pytest.mark.asyncio
async def test_invalid_document_does_not_touch_cache(store: DocumentStore) -> None:
    service = RetrievalService(store)
    await service.search_documents("database", None, 5)
    generation = service.cache.generation

    with pytest.raises(InvalidDocumentError):
        await service.add_document({"title": "No content", "platform": "replit"})

    assert service.cache.size == 1
    assert service.cache.generation == generation


# ---------- Hybrid corpus ----------


@pytest.mark.asyncio
async def test_memory_duplicate_wins_over_persisted(store: DocumentStore) -> None:
    service = RetrievalService(store)
    await service.add_document(
        {
            "title": "Database integration support!",
            "content": "database " * 40,
            "platform": "replit",
        }
    )
    results = await service.search_documents("database", "replit", 5)
    matching = [r for r in results if r.title.lower().startswith("database integration")]
    assert len(matching) == 1
    assert matching[0].id == "repl_2"


@pytest.mark.asyncio
async def test_persisted_results_are_merged_and_ranked(store: DocumentStore) -> None:
    service = RetrievalService(store)
    added = await service.add_document(
        {
            "title": "Replit Database Backups",
            "content": "Schedule database backups for your Replit database.",
            "platform": "replit",
            "keywords": ["database", "backups"],
        }
    )
    results = await service.search_documents("database", "replit", 5)
    assert set(ids(results)) == {"repl_2", added.id}
    assert ids(results)[0] == "repl_2"


@pytest.mark.asyncio
async def test_search_degrades_when_store_unreachable(
    broken_factory: sessionmaker[Session],
) -> None:
    service = RetrievalService(DocumentStore(broken_factory))
    results = await service.search_documents("database", None, 5)
    assert "repl_2" in ids(results)
    assert all(r.source == "memory" for r in results)


@pytest.mark.asyncio
async def test_slow_store_times_out_to_memory_results(
    store: DocumentStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    def slow_query(terms, platform=None, limit=5):
        time.sleep(0.3)
        return []

    monkeypatch.setattr(store, "query_persisted", slow_query)
    service = RetrievalService(store, config=SearchConfig(persisted_timeout_seconds=0.05))

    started = asyncio.get_running_loop().time()
    results = await service.search_documents("database", "replit", 5)
    elapsed = asyncio.get_running_loop().time() - started

    assert "repl_2" in ids(results)
    assert elapsed < 0.3


# ---------- Payloads, stats and helpers ----------


@pytest.mark.asyncio
async def test_search_payload_shape(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    payload = await service.search_payload("database", "replit", 5)

    assert payload["query"] == "database"
    assert payload["platform"] == "replit"
    assert payload["totalFound"] == len(payload["results"])
    first = payload["results"][0]
    assert first["id"] == "repl_2"
    assert {"relevanceScore", "snippet", "source", "documentType", "keywords"} <= set(first)


@pytest.mark.asyncio
async def test_document_stats_and_sync(store: DocumentStore) -> None:
    service = RetrievalService(store)
    await service.add_document({"title": "Bolt tips", "content": "Tips.", "platform": "bolt"})
    await service.search_documents("tips", None, 5)

    stats = await service.get_document_stats()
    assert stats.total_memory == 6
    assert stats.total_persisted == 1
    assert stats.cache_size == 1
    assert stats.last_sync is None

    assert await service.sync_persisted() is True
    payload = (await service.get_document_stats()).to_dict()
    assert set(payload) == {"perPlatform", "totalMemory", "totalPersisted", "cacheSize", "lastSync"}
    assert payload["perPlatform"]["bolt"] == 2
    assert payload["lastSync"] is not None


@pytest.mark.asyncio
async def test_sync_fails_softly_when_store_unreachable(
    broken_factory: sessionmaker[Session],
) -> None:
    service = RetrievalService(DocumentStore(broken_factory))
    assert await service.sync_persisted() is False
    assert service.last_sync is None


def test_platform_documents_and_recommendations(memory_store: DocumentStore) -> None:
    service = RetrievalService(memory_store)
    assert [d.id for d in service.get_platform_documents("replit")] == ["repl_1", "repl_2"]
    with pytest.raises(SearchError):
        service.get_platform_documents("vscode")

    recs = service.get_contextual_recommendations("postgresql setup", "replit")
    assert recs == [{"title": "Database Integration Support", "type": "database", "relevance": "high"}]
    assert service.get_contextual_recommendations("postgresql", "vscode") == []


@pytest.mark.asyncio
async def test_malformed_persisted_row_falls_back_to_memory(
    store: DocumentStore, session_factory: sessionmaker[Session]
) -> None:
    with session_scope(session_factory) as session:
        session.execute(
            text(
                "INSERT INTO rag_documents "
                "(title, content, platform, document_type, keywords, is_active, created_at, updated_at) "
                "VALUES ('Broken Database Row', 'database', 'replit', 'document', '[]', 1, "
                "'not-a-date', 'not-a-date')"
            )
        )
    service = RetrievalService(store)
    results = await service.search_documents("database", "replit", 5)
    assert "repl_2" in ids(results)
    assert all(r.source == "memory" for r in results)


@pytest.mark.asyncio
async def test_unexpected_store_error_falls_back_to_memory(
    store: DocumentStore, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def exploding_query(terms, platform=None, limit=5):
        raise RuntimeError("driver bug")

    monkeypatch.setattr(store, "query_persisted", exploding_query)
    service = RetrievalService(store)
    with caplog.at_level(logging.WARNING, logger="blueprint_rag"):
        results = await service.search_documents("database", "replit", 5)
    assert "repl_2" in ids(results)
    assert "in-memory documents only" in caplog.text


@pytest.mark.asyncio
async def test_whitespace_variants_score_the_same(memory_store: DocumentStore) -> None:
    fresh = await RetrievalService(memory_store).search_documents("database integration", "replit", 5)

    service = RetrievalService(memory_store)
    spaced = await service.search_documents("database  integration", "replit", 5)
    cached = await service.search_documents("database integration", "replit", 5)

    scores = [r.relevance_score for r in fresh]
    assert fresh[0].id == "repl_2"
    assert [r.relevance_score for r in spaced] == scores
    assert [r.relevance_score for r in cached] == scores
