"""Retrieval facade: the only interface the rest of the application touches.

A search call runs: cache check -> term extraction -> concurrent memory and
persisted fetch -> scoring and snippets -> rank/dedupe -> cache put.
Read-path failures never surface to callers; they degrade to the in-memory
corpus with a logged warning.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from blueprint_rag.config import SearchConfig, Settings
from blueprint_rag.documents import Document, is_supported_platform, utcnow
from blueprint_rag.exceptions import SearchError, StorageError, StoreUnavailableError
from blueprint_rag.search.base_search import BaseSearch, ResultSource, ScoredResult
from blueprint_rag.search.cache import SearchCache, make_key
from blueprint_rag.search.ranking import rank_and_dedupe
from blueprint_rag.search.scoring import score_document
from blueprint_rag.search.snippets import generate_snippet
from blueprint_rag.search.terms import extract_terms, normalize_query
from blueprint_rag.storage.database import get_engine, init_db, make_session_factory
from blueprint_rag.storage.document_store import DocumentStore

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 3


@dataclass(slots=True)
class DocumentStats:
    """Snapshot returned to the stats/monitoring surface."""

    per_platform: Dict[str, int] = field(default_factory=dict)
    total_memory: int = 0
    total_persisted: int = 0
    cache_size: int = 0
    last_sync: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "perPlatform": dict(self.per_platform),
            "totalMemory": self.total_memory,
            "totalPersisted": self.total_persisted,
            "cacheSize": self.cache_size,
            "lastSync": self.last_sync.isoformat() if self.last_sync else None,
        }


class RetrievalService(BaseSearch):
    """Hybrid keyword search over the seed corpus and the persisted store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        cache: Optional[SearchCache] = None,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or SearchConfig()
        self.cache = cache or SearchCache(ttl_seconds=self.config.cache_ttl_seconds)
        self.last_sync: Optional[datetime] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> RetrievalService:
        """Build a service from settings, wiring the persisted store when enabled.

        An unreachable database at startup is logged and tolerated; searches
        keep working on the seed corpus until it comes back.
        """
        factory = None
        db = settings.database
        if db.enabled:
            engine = get_engine(db.url, echo=db.echo)
            try:
                init_db(engine)
            except SQLAlchemyError as exc:
                logger.warning("Could not initialize document tables: %s", exc)
            factory = make_session_factory(engine)
        service = cls(DocumentStore(factory), config=settings.search)
        logger.info(
            "Retrieval service ready (persisted store %s)",
            "enabled" if factory is not None else "disabled",
        )
        return service

    # ----- Search -----

    def _score(
        self, docs: Sequence[Document], terms: Sequence[str], query: str, source: ResultSource
    ) -> List[ScoredResult]:
        out: List[ScoredResult] = []
        for doc in docs:
            score = score_document(doc, terms, query)
            if score <= 0:
                continue
            snippet = generate_snippet(
                doc.content,
                terms,
                self.config.snippet_max_length,
                window_words=self.config.snippet_window_words,
            )
            out.append(ScoredResult(document=doc, relevance_score=score, snippet=snippet, source=source))
        return out

    async def _fetch_memory(self, platform: Optional[str]) -> List[Document]:
        return self.store.get_memory_documents(platform)

    async def _fetch_persisted(
        self, terms: Sequence[str], platform: Optional[str], limit: int
    ) -> List[Document]:
        if not self.store.has_persisted_store:
            return []
        timeout = self.config.persisted_timeout_seconds
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.store.query_persisted, list(terms), platform, limit),
                timeout=timeout if timeout and timeout > 0 else None,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Persisted store query exceeded %.2fs, using in-memory documents only", timeout
            )
        except StorageError as exc:
            logger.warning("Persisted store query failed, using in-memory documents only: %s", exc)
        except Exception:
            logger.warning(
                "Unexpected persisted store error, using in-memory documents only", exc_info=True
            )
        return []

    async def search_documents(
        self, query: str, platform: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ScoredResult]:
        """Return up to ``limit`` ranked results for ``query``, optionally scoped to a platform."""
        limit = self.config.default_limit if limit is None else int(limit)
        if limit <= 0:
            return []
        platform = (platform or "").strip().lower() or None

        key = make_key(query, platform, limit)
        entry = self.cache.get(key)
        if entry is not None:
            logger.debug("Search cache hit for %r", key)
            return list(entry.results)
        logger.debug("Search cache miss for %r", key)
        generation = self.cache.generation

        terms = extract_terms(query, max_terms=self.config.max_terms)
        if not terms:
            return []

        memory_docs, persisted_docs = await asyncio.gather(
            self._fetch_memory(platform),
            self._fetch_persisted(terms, platform, limit),
        )
        # Scored on the same normalized form the cache key uses
        phrase = normalize_query(query)
        # Memory results go first so they win title-duplicate ties
        scored = self._score(memory_docs, terms, phrase, "memory")
        scored.extend(self._score(persisted_docs, terms, phrase, "database"))
        ranked = rank_and_dedupe(scored, limit)

        self.cache.put(key, ranked, generation)
        logger.debug(
            "Found %d documents for %r: %d memory + %d database candidates",
            len(ranked),
            query,
            len(memory_docs),
            len(persisted_docs),
        )
        return list(ranked)

    async def search_payload(
        self, query: str, platform: Optional[str] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Search and render the JSON shape used by HTTP-style callers."""
        results = await self.search_documents(query, platform, limit)
        return {
            "results": [r.to_dict() for r in results],
            "totalFound": len(results),
            "query": query,
            "platform": platform,
        }

    # ----- Writes -----

    async def add_document(self, payload: Mapping[str, Any]) -> Document:
        """Persist a document, then invalidate the search cache.

        Invalidation happens only after the write commits, so no search can
        observe an empty cache while the new document is still invisible.
        """
        document = await asyncio.to_thread(self.store.insert_document, dict(payload))
        self.cache.invalidate_all()
        return document

    def clear_caches(self) -> None:
        self.cache.invalidate_all()
        logger.info("Search caches cleared")

    # ----- Stats and sync -----

    async def get_document_stats(self) -> DocumentStats:
        counts = await asyncio.to_thread(self.store.count_documents)
        return DocumentStats(
            per_platform=counts.per_platform,
            total_memory=counts.total_memory,
            total_persisted=counts.total_persisted,
            cache_size=self.cache.size,
            last_sync=self.last_sync,
        )

    async def sync_persisted(self) -> bool:
        """Check the persisted store and record the sync time on success."""
        if not self.store.has_persisted_store:
            return False
        try:
            await asyncio.to_thread(self.store.ping)
        except StoreUnavailableError as exc:
            logger.warning("Database unavailable, using in-memory documents only: %s", exc)
            return False
        self.last_sync = utcnow()
        purged = self.cache.purge_expired()
        logger.info("Persisted store synchronized (%d expired cache entries purged)", purged)
        return True

    # ----- Platform helpers -----

    def get_platform_documents(self, platform: str) -> List[Document]:
        """Return the seed documents for ``platform``."""
        if not is_supported_platform(platform):
            raise SearchError(f"Unsupported platform '{platform}'")
        return self.store.get_memory_documents(platform)

    def get_contextual_recommendations(self, query: str, platform: str) -> List[Dict[str, str]]:
        """Suggest up to three seed documents whose keywords mention a query term."""
        terms = extract_terms(query, max_terms=self.config.max_terms)
        if not terms or not is_supported_platform(platform):
            return []
        out: List[Dict[str, str]] = []
        for doc in self.store.get_memory_documents(platform):
            if any(term in kw.lower() for term in terms for kw in doc.keywords):
                out.append({"title": doc.title, "type": doc.document_type, "relevance": "high"})
        return out[:MAX_RECOMMENDATIONS]
