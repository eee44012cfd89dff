"""Uniform access to the in-memory seed corpus and the persisted document table.

The persisted side is optional: when no session factory is configured, or the
database cannot be reached, reads degrade to the memory corpus alone.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from blueprint_rag.documents import (
    DEFAULT_DOCUMENT_TYPE,
    SUPPORTED_PLATFORMS,
    Document,
    DocumentCounts,
)
from blueprint_rag.exceptions import InvalidDocumentError, StorageError, StoreUnavailableError
from blueprint_rag.storage.database import session_scope
from blueprint_rag.storage.models import RagDocument
from blueprint_rag.storage.seed import build_seed_documents

logger = logging.getLogger(__name__)

PERSISTED_ID_PREFIX = "db_"
OVERFETCH_FACTOR = 2


def parse_keywords(value: Any) -> List[str]:
    """Normalize stored keywords into a list of strings.

    Accepts a JSON-encoded list, a comma-separated string, a list/tuple, or None.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(k).strip() for k in value if str(k).strip()]
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        try:
            decoded = json.loads(raw)
        except ValueError:
            return [p.strip() for p in raw.split(",") if p.strip()]
        if isinstance(decoded, list):
            return [str(k).strip() for k in decoded if str(k).strip()]
        if isinstance(decoded, str):
            return [p.strip() for p in decoded.split(",") if p.strip()]
        return []
    return []


def _aware(ts: Optional[datetime]) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if ts is None:
        return datetime.now(timezone.utc)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def row_to_document(row: RagDocument) -> Document:
    created = _aware(row.created_at)
    return Document(
        id=f"{PERSISTED_ID_PREFIX}{row.id}",
        title=row.title,
        content=row.content,
        platform=row.platform,
        document_type=row.document_type or DEFAULT_DOCUMENT_TYPE,
        keywords=parse_keywords(row.keywords),
        created_at=created,
        updated_at=_aware(row.updated_at) if row.updated_at is not None else created,
        origin="persisted",
    )


def validate_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate an ingestion payload and return normalized column values.

    Accepts both camelCase (``documentType``, ``uploadedBy``) and snake_case keys.
    Raises ``InvalidDocumentError`` listing every missing or invalid field.
    """
    title = str(payload.get("title") or "").strip()
    content = str(payload.get("content") or "").strip()
    platform = str(payload.get("platform") or "").strip().lower()

    required = (("title", title), ("content", content), ("platform", platform))
    missing = [name for name, val in required if not val]
    if missing:
        raise InvalidDocumentError(
            f"Missing required document fields: {', '.join(missing)}", fields=missing
        )
    if platform not in SUPPORTED_PLATFORMS:
        raise InvalidDocumentError(
            f"Unsupported platform '{platform}'. Supported: {', '.join(SUPPORTED_PLATFORMS)}",
            fields=["platform"],
        )

    doc_type = payload.get("documentType", payload.get("document_type"))
    uploaded_by = payload.get("uploadedBy", payload.get("uploaded_by"))
    return {
        "title": title,
        "content": content,
        "platform": platform,
        "document_type": str(doc_type).strip() if doc_type else DEFAULT_DOCUMENT_TYPE,
        "keywords": parse_keywords(payload.get("keywords")),
        "uploaded_by": str(uploaded_by) if uploaded_by is not None else None,
    }


class DocumentStore:
    """Document Store Adapter over the seed corpus and an optional SQL table."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker[Session]] = None,
        *,
        memory_documents: Optional[Mapping[str, Sequence[Document]]] = None,
    ) -> None:
        self._factory = session_factory
        seed = memory_documents if memory_documents is not None else build_seed_documents()
        self._memory: Dict[str, tuple[Document, ...]] = {
            platform.lower(): tuple(docs) for platform, docs in seed.items()
        }

    @property
    def has_persisted_store(self) -> bool:
        return self._factory is not None

    # ----- Memory corpus -----

    def get_memory_documents(self, platform: Optional[str] = None) -> List[Document]:
        if platform:
            return list(self._memory.get(platform.lower(), ()))
        out: List[Document] = []
        for docs in self._memory.values():
            out.extend(docs)
        return out

    # ----- Persisted corpus -----

    def _select_persisted(
        self, terms: Sequence[str], platform: Optional[str], limit: int
    ) -> List[Document]:
        if self._factory is None:
            return []
        stmt = select(RagDocument).where(RagDocument.is_active.is_(True))
        if platform:
            stmt = stmt.where(RagDocument.platform == platform.lower())
        conditions = []
        for term in terms:
            pattern = _like_pattern(term)
            conditions.append(
                or_(
                    RagDocument.title.ilike(pattern, escape="\\"),
                    RagDocument.content.ilike(pattern, escape="\\"),
                    RagDocument.keywords.ilike(pattern, escape="\\"),
                )
            )
        if conditions:
            stmt = stmt.where(or_(*conditions))
        stmt = stmt.order_by(
            RagDocument.updated_at.desc(), RagDocument.created_at.desc(), RagDocument.id.desc()
        ).limit(max(0, int(limit)) * OVERFETCH_FACTOR)
        try:
            with session_scope(self._factory) as session:
                rows = session.scalars(stmt).all()
                return [row_to_document(r) for r in rows]
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            # Malformed column values surface as ValueError/TypeError while rows load
            raise StoreUnavailableError(f"Persisted document query failed: {exc}") from exc

    def query_persisted(
        self, terms: Sequence[str], platform: Optional[str] = None, limit: int = 5
    ) -> List[Document]:
        """Fetch up to ``2 * limit`` persisted candidates matching any term, newest first.

        Never raises for store failures; returns an empty list and logs a warning.
        """
        if limit <= 0:
            return []
        try:
            return self._select_persisted(terms, platform, limit)
        except StoreUnavailableError as exc:
            logger.warning("Persisted store unavailable, using in-memory documents only: %s", exc)
            return []

    def insert_document(self, payload: Mapping[str, Any]) -> Document:
        """Validate and persist a document, returning it with its namespaced id."""
        values = validate_payload(payload)
        if self._factory is None:
            raise StorageError("No persisted document store is configured")
        row = RagDocument(
            title=values["title"],
            content=values["content"],
            platform=values["platform"],
            document_type=values["document_type"],
            keywords=json.dumps(values["keywords"]),
            uploaded_by=values["uploaded_by"],
            is_active=True,
        )
        try:
            with session_scope(self._factory) as session:
                session.add(row)
                session.flush()
                document = row_to_document(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to persist document '{values['title']}': {exc}") from exc
        logger.info("Document added: %s (%s)", document.title, document.id)
        return document

    def ping(self) -> None:
        """Check the persisted store is reachable. Raises ``StoreUnavailableError``."""
        if self._factory is None:
            raise StoreUnavailableError("No persisted document store is configured")
        try:
            with session_scope(self._factory) as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Persisted store ping failed: {exc}") from exc

    def _persisted_counts(self) -> Dict[str, int]:
        if self._factory is None:
            return {}
        stmt = (
            select(RagDocument.platform, func.count(RagDocument.id))
            .where(RagDocument.is_active.is_(True))
            .group_by(RagDocument.platform)
        )
        try:
            with session_scope(self._factory) as session:
                return {str(p): int(c) for p, c in session.execute(stmt).all()}
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Persisted document count failed: {exc}") from exc

    def count_documents(self) -> DocumentCounts:
        per_platform: Dict[str, int] = {p: 0 for p in SUPPORTED_PLATFORMS}
        total_memory = 0
        for platform, docs in self._memory.items():
            per_platform[platform] = per_platform.get(platform, 0) + len(docs)
            total_memory += len(docs)

        try:
            persisted = self._persisted_counts()
        except StoreUnavailableError as exc:
            logger.warning("Persisted store unavailable, counting in-memory documents only: %s", exc)
            persisted = {}
        for platform, count in persisted.items():
            per_platform[platform] = per_platform.get(platform, 0) + count

        return DocumentCounts(
            per_platform=per_platform,
            total_memory=total_memory,
            total_persisted=sum(persisted.values()),
        )
