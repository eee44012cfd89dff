from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from blueprint_rag.storage.database import get_engine, init_db, make_session_factory
from blueprint_rag.storage.document_store import DocumentStore


@pytest.fixture()
def session_factory(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    engine = get_engine(f"sqlite:///{tmp_path / 'rag.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def broken_factory(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    # Parent directory does not exist, so every connection attempt fails
    engine = get_engine(f"sqlite:///{tmp_path / 'missing' / 'nested' / 'rag.db'}")
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def store(session_factory: sessionmaker[Session]) -> DocumentStore:
    return DocumentStore(session_factory)


@pytest.fixture()
def memory_store() -> DocumentStore:
    return DocumentStore(None)
