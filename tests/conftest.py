"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and points the
application at a throwaway SQLite database before anything imports settings.
"""

import os
import sys
import tempfile
from pathlib import Path

_db_dir = tempfile.mkdtemp(prefix="mealsync-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(_db_dir) / 'app.db'}")
os.environ.setdefault("ENVIRONMENT", "testing")

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from domain.models import Base


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """
    File-backed SQLite engine with a fresh schema per test.

    A file (not :memory:) so that the propagation fan-out can open one
    connection per worker thread.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'mealsync.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
        future=True,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, future=True)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """
    Database session for integration tests.

    Work done through other sessions (propagation workers) is only visible
    here after ``db_session.expire_all()``.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
