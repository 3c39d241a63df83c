"""
API dependencies for dependency injection
"""

from typing import Callable, Generator
from uuid import UUID
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from domain.models import get_db_session, get_session_factory
from services.propagation_service import PropagationEngine


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def get_sessions() -> Callable[[], Session]:
    """Session factory for work that opens its own sessions (one per worker)"""
    return get_session_factory()


def get_propagation_engine(
    session_factory: Callable[[], Session] = Depends(get_sessions),
) -> PropagationEngine:
    return PropagationEngine(session_factory)


def get_actor_id(x_actor_id: UUID = Header(..., alias="X-Actor-Id")) -> UUID:
    """Identity of the editor, recorded as ``updated_by`` on everything written"""
    return x_actor_id
