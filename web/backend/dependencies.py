#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.deletion import DeletionOrchestrator
from core.matchmaking import MatchmakingService
from database.repositories import TutorCandidateRepository, TutorStatusTypeRepository
from database.store import SqlAlchemyRecordStore
from .config import get_config

DEFAULT_ACTOR = "system"


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self):
        config = get_config()
        self.engine = create_engine(
            config.database.url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=config.database.pool_size,
            max_overflow=config.database.max_overflow
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


# Global database manager instance
_db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Yields:
        Session: Database session that will be automatically closed.
    """
    yield from _db_manager.get_session()


def get_record_store(db: Session = Depends(get_db)):
    """
    Request-scoped RecordStore. Commits when the handler returns,
    rolls back when it raises.
    """
    store = SqlAlchemyRecordStore(db)
    try:
        yield store
        db.commit()
    except Exception:
        db.rollback()
        raise


def get_matchmaking_service(store=Depends(get_record_store)) -> MatchmakingService:
    return MatchmakingService(TutorCandidateRepository(store), get_config().matchmaking)


def get_deletion_orchestrator(store=Depends(get_record_store)) -> DeletionOrchestrator:
    return DeletionOrchestrator(store, get_config().deletion)


def get_status_type_repository(store=Depends(get_record_store)) -> TutorStatusTypeRepository:
    return TutorStatusTypeRepository(store)


def get_current_actor(x_actor_id: Optional[str] = Header(default=None)) -> str:
    """Actor stamped on audit records. Authentication happens upstream."""
    return x_actor_id or DEFAULT_ACTOR
