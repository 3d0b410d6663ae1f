"""Database connection and session management."""

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from campaign_intel_etl.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for all models."""


@lru_cache
def get_engine() -> Engine:
    """Create and return SQLAlchemy engine."""
    settings = get_settings()
    engine = create_engine(
        settings.database_url,
        echo=settings.log_level == "DEBUG",
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )
    return engine


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """Create the session factory on first use so imports never need a database."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=get_engine(),
    )


def get_session() -> Session:
    """Get a new database session."""
    return get_session_factory()()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic cleanup."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
