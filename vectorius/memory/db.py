"""Database engine and sessions for attachment metadata.

Two tables live here: ``chat_attachments`` (one row per uploaded image,
soft-deleted by the cleanup job) and ``image_extractions`` (the cached vision
text, at most one row per attachment). The URL comes from ``VECTORIUS_DB``;
without it a local SQLite file is used.
"""
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base

DEFAULT_DATABASE_URL = "sqlite:///./vectorius.db"


def make_engine(url: str) -> Engine:
    """Engine for *url*; SQLite connections may be shared across threads."""
    # Chat turns and uploads run in FastAPI's threadpool.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, echo=False)


_engine = make_engine(os.getenv("VECTORIUS_DB", DEFAULT_DATABASE_URL))

# One session per thread, closed with ``SessionLocal.remove()``.
SessionLocal = scoped_session(
    sessionmaker(autocommit=False, autoflush=False, bind=_engine)
)

Base = declarative_base()


def init_db() -> None:
    """Create ``chat_attachments`` and ``image_extractions`` if missing."""
    from . import models  # noqa: F401  (registers the tables on Base)

    Base.metadata.create_all(bind=_engine)


def reset_db() -> None:
    """Drop and recreate both tables, discarding thread-local sessions."""
    from . import models  # noqa: F401

    SessionLocal.remove()
    Base.metadata.drop_all(bind=_engine)
    Base.metadata.create_all(bind=_engine)
