"""Database engine and session helpers."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from task_db.models import Base

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///task_bundler.db"

_engines: dict[str, Engine] = {}


def resolve_database_url(database_url: str | None = None) -> str:
    """Return the explicit URL, then DATABASE_URL, then the local SQLite default."""
    if database_url:
        return database_url
    configured = os.environ.get("DATABASE_URL", "").strip()
    return configured or DEFAULT_DATABASE_URL


def get_engine(database_url: str | None = None) -> Engine:
    """Create (once per URL) and return a SQLAlchemy engine."""
    url = resolve_database_url(database_url)
    engine = _engines.get(url)
    if engine is None:
        logger.debug("Creating engine for %s", url.split("@")[-1])
        engine = create_engine(url)
        _engines[url] = engine
    return engine


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database schema ensured")


@contextmanager
def get_session(engine: Engine | None = None) -> Iterator[Session]:
    """Context manager yielding a session; uncommitted work is rolled back on error."""
    session = Session(engine or get_engine(), expire_on_commit=False)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
