"""
Engine and session factory for the membership records.

Nothing connects at import time. The engine is built from ``DATABASE_URL``
the first time it is needed and rebuilt if that setting changes, so tests
can point the process at ``sqlite:///:memory:`` before touching the store.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core import config

logger = logging.getLogger(__name__)

Base = declarative_base()

_state = {"url": None, "engine": None, "factory": None}


def _build_engine(database_url: str):
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_engine(
            database_url,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    options = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # a single connection keeps the in-memory schema alive across sessions
        options["poolclass"] = StaticPool
    return create_engine(database_url, **options)


def get_engine():
    """The process-wide engine for the current ``DATABASE_URL``."""
    database_url = config.get_database_url()
    if _state["engine"] is not None and _state["url"] == database_url:
        return _state["engine"]

    if _state["engine"] is not None:
        _state["engine"].dispose()
    engine = _build_engine(database_url)
    _state.update(url=database_url, engine=engine, factory=None)
    logger.debug(
        "Database engine ready",
        extra={"context": {"dialect": engine.dialect.name}},
    )
    return engine


def get_sessionmaker():
    engine = get_engine()
    if _state["factory"] is None:
        _state["factory"] = sessionmaker(bind=engine, autoflush=False)
    return _state["factory"]


def SessionLocal():
    """A new Session bound to the current engine."""
    return get_sessionmaker()()


def create_tables():
    from . import base  # noqa: F401  registers the models on Base.metadata

    Base.metadata.create_all(bind=get_engine())


def drop_tables():
    from . import base  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())
