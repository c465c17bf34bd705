"""Database session helpers built on SQLModel."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from whatsapp_hub.core.config import AppSettings

EngineCacheKey = tuple[str, bool]
_ENGINE_CACHE: dict[EngineCacheKey, Engine] = {}


def create_engine_from_dsn(dsn: str, *, echo: bool = False) -> Engine:
    """Create (or reuse) an engine; in-memory SQLite shares one connection."""

    cache_key: EngineCacheKey = (dsn, echo)
    if cache_key not in _ENGINE_CACHE:
        kwargs: dict[str, Any] = {"echo": echo}
        if dsn.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        _ENGINE_CACHE[cache_key] = create_engine(dsn, **kwargs)
    return _ENGINE_CACHE[cache_key]


def create_engine_from_settings(settings: AppSettings, *, echo: bool = False) -> Engine:
    return create_engine_from_dsn(settings.postgres.dsn, echo=echo)


def init_db(engine: Engine) -> None:
    """Create all tables for the metadata on the provided engine."""

    from . import models  # noqa: F401  Ensures models are imported before metadata usage.

    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Transactional scope for work running outside a request, e.g. background tasks."""

    with Session(engine) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
