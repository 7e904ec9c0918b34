"""SQLAlchemy engine and session factory."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_settings
from ..utils.logging import get_logger

LOGGER = get_logger("db.database")


class Base(DeclarativeBase):
    pass


def make_engine(url: Optional[str] = None) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""

    url = url or get_settings().database_url
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    LOGGER.info("creating_engine dialect=%s", url.split(":", 1)[0])
    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables. Schema migrations are not managed here."""

    from . import tables  # noqa: F401  registers the mapped classes

    Base.metadata.create_all(engine)
