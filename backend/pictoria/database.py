"""SQLAlchemy engine, session factory and declarative base."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from pictoria.config import get_settings


class Base(DeclarativeBase):
    """Declarative base class for all SQLAlchemy models."""


def build_engine(database_url: str) -> Engine:
    """Engine for ``DATABASE_URL``; SQLite files get their directory created.

    Request sessions may be opened and used on different worker threads, so
    SQLite connections are not pinned to their creating thread.
    """
    url = make_url(database_url)
    connect_args: dict[str, object] = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
