"""SQLModel engine and session helpers for the report store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine

from weather_intel.core.config import settings


def _connect_args(url: str) -> dict[str, object]:
    # FastAPI runs sync endpoints on a thread pool; SQLite objects must be shareable
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)


def init_db() -> None:
    # Import for the side effect of registering the tables on SQLModel.metadata
    from weather_intel import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session() -> Iterator[Session]:
    """Open a session for scripts and services running outside a request."""
    session = Session(engine)
    try:
        yield session
    finally:
        session.close()


__all__ = ["engine", "init_db", "get_session"]
