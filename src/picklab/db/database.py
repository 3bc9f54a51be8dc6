"""Database helpers for PickLab."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from picklab.config import get_settings
from picklab.db.models import Base

settings = get_settings()
_url = str(settings.database_url)
# Slip and tier I/O runs in worker threads via asyncio.to_thread.
_connect_args = {"check_same_thread": False} if _url.startswith("sqlite") else {}
engine = create_engine(_url, future=True, echo=False, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)

__all__ = ["engine", "SessionLocal", "get_session", "init_db"]


@contextmanager
def get_session(factory: sessionmaker | None = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    Base.metadata.create_all(engine)
