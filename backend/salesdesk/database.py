"""Database session helpers for the durable key-value medium."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()
DATABASE_URL = settings.get_database_url()

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    future=True,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
Base = declarative_base()


def init_db() -> None:
    """Create the storage table on the current engine."""

    from . import models  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(bind=engine)


@contextmanager
def override_db(url: str) -> Iterator[None]:
    """Used mainly in tests to temporarily point to another database."""

    global engine, SessionLocal
    old_engine = engine
    old_session = SessionLocal
    try:
        engine = create_engine(url, pool_pre_ping=True, future=True)
        SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
        yield
    finally:
        engine.dispose()
        engine = old_engine
        SessionLocal = old_session
