# thepass/core/db.py
from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from thepass.core.config import settings


engine = create_engine(settings.database_url, pool_pre_ping=True, future=True)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request.

    Routes commit explicitly; anything left uncommitted is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
