# tests/conftest.py
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker as _sessionmaker
from sqlalchemy.pool import StaticPool

from thepass.core.config import settings

# -----------------------------------------------------------------------------
# IMPORTANT: all ORM tables must be registered in metadata before create_all
# (FK targets like profiles / workflow_assignments).
# -----------------------------------------------------------------------------
from thepass.models.registry import Base


def _test_database_url() -> str:
    """
    settings.test_database_url: in-memory SQLite by default,
    point it at a throwaway Postgres database to run against the real store.
    """
    return settings.test_database_url


@pytest.fixture()
def engine():
    url = _test_database_url()

    if url.startswith("sqlite"):
        # one shared connection so every thread (TestClient) sees the same in-memory DB
        eng = create_engine(
            url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(eng, "connect")
        def _enable_fks(dbapi_connection, _record):
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

    else:
        eng = create_engine(url, future=True)

    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(eng)
        eng.dispose()


@pytest.fixture()
def db(engine):
    """
    Fresh schema per test (see `engine`), one session per test.
    Tests call flush()/commit() themselves where they need to observe
    IntegrityError or mimic a committed request.
    """
    Session = _sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def api_db(db):
    """Session shared by the test body and the app (get_db override)."""
    return db


@pytest.fixture()
def client(api_db):
    from fastapi.testclient import TestClient

    from thepass.core.db import get_db
    from thepass.main import app

    def _override_get_db():
        yield api_db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
