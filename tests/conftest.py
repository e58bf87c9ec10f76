"""
Test configuration - in-memory database, pinned clock, API client.

Every test gets its own SQLite database; nothing touches agenda.db.
"""

import os
from datetime import datetime

# Must be set before agenda.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda import models  # noqa: F401
from agenda.database import Base, get_db
from agenda.domain.scheduling.clock import FixedClock
from agenda.domain.scheduling.repository import KIND_CLIENTS, SqlRecordStore
from agenda.domain.scheduling.reveal import RevealWindow
from agenda.main import app

# "Now" for every test: Saturday 1 June 2024, 09:00 local
NOW = datetime(2024, 6, 1, 9, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store(db):
    return SqlRecordStore(db)


@pytest.fixture
def client_record(store):
    """A saved client to book appointments for"""
    return store.add(KIND_CLIENTS, {"name": "María López", "phone": "5551234567"})


@pytest.fixture
def api(engine, clock):
    """TestClient over the app, wired to the per-test database and clock"""
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.clock = clock
    app.state.reveal_window = RevealWindow(page_size=2)
    # Not used as a context manager: the lifespan would create tables in the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
