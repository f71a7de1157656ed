"""
Shared test fixtures.

Tests run against TEST_DATABASE_URL, a SQLite file by default.
Point it at a PostgreSQL database to exercise real row locks.
Tables are created before and dropped after every test, so each
test starts from an empty ledger.
"""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pace_ledger.main import app
from pace_ledger.models.base import Base, get_db


# A file rather than :memory: so a second session sees the same data
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args=(
        {"check_same_thread": False}
        if TEST_DATABASE_URL.startswith("sqlite")
        else {}
    ),
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """The session services under test write through."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def other_session():
    """
    A second, independent session: another request or worker racing
    the one using db_session. Anything it loads stays in its own
    identity map until it re-reads.
    """
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    A test client whose requests all share db_session, so tests can
    inspect or sabotage the session the routers commit.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
