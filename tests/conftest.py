import os

# Must be set before juice_bot.db / juice_bot.config are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import juice_bot.config as config_mod
import juice_bot.db as db
from juice_bot.directory_cache import directory_cache
from juice_bot.main import app
from juice_bot.models import Base
from juice_bot.parsing import AbbreviationResolver, Client, Directory, MessageParser
from juice_bot.seed_directory import DEMO_ABBREVIATIONS, DEMO_CLIENTS, seed_demo_directory

# Test admin credentials
TEST_ADMIN_USERNAME = "testadmin"
TEST_ADMIN_PASSWORD = "testpassword123"


@pytest.fixture
def directory():
    """The demo directory, built in memory (no database)."""
    rows = [
        (abbreviation, client_id, name)
        for client_id, name, abbreviations in DEMO_ABBREVIATIONS
        for abbreviation in abbreviations
    ]
    clients = [
        Client(id=cid, name=name, zone=zone, accounting_mode=mode, default_format=default)
        for cid, name, zone, mode, default in DEMO_CLIENTS
    ]
    return Directory.build(rows, clients=clients)


@pytest.fixture
def resolver(directory):
    return AbbreviationResolver(directory)


@pytest.fixture
def parser(directory):
    return MessageParser(directory)


@pytest.fixture
def session_factory(monkeypatch):
    """In-memory SQLite shared by all connections, patched into juice_bot.db."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", TestingSessionLocal)

    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    """Session on a database seeded with the demo directory and products."""
    session = session_factory()
    seed_demo_directory(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session, session_factory, monkeypatch):
    """Shared FastAPI TestClient on the seeded in-memory database.

    The directory cache is loaded from that database by the app lifespan.
    """
    monkeypatch.setattr(config_mod, "ADMIN_USERNAME", TEST_ADMIN_USERNAME)
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", TEST_ADMIN_PASSWORD)

    def override_get_db():
        db_sess = session_factory()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    directory_cache.clear()


@pytest.fixture
def admin_auth():
    """Returns HTTP Basic Auth tuple for admin endpoints."""
    return (TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD)
