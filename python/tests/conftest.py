"""Pytest configuration and fixtures for SpeechKarma tests.

Test isolation strategy:
- Tests that use db_session get a nested transaction (savepoint) that rolls back
- The schema is created from the ORM metadata once per session
- DATABASE_URL selects the database; defaults to in-memory SQLite
- Route tests share db_session with the app through a get_db override
- Auth tests use authenticated_client with test JWT tokens
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

# Settings are required at import of the app factory; tests never reach Supabase.
os.environ.setdefault("SPEECHKARMA_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SUPABASE_JWKS_URL", "http://localhost:54321/auth/v1/.well-known/jwks.json")
os.environ.setdefault("SUPABASE_ISSUER", "test-issuer")
os.environ.setdefault("SUPABASE_AUDIENCES", "test-audience")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine, event
from sqlalchemy.orm import Session

from speechkarma.app import create_app
from speechkarma.auth.middleware import AuthMiddleware
from speechkarma.config import clear_settings_cache
from speechkarma.db.engine import create_db_engine
from speechkarma.db.models import Base
from speechkarma.db.session import get_db
from speechkarma.services.profiles import ensure_profile
from tests.helpers import create_test_user_id
from tests.support.test_verifier import MockJwtVerifier
from tests.utils.db import isolated_session


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite run real BEGIN/SAVEPOINT so nested rollbacks work."""

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """Create a database engine and schema for the test session."""
    engine = create_db_engine(os.environ["DATABASE_URL"])
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a database session with savepoint isolation.

    Each test gets a fresh session that is rolled back after the test,
    ensuring no data persists between tests. Service-level commits only
    release the savepoint.
    """
    with isolated_session(engine) as session:
        yield session


def _override_db(app: FastAPI, db_session: Session) -> None:
    def get_test_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = get_test_db


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client without authentication middleware."""
    app = create_app(skip_auth_middleware=True)
    _override_db(app, db_session)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def test_verifier() -> MockJwtVerifier:
    """Provide a test token verifier."""
    return MockJwtVerifier()


@pytest.fixture
def authenticated_app(db_session: Session) -> FastAPI:
    """Provide a FastAPI app with auth middleware using the test verifier.

    Profile bootstrap runs against the test session so bootstrapped rows
    are visible to (and rolled back with) the test.
    """

    def bootstrap_callback(user_id: UUID, claims: dict[str, Any]) -> None:
        ensure_profile(db_session, user_id, claims)

    app = create_app(skip_auth_middleware=True)
    app.add_middleware(
        AuthMiddleware,
        verifier=MockJwtVerifier(),
        bootstrap_callback=bootstrap_callback,
    )
    _override_db(app, db_session)
    return app


@pytest.fixture
def authenticated_client(authenticated_app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client with auth middleware.

    Use auth_headers() to generate valid tokens for requests; requests
    without a header are anonymous.
    """
    with TestClient(authenticated_app) as client:
        yield client


@pytest.fixture
def test_user_id() -> UUID:
    """Generate a random UUID for a test user."""
    return create_test_user_id()


@pytest.fixture
def random_uuid() -> str:
    """Generate a random UUID string for test data."""
    return str(uuid4())


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
