"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from tests.test_constants import TEST_INTERNAL_JOB_TOKEN

# Force a throwaway SQLite test DB when pytest runs; don't inherit from .env (avoids polluting clearfund_dev)
_test_db_path = os.path.join(tempfile.gettempdir(), f"clearfund_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["INTERNAL_JOB_TOKEN"] = TEST_INTERNAL_JOB_TOKEN
os.environ.setdefault("SCORE_UPDATE_MAX_RETRIES", "3")


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from clearfund.main import app

    return TestClient(app)


@pytest.fixture
def db() -> Session:
    """Database session on a freshly created schema. Tables are dropped after each test.

    expire_on_commit=False so reading ids after a commit does not open a new
    transaction (which would hold the SQLite write lock).
    """
    import clearfund.models  # noqa: F401
    from clearfund.db.session import Base, engine

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    session = Session(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Independent sessions on the test schema (one per simulated request)."""
    from clearfund.db.session import engine

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def score_engine(db: Session):
    """TransparencyScoreEngine bound to the test session."""
    from clearfund.services.transparency import TransparencyScoreEngine

    return TransparencyScoreEngine(db)


@pytest.fixture
def organization(db: Session):
    """A persisted organization without a score record."""
    from tests.factories import make_organization

    return make_organization(db, "Umut Vakfı")


@pytest.fixture
def api_client(db: Session):
    """TestClient with get_db overridden to use the test db session."""
    from clearfund.db.session import get_db
    from clearfund.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def internal_headers() -> dict:
    """Headers for token-authenticated admin/internal endpoints."""
    return {"X-Internal-Token": TEST_INTERNAL_JOB_TOKEN}
