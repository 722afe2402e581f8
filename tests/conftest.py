"""
Pytest configuration and shared fixtures.

The API is exercised against the in-memory database from ``fakes``.
"""
import pytest

from fastapi.testclient import TestClient

from core.database import get_database
from core.observability import metrics
from fakes import FakeDatabase


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Each test starts with empty in-memory metrics."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def app():
    from web.main import app as fastapi_app
    from web.routes.api._deps import limiter

    enabled = limiter.enabled
    limiter.enabled = False
    yield fastapi_app
    limiter.enabled = enabled
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app, fake_db) -> TestClient:
    """HTTP client whose database dependency is the in-memory fake."""
    app.dependency_overrides[get_database] = lambda: fake_db
    return TestClient(app, raise_server_exceptions=False)
