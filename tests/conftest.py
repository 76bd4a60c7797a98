"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Every fixture runs against in-memory SQLite with the offline fallbacks;
nothing here needs a network, Redis or SMTP server.
"""
import sys
from pathlib import Path
from typing import Any

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from quizzer.db.database import create_db_engine, init_db  # noqa: E402
from quizzer.services.container import build_container  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database, TestClient)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class MemoryCache:
    """Dict-backed cache that records calls."""

    def __init__(self):
        self.store: dict[str, Any] = {}
        self.deleted: list[str] = []

    def get(self, key: str) -> Any | None:
        return self.store.get(key)

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        self.store[key] = value
        return True

    def delete(self, key: str) -> bool:
        self.deleted.append(key)
        return self.store.pop(key, None) is not None

    def ping(self) -> bool:
        return True


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        jwt_secret="test-secret",
        groq_api_key=None,
        redis_url=None,
        smtp_user=None,
        smtp_password=None,
        log_level="WARNING",
    )


@pytest.fixture
def engine():
    """Fresh in-memory database with tables created."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def container(settings, engine, memory_cache):
    """Service container on the in-memory database with a dict cache."""
    container = build_container(settings, engine=engine)
    container.cache = memory_cache
    return container


@pytest.fixture
def session(container):
    session = container.session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def quiz_service(container, session):
    return container.quiz_service(session)


@pytest.fixture
def client(settings, container):
    """TestClient around an app wired to the test container."""
    from fastapi.testclient import TestClient

    from quizzer.api.main import create_app

    app = create_app(settings=settings, container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Bearer header for user 'alice'."""
    response = client.post("/login", json={"username": "alice", "password": "secret123"})
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def sample_question():
    """Provide a sample question in wire format."""
    return {
        "id": 1,
        "question": "What is 7 x 8?",
        "options": ["54", "56", "58", "64"],
        "correctAnswer": 1,
        "difficulty": "medium",
        "explanation": "7 x 8 = 56",
    }
