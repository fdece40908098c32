"""
Labyrinth Tests - Test Configuration.

Provides repository, settings and HTTP client fixtures. Every test gets
its own repository and application, so no state leaks between tests.
"""

from typing import Any, Dict, Iterator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from labyrinth.app import create_app
from labyrinth.config import Settings
from labyrinth.domain.entities import Cell, Source
from labyrinth.repositories import InMemoryCellRepository, seed_repository
from labyrinth.security import hash_password

TEST_PASSWORD = "open-sesame"
TEST_SECRET_KEY = "test-secret-key-that-is-long-enough-to-sign"


@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt hash of TEST_PASSWORD, with a low cost to keep tests fast."""
    return hash_password(TEST_PASSWORD, rounds=4)


@pytest.fixture
def test_settings(password_hash: str) -> Settings:
    """
    Settings for the test application.

    Login is enabled with TEST_PASSWORD, demo seeding is off.
    """
    return Settings(
        APP_NAME="Labyrinth Test",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        SESSION_SECRET_KEY=TEST_SECRET_KEY,
        ADMIN_PASSWORD_HASH=password_hash,
        AUTH_DISABLED=False,
        SEED_DEMO_DATA=False,
    )


@pytest.fixture
def repository() -> InMemoryCellRepository:
    """Create a fresh, empty repository."""
    return InMemoryCellRepository()


@pytest.fixture
def seeded_ids(repository: InMemoryCellRepository) -> List[str]:
    """Load the demo library into the repository and return the cell ids."""
    return seed_repository(repository)


@pytest.fixture
def new_cell_data() -> Dict[str, Any]:
    """Fields of a valid cell with one source."""
    return {
        "title": "The new cell",
        "body": "This is the new cell I'm creating",
        "room": "This is a room",
        "sources": [Source("Confucius")],
    }


@pytest.fixture
def stored_cell_id(
    repository: InMemoryCellRepository, new_cell_data: Dict[str, Any]
) -> str:
    return repository.new_cell(Cell(**new_cell_data))


@pytest.fixture
def app(test_settings: Settings, repository: InMemoryCellRepository) -> FastAPI:
    return create_app(settings=test_settings, repository=repository)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Anonymous client; redirects are not followed so they can be asserted."""
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    """Client that has logged in with TEST_PASSWORD."""
    response = client.post("/login", data={"password": TEST_PASSWORD})
    assert response.status_code == 302
    return client


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
