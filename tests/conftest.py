import os

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so tests never touch ./db.json
os.environ.setdefault("TASK_BACKEND", "memory")

from taskboard.main import app  # noqa: E402
from taskboard.repositories import InMemoryRepository, get_repository  # noqa: E402


@pytest.fixture()
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def client(repo):
    """TestClient whose routes use a fresh in-memory repository."""
    app.dependency_overrides[get_repository] = lambda: repo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
