from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from main import create_app
from repo_memory import InMemoryRainfallRepo, InMemoryRiverRepo


@pytest.fixture
def river_repo() -> InMemoryRiverRepo:
    return InMemoryRiverRepo()


@pytest.fixture
def rainfall_repo() -> InMemoryRainfallRepo:
    return InMemoryRainfallRepo()


@pytest.fixture
def api_client(river_repo, rainfall_repo) -> Iterator[TestClient]:
    app = create_app(river_repo=river_repo, rainfall_repo=rainfall_repo)
    with TestClient(app) as client:
        yield client
