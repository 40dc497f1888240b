"""End-to-end tests against a real PostgreSQL in a container.

Deselected by default; run with `pytest -m integration` (needs Docker).
"""

from datetime import datetime, timezone
from typing import Callable, Iterator, List

import psycopg
import pytest
from fastapi.testclient import TestClient

from db import create_pool
from main import create_app
from repo_readings import RainfallRepo, RiverRepo
from scripts.create_readings_tables import apply_ddl
from scripts.seed_readings import seed

postgres = pytest.importorskip("testcontainers.postgres")

pytestmark = pytest.mark.integration

EXPECTED_RIVER = [
    {"timestamp": "2024-01-01T09:00:00", "level": 1.2},
    {"timestamp": "2024-01-01T10:00:00", "level": 1.3},
    {"timestamp": "2024-01-01T11:00:00", "level": 1.4},
    {"timestamp": "2024-01-01T12:00:00", "level": 1.5},
    {"timestamp": "2024-01-02T09:00:00", "level": 1.1},
]


@pytest.fixture(scope="module")
def db_url() -> Iterator[str]:
    with postgres.PostgresContainer(
        "postgres:17-alpine",
        username="testuser",
        password="testpass",
        dbname="testdb",
        driver=None,
    ) as container:
        url = container.get_connection_url()
        with psycopg.connect(url) as conn:
            apply_ddl(conn)
            seed(conn)
        yield url


@pytest.fixture(scope="module")
def pg_client(db_url: str) -> Iterator[TestClient]:
    pool = create_pool(db_url)
    pool.open(wait=True)
    app = create_app(river_repo=RiverRepo(pool), rainfall_repo=RainfallRepo(pool))
    try:
        with TestClient(app) as client:
            yield client
    finally:
        pool.close()


@pytest.fixture
def extra_river_rows(db_url: str) -> Iterator[Callable[[datetime, float], None]]:
    """Insert river readings for one test and delete them afterwards."""

    inserted: List[int] = []

    def insert(ts: datetime, level: float) -> None:
        with psycopg.connect(db_url) as conn:
            row = conn.execute(
                "INSERT INTO riverlevels (timestamp, level) VALUES (%s, %s) RETURNING id",
                (ts, level),
            ).fetchone()
            inserted.append(row[0])

    yield insert

    if inserted:
        with psycopg.connect(db_url) as conn:
            conn.execute("DELETE FROM riverlevels WHERE id = ANY(%s)", (inserted,))


def test_river_default_parameters(pg_client: TestClient) -> None:
    response = pg_client.get("/river")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"readings": EXPECTED_RIVER}
    assert response.headers["x-total-count"] == "5"


@pytest.mark.parametrize(
    "query, expected",
    [
        ("page=1&pagesize=2", EXPECTED_RIVER[:2]),
        ("page=3&pagesize=2", EXPECTED_RIVER[4:]),
        ("page=10&pagesize=2", []),
        ("page=100000000000000000&pagesize=1000", []),
        ("start=2024-01-02", EXPECTED_RIVER[4:]),
        ("start=2025-01-01", []),
    ],
)
def test_river_pagination_and_start(pg_client: TestClient, query: str, expected) -> None:
    response = pg_client.get(f"/river?{query}")

    assert response.status_code == 200
    assert response.json() == {"readings": expected}


def test_start_includes_reading_at_midnight(pg_client: TestClient, extra_river_rows) -> None:
    extra_river_rows(datetime(2024, 1, 3, tzinfo=timezone.utc), 0.9)

    response = pg_client.get("/river?start=2024-01-03")

    assert response.json() == {"readings": [{"timestamp": "2024-01-03T00:00:00", "level": 0.9}]}
    assert response.headers["x-total-count"] == "1"


def test_equal_timestamps_come_back_in_insertion_order(pg_client: TestClient, extra_river_rows) -> None:
    ts = datetime(2024, 2, 1, 6, tzinfo=timezone.utc)
    for level in (3.0, 1.0, 2.0):
        extra_river_rows(ts, level)

    response = pg_client.get("/river?start=2024-02-01")

    assert [r["level"] for r in response.json()["readings"]] == [3.0, 1.0, 2.0]


def test_rainfall_station_readings(pg_client: TestClient) -> None:
    response = pg_client.get("/rainfall/catcleugh?pagesize=2&page=2")

    assert response.status_code == 200
    assert response.json() == {
        "readings": [{"timestamp": "2024-01-01T11:00:00", "level": 2.3, "station": "catcleugh"}]
    }
    assert response.headers["x-total-count"] == "3"


def test_rainfall_start_filter(pg_client: TestClient) -> None:
    response = pg_client.get("/rainfall/haltwhistle?start=2024-01-02")

    assert response.status_code == 200
    assert response.json() == {"readings": []}
    assert response.headers["x-total-count"] == "0"


def test_rainfall_known_station_without_readings(pg_client: TestClient) -> None:
    response = pg_client.get("/rainfall/hartside")

    assert response.status_code == 200
    assert response.json() == {"readings": []}


def test_rainfall_unknown_station(pg_client: TestClient) -> None:
    response = pg_client.get("/rainfall/atlantis")

    assert response.status_code == 404
    assert response.json() == {"error": "Station 'atlantis' not found"}


def test_invalid_parameter_short_circuits(pg_client: TestClient) -> None:
    response = pg_client.get("/river?pagesize=0")

    assert response.status_code == 400
    assert response.json() == {"error": "Page size must be a positive integer"}


def test_health(pg_client: TestClient) -> None:
    response = pg_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
