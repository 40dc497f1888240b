from datetime import date
from typing import List, Optional

import pytest

from errors import NotFound
from models import ReadingsFilter, RiverReading
from repo_memory import InMemoryRainfallRepo, InMemoryRiverRepo
from service_readings import RainfallService, RiverService, build_filter
from settings import settings


class RecordingRiverRepo(InMemoryRiverRepo):
    def __init__(self) -> None:
        super().__init__()
        self.calls: List[ReadingsFilter] = []

    def fetch_readings(self, params: ReadingsFilter) -> List[RiverReading]:
        self.calls.append(params)
        return super().fetch_readings(params)


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (1, 20, (1, 20)),
        (0, 20, (1, 20)),
        (-3, 5, (1, 5)),
        (2, 0, (2, None)),
        (2, -1, (2, None)),
        (1, 10_000, (1, "max")),
    ],
)
def test_build_filter_clamps(page: int, page_size: int, expected) -> None:
    params = build_filter(page, page_size, None)

    want_page, want_size = expected
    if want_size is None:
        want_size = settings.default_page_size
    elif want_size == "max":
        want_size = settings.max_page_size
    assert params.pagination.page == want_page
    assert params.pagination.page_size == want_size
    assert params.start_date is None


def test_river_service_forwards_filter_and_counts() -> None:
    repo = RecordingRiverRepo()
    svc = RiverService(repo)

    result = svc.get_readings(page=2, page_size=2, start_date=date(2024, 1, 1))

    assert [r.level for r in result.readings] == [1.4, 1.5]
    assert result.total == 5
    (call,) = repo.calls
    assert call.pagination.page == 2
    assert call.start_date == date(2024, 1, 1)


def test_river_service_clamps_page_size_to_maximum(monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_page_size", 3)
    repo = RecordingRiverRepo()

    result = RiverService(repo).get_readings(page=1, page_size=50)

    assert len(result.readings) == 3
    assert repo.calls[0].pagination.page_size == 3


def test_rainfall_service_returns_station_readings() -> None:
    svc = RainfallService(InMemoryRainfallRepo())

    result = svc.get_readings_by_station("catcleugh", page=1, page_size=2)

    assert [r.level for r in result.readings] == [2.1, 2.2]
    assert result.total == 3


def test_rainfall_service_unknown_station() -> None:
    svc = RainfallService(InMemoryRainfallRepo())

    with pytest.raises(NotFound):
        svc.get_readings_by_station("nowhere", page=1, page_size=20)


def test_health_check_propagates_repository_errors() -> None:
    class DownRepo(InMemoryRiverRepo):
        def ping(self) -> None:
            raise ConnectionError("db down")

    with pytest.raises(ConnectionError):
        RiverService(DownRepo()).health_check()
