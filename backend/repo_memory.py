"""
In-memory repositories with fixed fixture data.

These mirror the shape of the production tables and are used by the
test-suite and by `scripts/seed_readings.py`. Filtering, ordering and
pagination follow the SQL repositories: `timestamp >= start`, ascending
by timestamp with insertion order breaking ties, then offset/limit.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from datetime import date, datetime, timezone

from errors import NotFound
from models import RainfallReading, ReadingsFilter, RiverReading, Station, start_of_day


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


RIVER_FIXTURE: List[RiverReading] = [
    RiverReading(timestamp=_utc(2024, 1, 1, 9), level=1.2),
    RiverReading(timestamp=_utc(2024, 1, 1, 10), level=1.3),
    RiverReading(timestamp=_utc(2024, 1, 1, 11), level=1.4),
    RiverReading(timestamp=_utc(2024, 1, 1, 12), level=1.5),
    RiverReading(timestamp=_utc(2024, 1, 2, 9), level=1.1),
]

RAINFALL_FIXTURE: List[RainfallReading] = [
    RainfallReading(timestamp=_utc(2024, 1, 1, 9), level=2.1, station="catcleugh"),
    RainfallReading(timestamp=_utc(2024, 1, 1, 10), level=2.2, station="catcleugh"),
    RainfallReading(timestamp=_utc(2024, 1, 1, 11), level=2.3, station="catcleugh"),
    RainfallReading(timestamp=_utc(2024, 1, 1, 9), level=1.5, station="haltwhistle"),
    RainfallReading(timestamp=_utc(2024, 1, 1, 10), level=1.6, station="haltwhistle"),
]

# Station directory as deployed (sensor code -> public slug)
STATION_FIXTURE: List[Station] = [
    Station(id="010660", name="catcleugh"),
    Station(id="014555", name="haltwhistle"),
    Station(id="016140", name="hexham-firtrees"),
    Station(id="008850", name="kielder-ridge-end"),
    Station(id="010312", name="chirdon"),
    Station(id="013045", name="garrigill-noonstones-hill"),
    Station(id="013336", name="hartside"),
    Station(id="013553", name="alston"),
    Station(id="013878", name="knarsdale"),
    Station(id="015313", name="acomb-codlaw-hill"),
    Station(id="015347", name="allenheads-allen-lodge"),
]


def _since(readings: Iterable[RiverReading], start_date: Optional[date]) -> list:
    if start_date is None:
        return list(readings)
    start = start_of_day(start_date)
    return [r for r in readings if r.timestamp >= start]


def _page(readings: Sequence[RiverReading], params: ReadingsFilter) -> list:
    # sorted() is stable, so equal timestamps keep insertion order
    ordered = sorted(_since(readings, params.start_date), key=lambda r: r.timestamp)
    page = params.pagination
    return ordered[page.offset:page.offset + page.limit]


class InMemoryRiverRepo:
    def __init__(self, readings: Optional[Iterable[RiverReading]] = None):
        self.readings = list(RIVER_FIXTURE if readings is None else readings)

    def fetch_readings(self, params: ReadingsFilter) -> List[RiverReading]:
        return _page(self.readings, params)

    def count_readings(self, start_date: Optional[date]) -> int:
        return len(_since(self.readings, start_date))

    def ping(self) -> None:
        return None


class InMemoryRainfallRepo:
    def __init__(
        self,
        readings: Optional[Iterable[RainfallReading]] = None,
        stations: Optional[Iterable[Station]] = None,
    ):
        self.readings = list(RAINFALL_FIXTURE if readings is None else readings)
        self.stations: Dict[str, Station] = {
            s.name: s for s in (STATION_FIXTURE if stations is None else stations)
        }

    def get_station_by_name(self, name: str) -> Station:
        station = self.stations.get(name)
        if station is None:
            raise NotFound(f"Station '{name}' not found")
        return station

    def _for_station(self, station: Station) -> List[RainfallReading]:
        return [r for r in self.readings if r.station == station.name]

    def fetch_readings_by_station(
        self, station: Station, params: ReadingsFilter
    ) -> List[RainfallReading]:
        return _page(self._for_station(station), params)

    def count_readings_by_station(self, station: Station, start_date: Optional[date]) -> int:
        return len(_since(self._for_station(station), start_date))

    def ping(self) -> None:
        return None
