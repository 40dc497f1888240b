"""
Repository: SQL queries for river levels, rainfall and stations.

This file contains only DB interaction code. It maps `ReadingsFilter`
values to SQL parameters and converts DB rows to the pydantic models in
`models.py`. Keep business rules (defaults, clamping) out of this module;
the service has already normalized the filter.

Important notes:
- SQL uses positional `%s` parameters; nothing from the request is ever
  formatted into the SQL text.
- Results are ordered by `timestamp ASC, id ASC`; `id` is a BIGSERIAL, so
  readings sharing a timestamp come back in insertion order.
- Each method borrows one connection from the injected pool and returns
  it before the method returns.
"""

from typing import Optional, Protocol, List
from datetime import date

from psycopg_pool import ConnectionPool

from errors import NotFound
from models import (
    PaginationParams,
    RainfallReading,
    ReadingsFilter,
    RiverReading,
    Station,
    start_of_day,
)


class RiverRepository(Protocol):
    def fetch_readings(self, params: ReadingsFilter) -> List[RiverReading]: ...

    def count_readings(self, start_date: Optional[date]) -> int: ...

    def ping(self) -> None: ...


class RainfallRepository(Protocol):
    def get_station_by_name(self, name: str) -> Station: ...

    def fetch_readings_by_station(
        self, station: Station, params: ReadingsFilter
    ) -> List[RainfallReading]: ...

    def count_readings_by_station(self, station: Station, start_date: Optional[date]) -> int: ...

    def ping(self) -> None: ...


# OFFSET is a bigint; anything larger is past the end of any table anyway
BIGINT_MAX = 2**63 - 1


def _offset(page: PaginationParams) -> int:
    return min(page.offset, BIGINT_MAX)


_RIVER_READINGS = (
    "SELECT timestamp, level FROM riverlevels "
    "ORDER BY timestamp ASC, id ASC LIMIT %s OFFSET %s"
)
_RIVER_READINGS_SINCE = (
    "SELECT timestamp, level FROM riverlevels WHERE timestamp >= %s "
    "ORDER BY timestamp ASC, id ASC LIMIT %s OFFSET %s"
)
_RIVER_COUNT = "SELECT COUNT(*) FROM riverlevels"
_RIVER_COUNT_SINCE = "SELECT COUNT(*) FROM riverlevels WHERE timestamp >= %s"

_STATION_BY_NAME = "SELECT id, name FROM stationnames WHERE name = %s"
_RAINFALL_READINGS = (
    "SELECT timestamp, level FROM rainfalls WHERE stationid = %s "
    "ORDER BY timestamp ASC, id ASC LIMIT %s OFFSET %s"
)
_RAINFALL_READINGS_SINCE = (
    "SELECT timestamp, level FROM rainfalls WHERE stationid = %s AND timestamp >= %s "
    "ORDER BY timestamp ASC, id ASC LIMIT %s OFFSET %s"
)
_RAINFALL_COUNT = "SELECT COUNT(*) FROM rainfalls WHERE stationid = %s"
_RAINFALL_COUNT_SINCE = "SELECT COUNT(*) FROM rainfalls WHERE stationid = %s AND timestamp >= %s"


class _PooledRepo:
    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def _fetchall(self, sql: str, args: tuple) -> list:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, args)
                return cur.fetchall()

    def _fetchone(self, sql: str, args: tuple):
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, args)
                return cur.fetchone()

    def ping(self) -> None:
        """Lightweight DB health check. Raises on error."""

        self._fetchone("SELECT 1;", ())


class RiverRepo(_PooledRepo):
    """River level queries against the `riverlevels` table."""

    def fetch_readings(self, params: ReadingsFilter) -> List[RiverReading]:
        page = params.pagination
        if params.start_date is None:
            rows = self._fetchall(_RIVER_READINGS, (page.limit, _offset(page)))
        else:
            rows = self._fetchall(
                _RIVER_READINGS_SINCE, (params.start_at, page.limit, _offset(page))
            )
        return [RiverReading(timestamp=r[0], level=r[1]) for r in rows]

    def count_readings(self, start_date: Optional[date]) -> int:
        if start_date is None:
            row = self._fetchone(_RIVER_COUNT, ())
        else:
            row = self._fetchone(_RIVER_COUNT_SINCE, (start_of_day(start_date),))
        return int(row[0])


class RainfallRepo(_PooledRepo):
    """Rainfall queries; readings are keyed by station id, looked up by name."""

    def get_station_by_name(self, name: str) -> Station:
        row = self._fetchone(_STATION_BY_NAME, (name,))
        if row is None:
            raise NotFound(f"Station '{name}' not found")
        return Station(id=row[0], name=row[1])

    def fetch_readings_by_station(
        self, station: Station, params: ReadingsFilter
    ) -> List[RainfallReading]:
        page = params.pagination
        if params.start_date is None:
            rows = self._fetchall(
                _RAINFALL_READINGS, (station.id, page.limit, _offset(page))
            )
        else:
            rows = self._fetchall(
                _RAINFALL_READINGS_SINCE,
                (station.id, params.start_at, page.limit, _offset(page)),
            )
        return [
            RainfallReading(timestamp=r[0], level=r[1], station=station.name)
            for r in rows
        ]

    def count_readings_by_station(self, station: Station, start_date: Optional[date]) -> int:
        if start_date is None:
            row = self._fetchone(_RAINFALL_COUNT, (station.id,))
        else:
            row = self._fetchone(
                _RAINFALL_COUNT_SINCE, (station.id, start_of_day(start_date))
            )
        return int(row[0])
