"""
Service / facade layer.

This module normalizes query parameters before any DB interaction. It is
free of SQL: it calls the repositories to do the querying. Routes should
always go through these services so clamping rules live in one place.

Key responsibilities:
- clamp pagination (page >= 1, 1 <= page_size <= settings.max_page_size)
- turn an optional start date into a `ReadingsFilter`
- resolve rainfall stations by name before querying (unknown -> NotFound)
"""

import logging
from typing import Optional
from datetime import date

from models import PaginationParams, ReadingsFilter, ReadingsPage
from repo_readings import RainfallRepository, RiverRepository
from settings import settings

logger = logging.getLogger(__name__)


def build_filter(page: int, page_size: int, start_date: Optional[date]) -> ReadingsFilter:
    """Clamp pagination values and wrap them with the optional start date."""

    if page < 1:
        page = 1
    if page_size <= 0:
        page_size = settings.default_page_size
    page_size = min(page_size, settings.max_page_size)
    return ReadingsFilter(
        pagination=PaginationParams(page=page, page_size=page_size),
        start_date=start_date,
    )


class RiverService:
    """River level queries.

    Example usage:
        svc = RiverService(InMemoryRiverRepo())
        svc.get_readings(page=1, page_size=2, start_date=None)
    """

    def __init__(self, repo: RiverRepository):
        self.repo = repo

    def get_readings(
        self, page: int, page_size: int, start_date: Optional[date] = None
    ) -> ReadingsPage:
        params = build_filter(page, page_size, start_date)
        readings = self.repo.fetch_readings(params)
        total = self.repo.count_readings(params.start_date)
        logger.debug(
            "Fetched river readings",
            extra={
                "page": params.pagination.page,
                "page_size": params.pagination.page_size,
                "start_date": params.start_date,
                "count": len(readings),
            },
        )
        return ReadingsPage(readings=readings, total=total)

    def health_check(self) -> None:
        """Perform a lightweight DB ping via the repository."""

        self.repo.ping()


class RainfallService:
    """Rainfall queries for a single named station."""

    def __init__(self, repo: RainfallRepository):
        self.repo = repo

    def get_readings_by_station(
        self,
        station_name: str,
        page: int,
        page_size: int,
        start_date: Optional[date] = None,
    ) -> ReadingsPage:
        """Return a page of rainfall readings for `station_name`.

        Raises:
        - `NotFound` if the station is not in the station directory
        """

        params = build_filter(page, page_size, start_date)
        station = self.repo.get_station_by_name(station_name)
        readings = self.repo.fetch_readings_by_station(station, params)
        total = self.repo.count_readings_by_station(station, params.start_date)
        logger.debug(
            "Fetched rainfall readings",
            extra={
                "station": station.name,
                "page": params.pagination.page,
                "page_size": params.pagination.page_size,
                "start_date": params.start_date,
                "count": len(readings),
            },
        )
        return ReadingsPage(readings=readings, total=total)
