"""
Pydantic models used across the backend.

Readings and stations are read-only projections of database rows; the
repository builds them and the API serializes them. Serialization rules
live on the models so every route renders readings the same way:

- `level` is rounded to 3 decimal places.
- `timestamp` is rendered in UTC as `YYYY-MM-DDTHH:MM:SS` (no fraction,
  no offset). Naive datetimes are taken to already be UTC.

Query parameter shapes (`PaginationParams`, `ReadingsFilter`) are built
by the service after clamping; they are never constructed from raw input.
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer
import math
from typing import List, Optional
from datetime import date, datetime, time, timezone


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
LEVEL_DECIMAL_PLACES = 3


def format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime(TIMESTAMP_FORMAT)


def start_of_day(day: date) -> datetime:
    """Inclusive lower bound for a `start` filter: midnight UTC of `day`."""

    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class RiverReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    level: float = Field(ge=0)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, ts: datetime) -> str:
        return format_timestamp(ts)

    @field_serializer("level")
    def _serialize_level(self, level: float) -> float:
        # half away from zero, not round()'s half-to-even
        scale = 10 ** LEVEL_DECIMAL_PLACES
        return math.copysign(math.floor(abs(level) * scale + 0.5), level) / scale


class RainfallReading(RiverReading):
    """A rainfall measurement; `station` is the station's public name."""

    station: str


class Station(BaseModel):
    """A rainfall sensor site.

    Fields:
    - `id`: external sensor code (e.g. `010660`), used as the join key in SQL.
    - `name`: unique slug (e.g. `catcleugh`), the public lookup key.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class PaginationParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    page_size: int = Field(ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class ReadingsFilter(BaseModel):
    """Pagination plus an optional inclusive start date (`None` = no filter)."""

    model_config = ConfigDict(frozen=True)

    pagination: PaginationParams
    start_date: Optional[date] = None

    @property
    def start_at(self) -> Optional[datetime]:
        if self.start_date is None:
            return None
        return start_of_day(self.start_date)


class ReadingsPage(BaseModel):
    """One page of readings plus the size of the whole filtered set."""

    readings: List[RiverReading]
    total: int = Field(ge=0)


class RiverReadingsResponse(BaseModel):
    readings: List[RiverReading]


class RainfallReadingsResponse(BaseModel):
    readings: List[RainfallReading]
