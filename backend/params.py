"""
Query-string parsing for the readings routes.

Routes receive `page`, `pagesize` and `start` as raw strings (or None when
absent) and turn them into typed values here, before the service is
called. Every failure raises `InvalidParameter` naming the offending
parameter; the route turns that into a 400.

Rules:
- `page`: default 1, otherwise a positive integer that fits in 64 bits.
- `pagesize`: default `settings.default_page_size`, otherwise a positive 64-bit
  integer; values above `settings.max_page_size` are clamped, not rejected.
- `start`: optional `YYYY-MM-DD` calendar date.
"""

import re
from datetime import date, datetime
from typing import Optional, Tuple

from errors import InvalidParameter
from settings import settings

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
# largest value a 64-bit signed integer (and a PostgreSQL bigint) can hold
INT64_MAX = 2**63 - 1

PAGE_MESSAGE = "Page must be a positive integer"
PAGE_SIZE_MESSAGE = "Page size must be a positive integer"
START_MESSAGE = "Start date must be in format YYYY-MM-DD"


def _positive_int(raw: str) -> Optional[int]:
    if not _INTEGER_RE.fullmatch(raw):
        return None
    value = int(raw)
    return value if 0 < value <= INT64_MAX else None


def parse_page(raw: Optional[str]) -> int:
    if raw is None or raw == "":
        return 1
    page = _positive_int(raw)
    if page is None:
        raise InvalidParameter("page", PAGE_MESSAGE)
    return page


def parse_page_size(raw: Optional[str]) -> int:
    if raw is None or raw == "":
        return settings.default_page_size
    page_size = _positive_int(raw)
    if page_size is None:
        raise InvalidParameter("pagesize", PAGE_SIZE_MESSAGE)
    return min(page_size, settings.max_page_size)


def parse_start_date(raw: Optional[str]) -> Optional[date]:
    if raw is None or raw == "":
        return None
    # strptime alone would accept single-digit months and days
    if not _DATE_RE.fullmatch(raw):
        raise InvalidParameter("start", START_MESSAGE)
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidParameter("start", START_MESSAGE) from e


def parse_query(
    page: Optional[str], pagesize: Optional[str], start: Optional[str]
) -> Tuple[int, int, Optional[date]]:
    """Parse all three readings parameters, failing on the first bad one."""

    return parse_page(page), parse_page_size(pagesize), parse_start_date(start)
