"""
Database connection helper.

This module centralizes how connections are created. The API shares one
`psycopg_pool.ConnectionPool`, opened in the FastAPI lifespan and handed
to each repository at construction time (repositories never reach for a
global pool).

Usage:
    from db import create_pool
    pool = create_pool()
    pool.open()
    with pool.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")

Scripts that run a handful of statements can keep using `get_conn()`,
which opens a standalone connection.
"""

from typing import Optional

import psycopg
from psycopg_pool import ConnectionPool

from settings import settings


def _connect_kwargs() -> dict:
    # connect_timeout so requests don't hang if the database is unreachable;
    # statement_timeout caps each query at the request timeout.
    timeout_ms = int(settings.request_timeout_seconds * 1000)
    return {
        "connect_timeout": 5,
        "options": f"-c statement_timeout={timeout_ms}",
    }


def create_pool(db_url: Optional[str] = None) -> ConnectionPool:
    """Build a closed connection pool; the caller decides when to open it."""

    return ConnectionPool(
        db_url or settings.db_url,
        min_size=1,
        max_size=settings.db_pool_max_size,
        max_idle=settings.db_pool_max_idle,
        max_lifetime=settings.db_pool_max_lifetime,
        # waiting for a free connection is bounded by the request timeout too
        timeout=settings.request_timeout_seconds,
        kwargs=_connect_kwargs(),
        open=False,
        name="flood-api",
    )


def get_conn():
    """Return a new standalone psycopg connection using `settings.db_url`."""

    return psycopg.connect(settings.db_url, connect_timeout=5)
