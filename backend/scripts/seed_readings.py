"""Load the fixture station directory and readings into PostgreSQL.

Usage (from `backend/`, after `scripts/create_readings_tables.py`):
    python -m scripts.seed_readings
"""

from db import get_conn
from repo_memory import RAINFALL_FIXTURE, RIVER_FIXTURE, STATION_FIXTURE


def seed(conn) -> None:
    """Insert the fixtures in one transaction; stations already present are kept."""

    station_ids = {s.name: s.id for s in STATION_FIXTURE}
    with conn.cursor() as cur:
        cur.executemany(
            "INSERT INTO stationnames (id, name) VALUES (%s, %s) ON CONFLICT (id) DO NOTHING",
            [(s.id, s.name) for s in STATION_FIXTURE],
        )
        cur.executemany(
            "INSERT INTO riverlevels (timestamp, level) VALUES (%s, %s)",
            [(r.timestamp, r.level) for r in RIVER_FIXTURE],
        )
        cur.executemany(
            "INSERT INTO rainfalls (stationid, timestamp, level) VALUES (%s, %s, %s)",
            [(station_ids[r.station], r.timestamp, r.level) for r in RAINFALL_FIXTURE],
        )
    conn.commit()


def main():
    with get_conn() as conn:
        seed(conn)

    print(
        f"Seeded {len(STATION_FIXTURE)} stations, {len(RIVER_FIXTURE)} river readings, "
        f"{len(RAINFALL_FIXTURE)} rainfall readings"
    )


if __name__ == "__main__":
    main()
