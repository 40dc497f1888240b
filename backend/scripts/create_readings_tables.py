"""Create the stationnames, riverlevels and rainfalls tables.

Usage (from `backend/`):
    python -m scripts.create_readings_tables
"""

from db import get_conn
from settings import settings

DDL = '''
CREATE TABLE IF NOT EXISTS stationnames (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS riverlevels (
    id BIGSERIAL PRIMARY KEY,
    timestamp TIMESTAMP WITH TIME ZONE NOT NULL,
    level DOUBLE PRECISION NOT NULL CHECK (level >= 0)
);

CREATE TABLE IF NOT EXISTS rainfalls (
    id BIGSERIAL PRIMARY KEY,
    stationid TEXT NOT NULL REFERENCES stationnames (id),
    timestamp TIMESTAMP WITH TIME ZONE NOT NULL,
    level DOUBLE PRECISION NOT NULL CHECK (level >= 0)
);

CREATE INDEX IF NOT EXISTS idx_riverlevels_ts ON riverlevels (timestamp, id);
CREATE INDEX IF NOT EXISTS idx_rainfalls_station_ts ON rainfalls (stationid, timestamp, id);
'''


def apply_ddl(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(DDL)
    conn.commit()


def main():
    print('Connecting to', settings.db_url)
    with get_conn() as conn:
        apply_ddl(conn)
    print('DDL applied')


if __name__ == "__main__":
    main()
