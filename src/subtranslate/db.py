from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg

log = logging.getLogger("subtranslate.db")


SCHEMA = """
CREATE TABLE IF NOT EXISTS translation_cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS jobs (
    id BIGSERIAL PRIMARY KEY,
    type TEXT NOT NULL,
    params JSONB NOT NULL,
    status TEXT NOT NULL DEFAULT 'queued',
    retries INTEGER NOT NULL DEFAULT 0,
    error TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS jobs_queued_idx ON jobs (id) WHERE status = 'queued';
"""


def connect(dsn: str) -> psycopg.Connection:
    return psycopg.connect(dsn)


@contextmanager
def get_conn(dsn: str) -> Iterator[psycopg.Connection]:
    conn = connect(dsn)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_schema(dsn: str) -> None:
    with get_conn(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(SCHEMA)
    log.info("db schema ready")


class PgCacheBackend:
    """Cache backend on the translation_cache table. ttl 0 means no expiry."""

    def __init__(self, dsn: str):
        self.dsn = dsn

    def get(self, key: str) -> str | None:
        with get_conn(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT value
                    FROM translation_cache
                    WHERE key = %s AND (expires_at IS NULL OR expires_at > NOW())
                    """,
                    (key,),
                )
                row = cur.fetchone()
        if not row:
            return None
        return row[0]

    def set(self, key: str, value: str, ttl: int) -> bool:
        with get_conn(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO translation_cache (key, value, expires_at)
                    VALUES (
                        %s,
                        %s,
                        CASE WHEN %s::int > 0 THEN NOW() + make_interval(secs => %s::double precision) END
                    )
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value, expires_at = EXCLUDED.expires_at
                    """,
                    (key, value, ttl, ttl),
                )
        return True

    def delete(self, key: str) -> None:
        with get_conn(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM translation_cache WHERE key = %s", (key,))
