from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import psycopg
from psycopg.types.json import Jsonb

from .db import get_conn

log = logging.getLogger("subtranslate.jobs")


JOB_NAME = "MachineTranslationJob"


@dataclass(frozen=True)
class JobRecord:
    """Self-contained payload of a background translation.

    ``content`` is the already rendered HTML of the base page at enqueue time.
    """

    cache_key: str
    content: str
    source: str
    target: str
    title_text: str

    def to_params(self) -> dict[str, str]:
        return {
            "cachekey": self.cache_key,
            "content": self.content,
            "source": self.source,
            "target": self.target,
            "titletext": self.title_text,
        }

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> "JobRecord":
        try:
            return cls(
                cache_key=str(params["cachekey"]),
                content=str(params["content"]),
                source=str(params.get("source") or ""),
                target=str(params["target"]),
                title_text=str(params.get("titletext") or ""),
            )
        except KeyError as exc:
            raise ValueError(f"job params missing {exc.args[0]!r}") from exc


class JobQueue(Protocol):
    def push(self, job_name: str, params: dict[str, Any]) -> None:
        ...


@dataclass
class Job:
    id: int
    type: str
    params: dict[str, Any]
    status: str
    retries: int


class PgJobQueue:
    def __init__(self, dsn: str):
        self.dsn = dsn

    def push(self, job_name: str, params: dict[str, Any]) -> None:
        with get_conn(self.dsn) as conn:
            enqueue_job(conn, job_name, params)


def enqueue_job(conn: psycopg.Connection, job_type: str, params: dict[str, Any]) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO jobs (type, params, status)
            VALUES (%s, %s, 'queued')
            """,
            (job_type, Jsonb(params)),
        )
    log.info("enqueued %s: %s", job_type, params.get("cachekey"))


def next_jobs(conn: psycopg.Connection, limit: int = 10) -> list[Job]:
    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT id, type, params, status, retries
            FROM jobs
            WHERE status = 'queued'
            ORDER BY id ASC
            LIMIT %s
            FOR UPDATE SKIP LOCKED
            """,
            (limit,),
        )
        rows = cur.fetchall()
        return [Job(*row) for row in rows]


def mark_job_done(conn: psycopg.Connection, job_id: int) -> None:
    with conn.cursor() as cur:
        cur.execute(
            "UPDATE jobs SET status = 'done', updated_at = NOW() WHERE id = %s",
            (job_id,),
        )


def mark_job_error(conn: psycopg.Connection, job_id: int, error: str) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            UPDATE jobs
            SET status = 'error', retries = retries + 1, error = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (error, job_id),
        )
