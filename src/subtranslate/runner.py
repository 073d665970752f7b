from __future__ import annotations

import argparse
import logging
import time

from .config import Config, ConfigurationError, load_config
from .db import ensure_schema, get_conn
from .jobs import JOB_NAME, JobRecord, mark_job_done, mark_job_error, next_jobs
from .logging import attach_file_logging, configure_logging
from .orchestrator import Orchestrator, build_orchestrator

log = logging.getLogger("subtranslate.runner")


def process_queue(cfg: Config, orchestrator: Orchestrator, limit: int = 5) -> int:
    """Run up to ``limit`` queued jobs; returns how many were picked up."""
    fatal: ConfigurationError | None = None
    with get_conn(cfg.pg_dsn) as conn:
        jobs = next_jobs(conn, limit=limit)
        for job in jobs:
            if job.type != JOB_NAME:
                mark_job_error(conn, job.id, f"unknown job type: {job.type}")
                continue
            try:
                record = JobRecord.from_params(job.params)
                translated = orchestrator.run_job(record)
                if not translated:
                    log.warning("job %s left %s untranslated", job.id, record.cache_key)
                mark_job_done(conn, job.id)
            except ConfigurationError as exc:
                mark_job_error(conn, job.id, str(exc))
                fatal = exc
                break
            except Exception as exc:
                log.exception("job %s failed", job.id)
                mark_job_error(conn, job.id, str(exc))
    if fatal is not None:
        raise fatal
    return len(jobs)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run queued machine translation jobs")
    parser.add_argument("--once", action="store_true", help="drain the queue once and exit")
    parser.add_argument("--limit", type=int, default=5, help="jobs per batch")
    parser.add_argument("--interval", type=float, default=5.0, help="seconds between empty polls")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--init-db", action="store_true", help="create tables before running")
    args = parser.parse_args()

    configure_logging()
    if args.log_file:
        attach_file_logging(args.log_file)
    cfg = load_config()
    if not cfg.pg_dsn:
        raise RuntimeError("Missing required env var: DATABASE_URL")
    if args.init_db:
        ensure_schema(cfg.pg_dsn)

    orchestrator = build_orchestrator(cfg)
    log.info("runner started: service=%s", cfg.provider.type)
    while True:
        picked = process_queue(cfg, orchestrator, limit=args.limit)
        if picked:
            continue
        if args.once:
            break
        time.sleep(args.interval)


if __name__ == "__main__":
    main()
