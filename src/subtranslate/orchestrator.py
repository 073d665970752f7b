from __future__ import annotations

import enum
import html
import logging
from dataclasses import dataclass

import requests

from .cache import CacheStore, MemoryCacheBackend
from .client import TranslationClient
from .config import Config, ConfigurationError
from .db import PgCacheBackend
from .engines.base import ContentKind, TranslationRequest
from .jobs import JOB_NAME, JobQueue, JobRecord, PgJobQueue

log = logging.getLogger("subtranslate.orchestrator")


PROCESSING_MESSAGE = "This page is being translated. Please check back in a moment."


def cache_key(page_id: int, revision_id: int, target_lang: str) -> str:
    return f"{page_id}-{revision_id}-{target_lang.upper()}"


def title_key(key: str) -> str:
    return f"{key}-title"


def progress_key(key: str) -> str:
    return f"{key}-progress"


def processing_notice(message: str = PROCESSING_MESSAGE) -> str:
    return (
        '<div class="mw-message-box mw-message-box-notice">'
        f"{html.escape(message)}"
        "</div>"
    )


class TranslationStatus(enum.Enum):
    CACHED = "cached"
    TRANSLATED = "translated"
    PROCESSING = "processing"
    FAILED = "failed"


@dataclass(frozen=True)
class PageTranslationRequest:
    page_id: int
    revision_id: int
    source_lang: str
    target_lang: str
    content: str
    title_text: str

    @property
    def key(self) -> str:
        return cache_key(self.page_id, self.revision_id, self.target_lang)


@dataclass(frozen=True)
class TranslationOutcome:
    status: TranslationStatus
    text: str | None = None
    title: str | None = None


class Orchestrator:
    """Ties cache keys, job enqueueing and provider calls together.

    Per cache key a translation is Empty, Processing (a progress marker is
    set) or Cached. The progress marker only deduplicates on a best-effort
    basis: two requests racing past an empty marker may both enqueue, which
    is harmless because a job for a revision-scoped key is idempotent.
    """

    def __init__(
        self,
        client: TranslationClient,
        cache: CacheStore,
        job_queue: JobQueue | None = None,
        use_job_queue: bool = False,
        translate_title: bool = True,
    ):
        if use_job_queue and job_queue is None:
            raise ConfigurationError("use_job_queue is enabled but no job queue is configured")
        if use_job_queue and not cache.policy.enabled:
            log.warning("job queue enabled with caching disabled; results will never be shown")
        self.client = client
        self.cache = cache
        self.job_queue = job_queue
        self.use_job_queue = use_job_queue
        self.translate_title = translate_title

    def translate_page(self, request: PageTranslationRequest) -> TranslationOutcome:
        key = request.key

        text = self.cache.get(key)
        if text:
            return TranslationOutcome(TranslationStatus.CACHED, text, self._title_for(request))

        if self.use_job_queue:
            self._enqueue(request)
            return TranslationOutcome(TranslationStatus.PROCESSING, processing_notice())

        text = self.client.translate_request(
            TranslationRequest(request.content, request.source_lang, request.target_lang)
        )
        if not text:
            log.warning("translation of %s failed; nothing cached", key)
            return TranslationOutcome(TranslationStatus.FAILED)

        self.cache.store(key, text)
        return TranslationOutcome(TranslationStatus.TRANSLATED, text, self._title_for(request))

    def run_job(self, record: JobRecord) -> bool:
        """Fetch-and-store path of a background job.

        The progress marker is removed on every exit so a failing provider
        sends the key back to Empty instead of leaving it Processing.
        """
        key = record.cache_key
        try:
            text = self.cache.get(key)
            if not text:
                text = self.client.translate_request(
                    TranslationRequest(record.content, record.source, record.target)
                )
            if not text:
                log.warning("translation job for %s produced no text", key)
                return False

            self.cache.store(key, text)
            if self.translate_title and not self.cache.get(title_key(key)):
                self._translate_title(key, record.title_text, record.source, record.target)
            return True
        finally:
            self.cache.delete(progress_key(key))

    def _title_for(self, request: PageTranslationRequest) -> str | None:
        if not self.translate_title:
            return None
        key = request.key
        title = self.cache.get(title_key(key))
        if title:
            return title
        if self.use_job_queue:
            # body is cached; the job will find it and only fill the title
            self._enqueue(request)
            return None
        return self._translate_title(
            key, request.title_text, request.source_lang, request.target_lang
        )

    def _translate_title(self, key: str, title_text: str, source: str, target: str) -> str | None:
        title = self.client.translate_request(
            TranslationRequest(title_text, source, target, ContentKind.TITLE)
        )
        if not title:
            return None
        self.cache.store(title_key(key), title)
        return title

    def _enqueue(self, request: PageTranslationRequest) -> bool:
        key = request.key
        if self.cache.get(progress_key(key)):
            log.info("skip enqueue, translation already in progress: %s", key)
            return False

        record = JobRecord(
            cache_key=key,
            content=request.content,
            source=request.source_lang,
            target=request.target_lang,
            title_text=request.title_text,
        )
        self.job_queue.push(JOB_NAME, record.to_params())
        self.cache.store(progress_key(key), PROCESSING_MESSAGE)
        return True


def build_orchestrator(cfg: Config, session: requests.Session | None = None) -> Orchestrator:
    backend = PgCacheBackend(cfg.pg_dsn) if cfg.pg_dsn else MemoryCacheBackend()
    cache = CacheStore(backend, cfg.cache_policy, prefix=cfg.cache_prefix)
    job_queue = PgJobQueue(cfg.pg_dsn) if cfg.pg_dsn else None
    return Orchestrator(
        client=TranslationClient.from_config(cfg.provider, session),
        cache=cache,
        job_queue=job_queue,
        use_job_queue=cfg.use_job_queue,
        translate_title=cfg.translate_title and not cfg.suppress_language_caption,
    )
