from __future__ import annotations

import os
from dataclasses import dataclass

from .cache import CachePolicy


DEFAULT_USER_AGENT = "SubTranslate (machine translation of wiki subpages)"

# Options each provider cannot work without.
REQUIRED_SERVICE_OPTIONS: dict[str, tuple[str, ...]] = {
    "deepl": ("url", "api_key"),
    "google": ("api_key",),
    "libretranslate": ("url",),
    "lingva": ("url",),
}


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True)
class ProviderConfig:
    type: str
    url: str = ""
    api_key: str | None = None
    timeout: int = 30
    proxy: str | None = None
    user_agent: str = DEFAULT_USER_AGENT

    def validate(self) -> None:
        service_type = (self.type or "").lower()
        if service_type not in REQUIRED_SERVICE_OPTIONS:
            raise ConfigurationError(
                "Unsupported machine translation service configured: "
                f"{self.type!r}"
            )
        for option in REQUIRED_SERVICE_OPTIONS[service_type]:
            if not getattr(self, option):
                raise ConfigurationError(
                    f"{option} is required for the {service_type} service"
                )


@dataclass(frozen=True)
class Config:
    provider: ProviderConfig

    caching: bool = True
    caching_time: int = 86400
    cache_prefix: str = "subtranslate"
    use_job_queue: bool = False
    translate_title: bool = True
    suppress_language_caption: bool = False
    robot_policy: str = ""

    pg_dsn: str | None = None
    mw_api_url: str | None = None

    @property
    def cache_policy(self) -> CachePolicy:
        return CachePolicy.from_settings(self.caching, self.caching_time)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default) not in ("0", "false", "False", "")


def _int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


def load_config() -> Config:
    def req(name: str) -> str:
        value = os.getenv(name)
        if not value:
            raise RuntimeError(f"Missing required env var: {name}")
        return value

    provider = ProviderConfig(
        type=req("SUBTRANSLATE_SERVICE_TYPE").strip().lower(),
        url=os.getenv("SUBTRANSLATE_SERVICE_URL", "").rstrip("/"),
        api_key=os.getenv("SUBTRANSLATE_SERVICE_API_KEY") or None,
        timeout=_int("SUBTRANSLATE_TIMEOUT", "30"),
        proxy=os.getenv("SUBTRANSLATE_HTTP_PROXY") or None,
        user_agent=os.getenv("SUBTRANSLATE_USER_AGENT", DEFAULT_USER_AGENT),
    )

    caching_time = _int("SUBTRANSLATE_CACHING_TIME", "86400")
    if caching_time < 0:
        raise RuntimeError("SUBTRANSLATE_CACHING_TIME must not be negative")

    cfg = Config(
        provider=provider,
        caching=_flag("SUBTRANSLATE_CACHING", "1"),
        caching_time=caching_time,
        cache_prefix=os.getenv("SUBTRANSLATE_CACHE_PREFIX", "subtranslate"),
        use_job_queue=_flag("SUBTRANSLATE_USE_JOB_QUEUE", "0"),
        translate_title=_flag("SUBTRANSLATE_TRANSLATE_TITLE", "1"),
        suppress_language_caption=_flag("SUBTRANSLATE_SUPPRESS_LANGUAGE_CAPTION", "0"),
        robot_policy=os.getenv("SUBTRANSLATE_ROBOT_POLICY", ""),
        pg_dsn=os.getenv("DATABASE_URL"),
        mw_api_url=os.getenv("MW_API_URL"),
    )
    return cfg
