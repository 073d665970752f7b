from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger("subtranslate.cache")


class CacheMode(enum.Enum):
    DISABLED = "disabled"
    BYPASS = "bypass"
    TTL = "ttl"


@dataclass(frozen=True)
class CachePolicy:
    """How translation results are kept.

    DISABLED turns every read into a miss and every write into a no-op.
    BYPASS still writes, but every read deletes the stored entry and reports
    a miss, forcing a fresh translation. TTL keeps entries for ``ttl`` seconds.
    """

    mode: CacheMode
    ttl: int = 0

    @classmethod
    def disabled(cls) -> "CachePolicy":
        return cls(CacheMode.DISABLED)

    @classmethod
    def bypass(cls) -> "CachePolicy":
        return cls(CacheMode.BYPASS)

    @classmethod
    def expiring(cls, ttl: int) -> "CachePolicy":
        if ttl <= 0:
            raise ValueError("ttl must be positive; use CachePolicy.bypass() for zero")
        return cls(CacheMode.TTL, ttl)

    @classmethod
    def from_settings(cls, caching: bool, caching_time: int) -> "CachePolicy":
        if not caching:
            return cls.disabled()
        if caching_time == 0:
            return cls.bypass()
        return cls.expiring(caching_time)

    @property
    def enabled(self) -> bool:
        return self.mode is not CacheMode.DISABLED


class CacheBackend(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str, ttl: int) -> bool:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryCacheBackend:
    """Process-local backend. A ttl of 0 keeps the entry until deleted."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}

    def get(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: int) -> bool:
        expires_at = time.monotonic() + ttl if ttl > 0 else None
        self._data[key] = (value, expires_at)
        return True

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class CacheStore:
    def __init__(self, backend: CacheBackend, policy: CachePolicy, prefix: str = "subtranslate"):
        self.backend = backend
        self.policy = policy
        self.prefix = prefix

    def make_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> str | None:
        if not self.policy.enabled:
            return None
        full_key = self.make_key(key)
        if self.policy.mode is CacheMode.BYPASS:
            self.backend.delete(full_key)
            log.debug("cache bypass: dropped %s", full_key)
            return None
        value = self.backend.get(full_key)
        if not value:
            return None
        return value

    def store(self, key: str, value: str) -> bool:
        if not self.policy.enabled:
            return False
        return self.backend.set(self.make_key(key), value, self.policy.ttl)

    def delete(self, key: str) -> None:
        if not self.policy.enabled:
            return
        self.backend.delete(self.make_key(key))
