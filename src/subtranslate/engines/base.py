from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from ..config import ProviderConfig

log = logging.getLogger("subtranslate.engines")


class ContentKind(enum.Enum):
    BODY = "body"
    TITLE = "title"


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: str
    target_lang: str
    kind: ContentKind = ContentKind.BODY


class TranslationProvider(Protocol):
    name: str

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        ...


@dataclass
class HttpProvider:
    config: ProviderConfig
    session: requests.Session

    name: str = "http"

    def _proxies(self) -> dict[str, str] | None:
        if not self.config.proxy:
            return None
        return {"http": self.config.proxy, "https": self.config.proxy}

    def _post(
        self,
        url: str,
        data: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """Single POST attempt; any failure is logged and reported as None."""
        headers = {"User-Agent": self.config.user_agent, **(headers or {})}
        try:
            resp = self.session.post(
                url,
                data=data,
                json=json,
                headers=headers,
                timeout=self.config.timeout,
                proxies=self._proxies(),
            )
        except requests.RequestException as exc:
            log.error("Request to %s failed: %s", self.name, exc)
            return None
        if resp.status_code != 200:
            log.error(
                "Request to %s returned %s: %s", self.name, resp.status_code, resp.reason
            )
            return None
        try:
            payload = resp.json()
        except ValueError:
            log.error("Request to %s returned a body that is not JSON", self.name)
            return None
        if not isinstance(payload, dict):
            log.error("Request to %s returned unexpected payload: %r", self.name, payload)
            return None
        return payload


def dig(payload: Any, *path: Any) -> str:
    """Walk nested dicts/lists, returning "" when any step is missing."""
    for step in path:
        try:
            payload = payload[step]
        except (KeyError, IndexError, TypeError):
            return ""
    return payload if isinstance(payload, str) else ""
