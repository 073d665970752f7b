from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import requests


log = logging.getLogger("subtranslate.mediawiki")


class MediaWikiError(RuntimeError):
    pass


@dataclass(frozen=True)
class PageContent:
    page_id: int
    revision_id: int
    html: str
    title: str
    page_language: str


@dataclass
class MediaWikiClient:
    """Read-only content provider backed by the MediaWiki action API."""

    api_url: str
    user_agent: str
    session: requests.Session

    timeout: int = 30

    def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        params = {"format": "json", "formatversion": 2, **params}
        headers = {"User-Agent": self.user_agent}
        backoff = 1
        for attempt in range(5):
            if method == "GET":
                resp = self.session.get(
                    self.api_url, params=params, headers=headers, timeout=self.timeout
                )
            else:
                resp = self.session.post(
                    self.api_url, data=params, headers=headers, timeout=self.timeout
                )
            resp.raise_for_status()
            data = resp.json()
            if "error" not in data:
                return data
            error = data["error"]
            code = str(error.get("code", ""))
            info = str(error.get("info", ""))
            if code == "ratelimited" or "rate limit" in info.lower():
                if attempt < 4:
                    log.warning("rate limited; backing off %ss", backoff)
                    time.sleep(backoff)
                    backoff *= 2
                    continue
            raise MediaWikiError(f"MediaWiki API error: {error}")
        raise MediaWikiError("MediaWiki API error: exceeded retry attempts")

    def get_page_info(self, title: str) -> dict[str, Any]:
        data = self._request(
            "GET", {"action": "query", "prop": "info", "titles": title}
        )
        page = data["query"]["pages"][0]
        if page.get("missing") or page.get("invalid"):
            raise MediaWikiError(f"page missing: {title}")
        return page

    def get_rendered_page(self, title: str) -> PageContent:
        page = self.get_page_info(title)
        rev_id = int(page["lastrevid"])
        data = self._request(
            "GET",
            {
                "action": "parse",
                "oldid": rev_id,
                "prop": "text",
                "disablelimitreport": 1,
                "disableeditsection": 1,
            },
        )
        parsed = data.get("parse") or {}
        text = parsed.get("text")
        if not isinstance(text, str):
            raise MediaWikiError(f"no rendered text for {title}")
        return PageContent(
            page_id=int(page["pageid"]),
            revision_id=rev_id,
            html=text,
            title=str(page.get("title", title)),
            page_language=str(page.get("pagelanguage") or ""),
        )
