from __future__ import annotations

import json
import logging
from typing import Any

import requests

from .cache import CacheStore
from .config import ConfigurationError, ProviderConfig

log = logging.getLogger("subtranslate.languages")


GOOGLE_LANGUAGES_URL = "https://translation.googleapis.com/language/translate/v2/languages"

# provider code -> wiki code
LANGUAGE_CODE_MAPS: dict[str, dict[str, str]] = {
    "libretranslate": {"zt": "zh-hant"},
}


def get_language_code_map(service_type: str) -> dict[str, str]:
    return dict(LANGUAGE_CODE_MAPS.get(service_type.lower(), {}))


def to_provider_code(service_type: str, code: str) -> str:
    reverse = {wiki: provider for provider, wiki in get_language_code_map(service_type).items()}
    return reverse.get(code.lower(), code)


class LanguageCatalog:
    """Supported languages of the configured provider.

    The list is fetched once per catalog instance and kept until ``reset()``.
    Raw HTTP responses additionally go through the shared cache store, so a
    fresh process can skip the request while the cached body is valid.
    """

    def __init__(self, config: ProviderConfig, session: requests.Session, cache: CacheStore):
        self.config = config
        self.session = session
        self.cache = cache
        self._languages: dict[str, str] | None = None

    @property
    def service_type(self) -> str:
        return (self.config.type or "").lower()

    def reset(self) -> None:
        self._languages = None

    def get_supported_languages(self) -> dict[str, str]:
        if self._languages is not None:
            return self._languages

        fetchers = {
            "deepl": self._fetch_deepl,
            "google": self._fetch_google,
            "libretranslate": self._fetch_libretranslate,
            "lingva": self._fetch_lingva,
        }
        fetch = fetchers.get(self.service_type)
        if fetch is None:
            raise ConfigurationError("Unsupported translation service configured.")

        languages = fetch()
        if languages:
            self._languages = languages
        return languages

    def get_language_code_map(self) -> dict[str, str]:
        return get_language_code_map(self.service_type)

    def get_language_name(self, code: str) -> str:
        return self.get_supported_languages().get(code.lower(), "")

    def is_language_supported(self, code: str) -> bool:
        return code.lower() in self.get_supported_languages()

    def to_provider_code(self, code: str) -> str:
        return to_provider_code(self.service_type, code)

    def _fetch_deepl(self) -> dict[str, str]:
        response = self._request(
            f"{self.config.url}/v2/languages",
            {"type": "target"},
            {"Authorization": f"DeepL-Auth-Key {self.config.api_key}"},
        )
        languages: dict[str, str] = {}
        for lang in response if isinstance(response, list) else []:
            languages[str(lang["language"]).lower()] = lang["name"]
        return languages

    def _fetch_google(self) -> dict[str, str]:
        response = self._request(
            GOOGLE_LANGUAGES_URL, {"key": self.config.api_key or "", "target": "en"}, {}
        )
        entries = response.get("data", {}).get("languages", []) if isinstance(response, dict) else []
        languages: dict[str, str] = {}
        for lang in entries:
            code = str(lang["language"]).lower()
            languages[code] = lang.get("name") or code
        return languages

    def _fetch_libretranslate(self) -> dict[str, str]:
        response = self._request(f"{self.config.url}/languages", {}, {})
        code_map = self.get_language_code_map()
        languages: dict[str, str] = {}
        for lang in response if isinstance(response, list) else []:
            code = code_map.get(lang["code"], lang["code"])
            languages[str(code).lower()] = lang["name"]
        return languages

    def _fetch_lingva(self) -> dict[str, str]:
        response = self._request(f"{self.config.url}/api/v1/languages/target", {}, {})
        entries = response.get("languages", []) if isinstance(response, dict) else []
        return {str(lang["code"]).lower(): lang["name"] for lang in entries}

    def _request(self, url: str, params: dict[str, str], headers: dict[str, str]) -> Any:
        cache_key = f"languages:{url}"
        cached = self.cache.get(cache_key)
        if cached:
            return json.loads(cached)

        proxies = None
        if self.config.proxy:
            proxies = {"http": self.config.proxy, "https": self.config.proxy}
        try:
            resp = self.session.get(
                url,
                params=params,
                headers={"User-Agent": self.config.user_agent, **headers},
                timeout=self.config.timeout,
                proxies=proxies,
            )
        except requests.RequestException as exc:
            log.error("Request to %s for languages failed: %s", url, exc)
            return []
        if resp.status_code != 200:
            log.error(
                "Request to %s for languages returned %s: %s", url, resp.status_code, resp.reason
            )
            return []

        try:
            data = resp.json()
        except ValueError:
            log.error("Request to %s for languages returned a body that is not JSON", url)
            return []
        self.cache.store(cache_key, json.dumps(data))
        return data
