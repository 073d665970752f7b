from __future__ import annotations

import logging

import requests

from .config import ConfigurationError, ProviderConfig
from .engines.base import ContentKind, TranslationProvider, TranslationRequest
from .engines.deepl import DeepLProvider
from .engines.google import GoogleProvider
from .engines.libretranslate import LibreTranslateProvider
from .engines.lingva import LingvaProvider

log = logging.getLogger("subtranslate.client")


# Hard cap on request size, in bytes.
MAX_TEXT_BYTES = 131072

PROVIDERS: dict[str, type] = {
    "deepl": DeepLProvider,
    "google": GoogleProvider,
    "libretranslate": LibreTranslateProvider,
    "lingva": LingvaProvider,
}


def build_provider(config: ProviderConfig, session: requests.Session) -> TranslationProvider:
    service_type = (config.type or "").lower()
    provider_cls = PROVIDERS.get(service_type)
    if provider_cls is None:
        raise ConfigurationError(
            f"Unsupported machine translation service configured: {config.type!r}"
        )
    config.validate()
    return provider_cls(config=config, session=session)


class TranslationClient:
    """Sends one translation to the configured provider.

    Returns the translated text, or "" on any soft failure. Callers must not
    cache an empty result.
    """

    def __init__(self, provider: TranslationProvider):
        self.provider = provider

    @classmethod
    def from_config(
        cls, config: ProviderConfig, session: requests.Session | None = None
    ) -> "TranslationClient":
        return cls(build_provider(config, session or requests.Session()))

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if not text or not target_lang:
            return ""

        size = len(text.encode("utf-8"))
        if size > MAX_TEXT_BYTES:
            log.error("Text too large to translate. Length: %s", size)
            return ""

        return self.provider.translate(text, source_lang, target_lang.lower())

    def translate_request(self, request: TranslationRequest) -> str:
        text = request.text
        if request.kind is ContentKind.TITLE:
            text = text.strip()
        return self.translate(text, request.source_lang, request.target_lang)
