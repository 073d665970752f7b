from __future__ import annotations

from dataclasses import dataclass

from ..languages import to_provider_code
from .base import HttpProvider, dig


@dataclass
class LibreTranslateProvider(HttpProvider):
    name: str = "LibreTranslate"

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        body = {
            "q": text,
            "source": to_provider_code("libretranslate", source_lang or "auto"),
            "target": to_provider_code("libretranslate", target_lang),
            "format": "html",
        }
        if self.config.api_key:
            body["api_key"] = self.config.api_key

        payload = self._post(f"{self.config.url}/translate", data=body)
        if payload is None:
            return ""
        return dig(payload, "translatedText")
