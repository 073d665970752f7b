from __future__ import annotations

from dataclasses import dataclass

from .base import HttpProvider, dig


GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


@dataclass
class GoogleProvider(HttpProvider):
    name: str = "Google Translate"

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        body = {
            "q": text,
            "target": target_lang,
            "format": "html",
            "key": self.config.api_key or "",
        }
        if source_lang and source_lang.lower() != "auto":
            body["source"] = source_lang

        payload = self._post(GOOGLE_TRANSLATE_URL, data=body)
        if payload is None:
            return ""
        return dig(payload, "data", "translations", 0, "translatedText")
