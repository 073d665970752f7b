from __future__ import annotations

from dataclasses import dataclass

from .base import HttpProvider, dig


@dataclass
class DeepLProvider(HttpProvider):
    name: str = "DeepL"

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        body = {
            "target_lang": target_lang.upper(),
            "tag_handling": "html",
            "text": text,
        }
        if source_lang and source_lang.lower() != "auto":
            body["source_lang"] = source_lang.upper()

        payload = self._post(
            f"{self.config.url}/v2/translate",
            data=body,
            headers={"Authorization": f"DeepL-Auth-Key {self.config.api_key}"},
        )
        if payload is None:
            return ""
        return dig(payload, "translations", 0, "text")
