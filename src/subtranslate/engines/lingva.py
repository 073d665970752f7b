from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from ..segmenter import split_text_into_chunks
from .base import HttpProvider, dig

log = logging.getLogger("subtranslate.engines.lingva")


# Lingva rejects queries above roughly this many characters.
LINGVA_MAX_CHUNK_SIZE = 6000

TRANSLATION_QUERY = """
query Translate($source: String!, $target: String!, $query: String!) {
  translation(source: $source, target: $target, query: $query) {
    target {
      text
    }
  }
}
"""


@dataclass
class LingvaProvider(HttpProvider):
    name: str = "Lingva"
    max_chunk_size: int = LINGVA_MAX_CHUNK_SIZE

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        source = source_lang or "auto"
        chunks = split_text_into_chunks(text, self.max_chunk_size, source_lang)
        translated: list[str] = []

        for idx, chunk in enumerate(chunks):
            payload = self._post(
                f"{self.config.url}/api/graphql",
                json={
                    "query": TRANSLATION_QUERY,
                    "variables": {"source": source, "target": target_lang, "query": chunk},
                },
            )
            # Any failed chunk drops the whole page; a half-translated page is worse than none.
            if payload is None:
                return ""
            if payload.get("errors"):
                log.error(
                    "Request to Lingva had errors on chunk %s/%s: %s",
                    idx + 1,
                    len(chunks),
                    json.dumps(payload["errors"]),
                )
                return ""
            translated.append(dig(payload, "data", "translation", "target", "text"))

        # chunks were trimmed at sentence boundaries, so the separating space is restored here
        return " ".join(translated)
