from __future__ import annotations

import logging
import re
from functools import lru_cache

from nltk.tokenize.punkt import PunktSentenceTokenizer, PunktTokenizer

log = logging.getLogger("subtranslate.segmenter")


HTML_TAG_RE = re.compile(r"<[^>]+>")
HTML_SPLIT_RE = re.compile(r"(<[^>]+>)")
TOKEN_SPLIT_RE = re.compile(r"(<[^>]+>|\s+)")

# Languages shipped with nltk's punkt_tab data.
PUNKT_LANGUAGES = {
    "cs": "czech",
    "da": "danish",
    "de": "german",
    "el": "greek",
    "en": "english",
    "es": "spanish",
    "et": "estonian",
    "fi": "finnish",
    "fr": "french",
    "it": "italian",
    "ml": "malayalam",
    "nb": "norwegian",
    "nl": "dutch",
    "no": "norwegian",
    "pl": "polish",
    "pt": "portuguese",
    "ru": "russian",
    "sl": "slovene",
    "sv": "swedish",
    "tr": "turkish",
}


@lru_cache(maxsize=None)
def sentence_tokenizer(lang: str = "") -> PunktSentenceTokenizer:
    name = PUNKT_LANGUAGES.get(lang.split("-")[0].lower())
    if name:
        try:
            return PunktTokenizer(name)
        except LookupError:
            log.debug("punkt_tab data for %s not installed; using untrained punkt", name)
    return PunktSentenceTokenizer()


def split_sentences_html_safe(text: str, lang: str = "") -> list[str]:
    """Split ``text`` into sentences without ever cutting through a tag.

    Markup is glued onto the sentence being accumulated; tags are never
    sentence boundaries.
    """
    tokenizer = sentence_tokenizer(lang)
    sentences: list[str] = []
    current = ""
    for part in HTML_SPLIT_RE.split(text):
        if not part:
            continue
        if HTML_TAG_RE.fullmatch(part):
            current += part
            continue
        if not part.strip():
            continue
        for start, end in tokenizer.span_tokenize(part):
            current += part[start:end].strip()
            if current:
                sentences.append(current)
                current = ""
    if current:
        sentences.append(current)
    return sentences


def _split_oversize(sentence: str, max_chunk_size: int) -> list[str]:
    pieces: list[str] = []
    current = ""
    for token in TOKEN_SPLIT_RE.split(sentence):
        if not token:
            continue
        if len(current) + len(token) <= max_chunk_size:
            current += token
            continue
        if current.strip():
            pieces.append(current.strip())
        current = ""
        if token.isspace():
            continue
        if HTML_TAG_RE.fullmatch(token):
            # a tag is never cut, even when it alone exceeds the limit
            current = token
            continue
        while len(token) > max_chunk_size:
            pieces.append(token[:max_chunk_size])
            token = token[max_chunk_size:]
        current = token
    if current.strip():
        pieces.append(current.strip())
    return pieces


def split_text_into_chunks(text: str, max_chunk_size: int, lang: str = "") -> list[str]:
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be positive")

    chunks: list[str] = []
    current = ""
    for sentence in split_sentences_html_safe(text, lang):
        parts = [sentence]
        if len(sentence) > max_chunk_size:
            parts = _split_oversize(sentence, max_chunk_size)
        for part in parts:
            if not current:
                current = part
            elif len(current) + 1 + len(part) <= max_chunk_size:
                current = f"{current} {part}"
            else:
                chunks.append(current)
                current = part
    if current:
        chunks.append(current)
    return chunks
