import re

import pytest

from subtranslate.segmenter import split_sentences_html_safe, split_text_into_chunks


TAG_RE = re.compile(r"<[^>]+>")


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _assert_tags_intact(chunk: str) -> None:
    leftover = TAG_RE.sub("", chunk)
    assert "<" not in leftover and ">" not in leftover, chunk


def test_tags_are_glued_to_sentences():
    text = "<p>One two. Three four.</p>"
    sentences = split_sentences_html_safe(text)
    assert sentences[0].startswith("<p>One two.")
    assert sentences[-1].endswith("</p>")
    assert _squash("".join(sentences)) == _squash(text)


def test_empty_text_has_no_sentences():
    assert split_sentences_html_safe("") == []
    assert split_sentences_html_safe("   ") == []
    assert split_text_into_chunks("", 100) == []


def test_chunks_partition_text_within_limit():
    text = "".join(
        f'<p class="para-{i}">Sentence number {i} is here. It has <b>bold</b> words.</p>\n'
        for i in range(200)
    )
    chunks = split_text_into_chunks(text, 300)

    assert len(chunks) > 1
    assert all(chunks)
    assert all(len(chunk) <= 300 for chunk in chunks)
    for chunk in chunks:
        _assert_tags_intact(chunk)
    assert _squash(" ".join(chunks)) == _squash(text)
    assert chunks[0].startswith('<p class="para-0">Sentence number 0')


def test_short_text_is_single_chunk():
    text = "Hello world. How are you?"
    assert split_text_into_chunks(text, 6000) == ["Hello world. How are you?"]


def test_oversize_sentence_is_split_without_cutting_tags():
    words = "<p>" + " ".join(f"word{i}" for i in range(100)) + " <i>x</i> tail</p>"
    chunks = split_text_into_chunks(words, 50)

    assert len(chunks) > 1
    assert all(len(chunk) <= 50 for chunk in chunks)
    for chunk in chunks:
        _assert_tags_intact(chunk)
    assert _squash(" ".join(chunks)) == _squash(words)


def test_unbroken_run_is_hard_split():
    chunks = split_text_into_chunks("a" * 25, 10)
    assert chunks == ["a" * 10, "a" * 10, "a" * 5]


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        split_text_into_chunks("text", 0)
