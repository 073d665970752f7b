import pytest

import subtranslate.mediawiki as mediawiki
from subtranslate.mediawiki import MediaWikiClient, MediaWikiError


class FakeResponse:
    def __init__(self, payload: dict):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses: list[dict]):
        self.responses = responses
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append(("GET", url, params))
        return FakeResponse(self.responses.pop(0))

    def post(self, url, data=None, headers=None, timeout=None):
        self.requests.append(("POST", url, data))
        return FakeResponse(self.responses.pop(0))


def test_get_rendered_page():
    responses = [
        {
            "query": {
                "pages": [
                    {"pageid": 2, "title": "Main Page", "lastrevid": 9, "pagelanguage": "en"}
                ]
            }
        },
        {"parse": {"title": "Main Page", "revid": 9, "text": "<p>Hello world.</p>"}},
    ]
    session = FakeSession(responses)
    client = MediaWikiClient("https://example.org/api.php", "ua", session)

    page = client.get_rendered_page("Main Page")

    assert page.page_id == 2
    assert page.revision_id == 9
    assert page.html == "<p>Hello world.</p>"
    assert page.page_language == "en"
    assert session.requests[1][2]["oldid"] == 9


def test_missing_page_raises():
    session = FakeSession([{"query": {"pages": [{"title": "Nope", "missing": True}]}}])
    client = MediaWikiClient("https://example.org/api.php", "ua", session)

    with pytest.raises(MediaWikiError):
        client.get_rendered_page("Nope")


def test_request_retries_on_ratelimit(monkeypatch):
    monkeypatch.setattr(mediawiki.time, "sleep", lambda s: None)
    responses = [
        {"error": {"code": "ratelimited", "info": "rate limit"}},
        {"query": {"pages": [{"pageid": 1, "title": "A", "lastrevid": 3}]}},
    ]
    session = FakeSession(responses)
    client = MediaWikiClient("https://example.org/api.php", "ua", session)

    page = client.get_page_info("A")

    assert page["lastrevid"] == 3
    assert len(session.requests) == 2


def test_api_error_raises():
    session = FakeSession([{"error": {"code": "badtitle", "info": "Bad title"}}])
    client = MediaWikiClient("https://example.org/api.php", "ua", session)

    with pytest.raises(MediaWikiError):
        client.get_page_info("<>")
