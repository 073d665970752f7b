from subtranslate.cache import CachePolicy, CacheStore, MemoryCacheBackend
from subtranslate.client import TranslationClient
from subtranslate.config import Config, ProviderConfig
from subtranslate.languages import LanguageCatalog
from subtranslate.mediawiki import PageContent
from subtranslate.orchestrator import Orchestrator
from subtranslate.translate_page import render_subpage


PAGE = PageContent(page_id=1, revision_id=5, html="<p>Hello.</p>", title="Main Page", page_language="en")

class FakeProvider:
    name = "fake"

    def __init__(self, results):
        self.results = results
        self.calls = []

    def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        return self.results.get(text, "")


class FakeResponse:
    status_code = 200
    reason = "OK"

    def __init__(self, payload):
        self._payload = payload

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, payload):
        self.payload = payload

    def get(self, url, params=None, headers=None, timeout=None, proxies=None):
        return FakeResponse(self.payload)


LANGUAGES = [{"code": "fr", "name": "français"}, {"code": "de", "name": ""}]


def _setup(results, provider=None, **cfg_overrides):
    provider_cfg = ProviderConfig(type="libretranslate", url="https://lt.example")
    cfg = Config(provider=provider_cfg, **cfg_overrides)
    cache = CacheStore(MemoryCacheBackend(), CachePolicy.expiring(60))
    provider = provider or FakeProvider(results)
    orch = Orchestrator(TranslationClient(provider), cache, translate_title=cfg.translate_title)
    catalog = LanguageCatalog(provider_cfg, FakeSession(LANGUAGES), cache)
    return cfg, orch, catalog


def test_render_subpage_with_caption():
    cfg, orch, catalog = _setup(
        {"<p>Hello.</p>": "<p>Bonjour.</p>", "Main Page": "Page d'accueil"},
        robot_policy="noindex,nofollow",
    )

    view = render_subpage(cfg, orch, catalog, PAGE, "fr")

    assert view.html == "<p>Bonjour.</p>"
    assert view.page_title == (
        'Page d&#x27;accueil<span class="target-language"> (Français)</span>'
    )
    assert view.robot_policy == "noindex,nofollow"
    assert view.processing is False


def test_render_subpage_title_with_entities_is_escaped_once():
    cfg, orch, catalog = _setup({"<p>Hello.</p>": "<p>Bonjour.</p>", "Main Page": "Page d&#39;accueil"})

    view = render_subpage(cfg, orch, catalog, PAGE, "fr")

    assert view.page_title == (
        'Page d&#x27;accueil<span class="target-language"> (Français)</span>'
    )
    assert "&amp;" not in view.page_title


def test_render_subpage_caption_falls_back_to_code():
    cfg, orch, catalog = _setup({"<p>Hello.</p>": "<p>Hallo.</p>"}, translate_title=False)

    view = render_subpage(cfg, orch, catalog, PAGE, "de")

    assert view.page_title == 'Main Page<span class="target-language"> (De)</span>'


def test_render_subpage_unsupported_language_skips_translation():
    provider = FakeProvider({"<p>Hello.</p>": "<p>???</p>"})
    cfg, orch, catalog = _setup({}, provider=provider)

    assert render_subpage(cfg, orch, catalog, PAGE, "qq") is None
    assert provider.calls == []


def test_render_subpage_suppressed_caption():
    cfg, orch, catalog = _setup({"<p>Hello.</p>": "<p>Bonjour.</p>"}, suppress_language_caption=True)

    view = render_subpage(cfg, orch, catalog, PAGE, "fr")

    assert view.page_title is None


def test_render_subpage_failure_falls_through():
    cfg, orch, catalog = _setup({})

    assert render_subpage(cfg, orch, catalog, PAGE, "fr") is None
