from __future__ import annotations

import argparse
import html
import json
import logging
from dataclasses import asdict, dataclass

import requests

from .config import Config, load_config
from .languages import LanguageCatalog
from .logging import configure_logging
from .mediawiki import MediaWikiClient, PageContent
from .orchestrator import (
    Orchestrator,
    PageTranslationRequest,
    TranslationStatus,
    build_orchestrator,
)

log = logging.getLogger("subtranslate.translate_page")


@dataclass(frozen=True)
class SubpageView:
    html: str
    page_title: str | None
    robot_policy: str
    processing: bool


def _ucfirst(text: str) -> str:
    return text[:1].upper() + text[1:]


def language_caption(catalog: LanguageCatalog, lang: str) -> str:
    return _ucfirst(catalog.get_language_name(lang) or lang)


def _page_title(title_html: str, caption: str) -> str:
    return (
        f"{title_html}"
        f'<span class="target-language"> ({html.escape(caption)})</span>'
    )


def render_subpage(
    cfg: Config,
    orchestrator: Orchestrator,
    catalog: LanguageCatalog,
    page: PageContent,
    target_lang: str,
    source_lang: str | None = None,
) -> SubpageView | None:
    """Translated view of ``page`` for the ``target_lang`` subpage.

    Returns None when the provider does not offer the language or nothing
    could be translated, so the caller falls back to its default rendering.
    """
    if not catalog.is_language_supported(target_lang):
        log.info("%s is not supported by %s", target_lang, catalog.service_type)
        return None

    request = PageTranslationRequest(
        page_id=page.page_id,
        revision_id=page.revision_id,
        source_lang=source_lang if source_lang is not None else page.page_language,
        target_lang=target_lang,
        content=page.html,
        title_text=page.title,
    )
    outcome = orchestrator.translate_page(request)
    if outcome.status is TranslationStatus.FAILED or not outcome.text:
        return None

    page_title = None
    if not cfg.suppress_language_caption:
        # translated titles come back as HTML from the provider
        title = html.escape(html.unescape(outcome.title)) if outcome.title else html.escape(page.title)
        page_title = _page_title(title, language_caption(catalog, target_lang))

    return SubpageView(
        html=outcome.text,
        page_title=page_title,
        robot_policy=cfg.robot_policy,
        processing=outcome.status is TranslationStatus.PROCESSING,
    )


def main() -> dict[str, object]:
    parser = argparse.ArgumentParser(description="Render a machine-translated view of a wiki page")
    parser.add_argument("--title", required=True, help="base page title")
    parser.add_argument("--lang", required=True, help="target language code")
    parser.add_argument("--source-lang", default=None, help="source language (default: page language)")
    parser.add_argument("--json", action="store_true", help="print the view as JSON")
    args = parser.parse_args()

    configure_logging()
    cfg = load_config()
    if not cfg.mw_api_url:
        raise RuntimeError("Missing required env var: MW_API_URL")

    session = requests.Session()
    client = MediaWikiClient(cfg.mw_api_url, cfg.provider.user_agent, session)
    page = client.get_rendered_page(args.title)

    orchestrator = build_orchestrator(cfg, session)
    catalog = LanguageCatalog(cfg.provider, session, orchestrator.cache)
    view = render_subpage(cfg, orchestrator, catalog, page, args.lang, args.source_lang)
    if view is None:
        log.warning("no translation for %s (%s)", page.title, args.lang)
        return {"status": "failed", "title": page.title}

    if args.json:
        print(json.dumps(asdict(view), ensure_ascii=False))
    else:
        print(view.html)
    status = "processing" if view.processing else "ok"
    return {"status": status, "title": page.title, "source_rev": page.revision_id}


if __name__ == "__main__":
    main()
