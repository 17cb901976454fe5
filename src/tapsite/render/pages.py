"""Localized page rendering: (language, translation record) -> complete HTML document.

Each ``render_*`` function is pure.  File writes live in :mod:`tapsite.emit`.
"""

from __future__ import annotations

from typing import Callable, Optional

from jinja2 import Environment, UndefinedError

from tapsite.config import SiteConfig
from tapsite.errors import TranslationError
from tapsite.i18n import TranslationRecord, TranslationTable
from tapsite.render.environment import create_environment
from tapsite.render.seo import (
    asset_prefix,
    hreflang_tags,
    lang_dropdown,
    og_locale_alternates,
    page_url,
    play_store_url,
)

SOFTWARE_VERSION = "1.3.2"
DISCORD_URL = "https://discord.gg/YxUGEz8GTZ"
YOUTUBE_TRAILER_ID = "9qrewptoRwY"

HOME_FEATURE_ICONS = ("🔧", "🎯", "💎", "🌟", "👔", "🏆", "🎁", "📴")
HOME_FAQ_NUMBERS = (1, 2, 3, 4)

PRESS_FACTS = (
    "GameTitle", "Developer", "ReleaseDate", "Platforms",
    "Price", "Genre", "Languages", "Version",
)
PRESS_FEATURE_ICONS = ("🏭", "⭐", "✨", "📊", "👔", "🎯", "🏆", "👥", "🔥", "😴", "🎰", "☁️")
PRESS_SCREENSHOTS = (
    "1_main_factory", "2_generators_tab", "3_upgrades_panel", "4_challenges",
    "5_prestige", "6_market", "7_ascension_perks", "8_leaderboard",
)
PRESS_ICON_SIZES = (512, 192, 96)


def _base_context(lang: str, record: TranslationRecord, config: SiteConfig, path: str) -> dict:
    return {
        "lang": lang,
        "t": record,
        "base_url": config.base_url,
        "canonical_url": page_url(config, lang, path),
        "hreflang": hreflang_tags(config, path),
        "asset_prefix": asset_prefix(lang, config),
        "play_store_url": play_store_url(lang, config),
    }


def _render(env: Environment, template_name: str, page: str, lang: str, context: dict) -> str:
    try:
        return env.get_template(template_name).render(**context)
    except UndefinedError as exc:
        raise TranslationError(f"{page}/{lang}", str(exc)) from exc


def render_home(
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    records: Optional[TranslationTable] = None,
    env: Optional[Environment] = None,
) -> str:
    """Render the landing page.

    *records* is the full home translation table, used for the flag and
    language name of every entry in the language menu.  When omitted only
    *record* is known and the other entries show placeholders.
    """
    env = env or create_environment()
    context = _base_context(lang, record, config, "")
    context.update(
        locale=config.locale_map[lang],
        og_alternates=og_locale_alternates(lang, config),
        dropdown=lang_dropdown(lang, records if records is not None else {lang: record}, config),
        software_version=SOFTWARE_VERSION,
        discord_url=DISCORD_URL,
        feature_icons=HOME_FEATURE_ICONS,
        faq_numbers=HOME_FAQ_NUMBERS,
    )
    return _render(env, "home.html.j2", "home", lang, context)


def render_press(
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    records: Optional[TranslationTable] = None,
    env: Optional[Environment] = None,
) -> str:
    env = env or create_environment()
    context = _base_context(lang, record, config, config.page("press").path)
    context.update(
        facts=PRESS_FACTS,
        feature_icons=PRESS_FEATURE_ICONS,
        screenshots=PRESS_SCREENSHOTS,
        icon_sizes=PRESS_ICON_SIZES,
        youtube_id=YOUTUBE_TRAILER_ID,
    )
    return _render(env, "press.html.j2", "press", lang, context)


def _render_legal(page: str, lang: str, record: TranslationRecord, config: SiteConfig,
                  env: Optional[Environment]) -> str:
    env = env or create_environment()
    context = _base_context(lang, record, config, config.page(page).path)
    context["home_url"] = "/" if lang == config.default_language else f"/{lang}/"
    return _render(env, f"{page}.html.j2", page, lang, context)


def render_privacy(
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    records: Optional[TranslationTable] = None,
    env: Optional[Environment] = None,
) -> str:
    return _render_legal("privacy", lang, record, config, env)


def render_terms(
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    records: Optional[TranslationTable] = None,
    env: Optional[Environment] = None,
) -> str:
    return _render_legal("terms", lang, record, config, env)


PAGE_RENDERERS: dict[str, Callable[..., str]] = {
    "home": render_home,
    "press": render_press,
    "privacy": render_privacy,
    "terms": render_terms,
}


def render_page(
    page: str,
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    records: Optional[TranslationTable] = None,
    strict: bool = False,
) -> str:
    """Render one of the templated pages by name.

    Raises:
        KeyError: If *page* has no template renderer (the trailer is translated
            from its own base document, see :mod:`tapsite.render.trailer`).
        TranslationError: In strict mode, if *record* lacks a key the template uses.
    """
    try:
        renderer = PAGE_RENDERERS[page]
    except KeyError:
        raise KeyError(f"No template renderer for page '{page}'. Known: {sorted(PAGE_RENDERERS)}") from None
    return renderer(lang, record, config, records=records, env=create_environment(strict=strict))
