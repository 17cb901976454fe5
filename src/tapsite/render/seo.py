"""Markup fragments shared by every localized page: URLs, hreflang, locales, language menu.

All functions are pure and follow ``config.languages`` order; the language
list is unique by construction so nothing is sorted or deduplicated.
"""

from __future__ import annotations

from tapsite.config import SiteConfig
from tapsite.i18n import TranslationTable
from tapsite.render.environment import MISSING_PLACEHOLDER


def page_url(config: SiteConfig, lang: str, path: str = "") -> str:
    """Absolute URL of *path* in *lang*; the default language lives at the site root."""
    if lang == config.default_language:
        return f"{config.base_url}/{path}"
    return f"{config.base_url}/{lang}/{path}"


def hreflang_tags(config: SiteConfig, path: str = "", indent: str = "    ") -> str:
    """One ``<link rel="alternate">`` per language plus the ``x-default`` fallback."""
    lines = [
        f'{indent}<link rel="alternate" hreflang="{lang}" href="{page_url(config, lang, path)}">'
        for lang in config.languages
    ]
    lines.append(
        f'{indent}<link rel="alternate" hreflang="x-default" '
        f'href="{page_url(config, config.default_language, path)}">'
    )
    return "\n".join(lines)


def og_locale_alternates(current_lang: str, config: SiteConfig, indent: str = "    ") -> str:
    return "\n".join(
        f'{indent}<meta property="og:locale:alternate" content="{config.locale_map[lang]}">'
        for lang in config.languages
        if lang != current_lang
    )


def lang_dropdown(
    current_lang: str,
    records: TranslationTable,
    config: SiteConfig,
    indent: str = " " * 20,
) -> str:
    """Language menu entries with relative ``index.html`` links usable over file://."""
    from_root = current_lang == config.default_language
    lines = []
    for lang in config.languages:
        if from_root:
            url = "index.html" if lang == config.default_language else f"./{lang}/index.html"
        else:
            url = "../index.html" if lang == config.default_language else f"../{lang}/index.html"
        record = records.get(lang, {})
        flag = record.get("flag", MISSING_PLACEHOLDER)
        name = record.get("langName", MISSING_PLACEHOLDER)
        lines.append(f'{indent}<a href="{url}">{flag} {name}</a>')
    return "\n".join(lines).strip()


def asset_prefix(lang: str, config: SiteConfig) -> str:
    """Relative prefix from a page in *lang* back to the site root."""
    return "" if lang == config.default_language else "../"


def play_store_url(lang: str, config: SiteConfig) -> str:
    base = "https://play.google.com/store/apps/details?id=com.tapandbuild.game"
    if lang == config.default_language:
        return base
    return f"{base}&hl={lang}"
