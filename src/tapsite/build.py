"""Render and emit every translated page of the site."""
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from tapsite.config import PageSpec, SiteConfig, translations_dir
from tapsite.emit import emit_page
from tapsite.errors import TranslationError
from tapsite.i18n import TranslationTable, load_translations
from tapsite.render.pages import render_page
from tapsite.render.trailer import translate_trailer

logger = logging.getLogger(__name__)


def translated_pages(config: SiteConfig, names: Optional[Sequence[str]] = None) -> list[PageSpec]:
    """Pages that have a translation table, optionally restricted to *names*.

    Raises:
        KeyError: If a name in *names* is not a page of the site.
    """
    if names:
        pages = [config.page(name) for name in names]
    else:
        pages = list(config.pages)
    return [page for page in pages if page.translations is not None]


def _languages(config: SiteConfig, languages: Optional[Sequence[str]]) -> list[str]:
    if not languages:
        return list(config.languages)
    unknown = [lang for lang in languages if lang not in config.languages]
    if unknown:
        raise KeyError(f"Unknown language(s) {unknown}. Known: {list(config.languages)}")
    return [lang for lang in config.languages if lang in languages]


def _build_trailer(site_dir: Path, page: PageSpec, table: TranslationTable, languages: list[str],
                   config: SiteConfig, strict: bool) -> list[Path]:
    base = site_dir / page.filename
    try:
        template = base.read_text(encoding="utf-8")
    except OSError as e:
        raise TranslationError(base, f"Cannot read the English trailer document: {e}") from e

    written = []
    # The English page is the base document itself.
    for lang in languages:
        if lang == config.default_language:
            continue
        html = translate_trailer(template, lang, table[lang], config, strict=strict, source=base)
        written.append(emit_page(site_dir, lang, page.filename, html, config))
    return written


def build_pages(
    site_dir: Path,
    config: SiteConfig,
    pages: Optional[Sequence[str]] = None,
    languages: Optional[Sequence[str]] = None,
    strict: bool = False,
    on_page: Optional[Callable[[Path], None]] = None,
    overwrite_hand_maintained: bool = False,
) -> list[Path]:
    """Generate every (page, language) document and return the written paths.

    The default-language file of a hand-maintained page (the English landing
    page) is left alone unless *overwrite_hand_maintained* is set.
    """
    langs = _languages(config, languages)
    written: list[Path] = []
    for page in translated_pages(config, pages):
        table = load_translations(translations_dir(site_dir) / page.translations, config)
        if page.name == "trailer":
            paths = _build_trailer(site_dir, page, table, langs, config, strict)
        else:
            paths = []
            for lang in langs:
                if (lang == config.default_language and page.hand_maintained_default
                        and not overwrite_hand_maintained):
                    logger.info("%s: keeping hand-maintained %s", page.name, page.filename)
                    continue
                html = render_page(page.name, lang, table[lang], config, records=table, strict=strict)
                paths.append(emit_page(site_dir, lang, page.filename, html, config))
        for path in paths:
            if on_page is not None:
                on_page(path)
        written.extend(paths)
        logger.info("%s: %d page(s) written", page.name, len(paths))
    return written
