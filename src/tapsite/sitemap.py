"""sitemap.xml with one <url> per (page, language) and hreflang cross-links."""
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from tapsite.config import SiteConfig
from tapsite.emit import write_text_atomic
from tapsite.render.environment import create_environment
from tapsite.render.seo import page_url

logger = logging.getLogger(__name__)

SITEMAP_FILENAME = "sitemap.xml"


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    changefreq: str
    priority: float
    alternates: tuple[tuple[str, str], ...]    # (language, url) for every language of the page
    x_default: str


def sitemap_entries(config: SiteConfig) -> list[SitemapEntry]:
    """Page-major list of entries: every language of the first page, then the next page."""
    entries = []
    for page in config.pages:
        alternates = tuple((lang, page_url(config, lang, page.path)) for lang in config.languages)
        x_default = page_url(config, config.default_language, page.path)
        for lang, loc in alternates:
            entries.append(SitemapEntry(
                loc=loc,
                changefreq=page.changefreq,
                priority=page.priority_for(lang, config.default_language),
                alternates=alternates,
                x_default=x_default,
            ))
    return entries


def build_sitemap(config: SiteConfig, lastmod: date) -> str:
    template = create_environment(strict=True).get_template("sitemap.xml.j2")
    return template.render(entries=sitemap_entries(config), lastmod=lastmod.isoformat())


def write_sitemap(site_dir: Path, config: SiteConfig, lastmod: Optional[date] = None) -> Path:
    """Write ``site_dir/sitemap.xml`` stamped with *lastmod* (today when omitted)."""
    path = site_dir / SITEMAP_FILENAME
    xml = build_sitemap(config, lastmod or date.today())
    write_text_atomic(path, xml)
    logger.info("Generated %s with %d URLs", SITEMAP_FILENAME, len(config.pages) * len(config.languages))
    return path
