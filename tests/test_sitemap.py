"""Unit tests for tapsite.sitemap."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path

from tapsite.config import SiteConfig
from tapsite.sitemap import build_sitemap, sitemap_entries, write_sitemap

NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9", "xhtml": "http://www.w3.org/1999/xhtml"}


def _urls(xml: str) -> list[ET.Element]:
    return ET.fromstring(xml.encode("utf-8")).findall("sm:url", NS)


class TestBuildSitemap:
    def test_one_entry_per_page_and_language(self, config: SiteConfig) -> None:
        urls = _urls(build_sitemap(config, date(2026, 3, 1)))
        assert len(urls) == len(config.pages) * len(config.languages) == 66
        locs = [u.find("sm:loc", NS).text for u in urls]
        assert len(set(locs)) == len(locs)

    def test_page_major_order(self, config: SiteConfig) -> None:
        locs = [u.find("sm:loc", NS).text for u in _urls(build_sitemap(config, date(2026, 3, 1)))]
        assert locs[0] == "https://tapandbuild.com/"
        assert locs[1] == "https://tapandbuild.com/es/"
        assert locs[11] == "https://tapandbuild.com/updates.html"
        assert locs[-1] == "https://tapandbuild.com/zh/terms.html"

    def test_alternates_and_single_x_default(self, config: SiteConfig) -> None:
        for url in _urls(build_sitemap(config, date(2026, 3, 1))):
            links = url.findall("xhtml:link", NS)
            langs = [link.get("hreflang") for link in links]
            assert langs == list(config.languages) + ["x-default"]
            loc = url.find("sm:loc", NS).text
            assert loc in [link.get("href") for link in links]
            x_default = links[-1].get("href")
            assert x_default == links[0].get("href")

    def test_metadata_from_page_table(self, config: SiteConfig) -> None:
        urls = _urls(build_sitemap(config, date(2026, 3, 1)))
        by_loc = {u.find("sm:loc", NS).text: u for u in urls}

        home = by_loc["https://tapandbuild.com/"]
        assert home.find("sm:priority", NS).text == "1.0"
        assert home.find("sm:changefreq", NS).text == "weekly"
        assert home.find("sm:lastmod", NS).text == "2026-03-01"
        assert by_loc["https://tapandbuild.com/ja/"].find("sm:priority", NS).text == "0.8"
        assert by_loc["https://tapandbuild.com/de/trailer.html"].find("sm:priority", NS).text == "0.6"
        assert by_loc["https://tapandbuild.com/privacy.html"].find("sm:changefreq", NS).text == "yearly"

    def test_entries_share_alternates_within_page(self, config: SiteConfig) -> None:
        entries = sitemap_entries(config)
        press = [e for e in entries if e.loc.endswith("press.html")]
        assert len(press) == len(config.languages)
        assert all(e.alternates == press[0].alternates for e in press)
        assert press[0].x_default == "https://tapandbuild.com/press.html"


def test_write_sitemap(tmp_path: Path, config: SiteConfig) -> None:
    path = write_sitemap(tmp_path, config, lastmod=date(2026, 1, 15))
    assert path == tmp_path / "sitemap.xml"
    xml = path.read_text(encoding="utf-8")
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert xml.count("<lastmod>2026-01-15</lastmod>") == 66


def test_write_sitemap_defaults_to_today(tmp_path: Path, config: SiteConfig) -> None:
    xml = write_sitemap(tmp_path, config).read_text(encoding="utf-8")
    assert f"<lastmod>{date.today().isoformat()}</lastmod>" in xml
