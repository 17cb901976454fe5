"""Tests for tapsite.build: rendering and emitting every translated page."""

from __future__ import annotations

from pathlib import Path

import pytest

from tapsite.build import build_pages, translated_pages
from tapsite.config import SiteConfig
from tapsite.errors import TemplateMarkerError, TranslationError


def test_translated_pages_skip_untranslated(config: SiteConfig) -> None:
    assert [p.name for p in translated_pages(config)] == ["home", "press", "trailer", "privacy", "terms"]
    assert [p.name for p in translated_pages(config, ["terms", "home"])] == ["terms", "home"]
    with pytest.raises(KeyError):
        translated_pages(config, ["blog"])


class TestBuildPages:
    def test_full_build(self, site_dir: Path, config: SiteConfig) -> None:
        english_trailer = (site_dir / "trailer.html").read_text(encoding="utf-8")
        written = build_pages(site_dir, config)

        # 4 templated pages in 11 languages, minus the English home page, + trailer in 10 languages
        assert len(written) == 4 * 11 - 1 + 10
        assert site_dir / "index.html" not in written
        assert (site_dir / "ja" / "index.html").exists()
        assert (site_dir / "press.html").exists()
        assert (site_dir / "zh" / "terms.html").exists()
        assert (site_dir / "es" / "trailer.html").exists()
        assert (site_dir / "trailer.html").read_text(encoding="utf-8") == english_trailer

    def test_hand_maintained_home_page_survives(self, site_dir: Path, config: SiteConfig) -> None:
        landing = site_dir / "index.html"
        landing.write_text('<form id="alpha-signup"></form>', encoding="utf-8")

        written = build_pages(site_dir, config, pages=["home"])

        assert landing.read_text(encoding="utf-8") == '<form id="alpha-signup"></form>'
        assert landing not in written
        assert len(written) == 10
        assert (site_dir / "de" / "index.html").exists()

    def test_home_page_regenerated_on_request(self, site_dir: Path, config: SiteConfig) -> None:
        landing = site_dir / "index.html"
        landing.write_text('<form id="alpha-signup"></form>', encoding="utf-8")

        written = build_pages(site_dir, config, pages=["home"], languages=["en"], overwrite_hand_maintained=True)

        assert written == [landing]
        assert "alpha-signup" not in landing.read_text(encoding="utf-8")

    def test_restricted_build(self, site_dir: Path, config: SiteConfig) -> None:
        written = build_pages(site_dir, config, pages=["privacy"], languages=["en", "fr"])
        assert written == [site_dir / "privacy.html", site_dir / "fr" / "privacy.html"]
        assert not (site_dir / "index.html").exists()

    def test_trailer_for_default_language_only_writes_nothing(self, site_dir: Path, config: SiteConfig) -> None:
        assert build_pages(site_dir, config, pages=["trailer"], languages=["en"]) == []

    def test_unknown_language(self, site_dir: Path, config: SiteConfig) -> None:
        with pytest.raises(KeyError, match="xx"):
            build_pages(site_dir, config, languages=["xx"])

    def test_rebuild_is_byte_identical(self, site_dir: Path, config: SiteConfig) -> None:
        build_pages(site_dir, config, pages=["home"])
        first = (site_dir / "de" / "index.html").read_bytes()
        build_pages(site_dir, config, pages=["home"])
        assert (site_dir / "de" / "index.html").read_bytes() == first

    def test_missing_table_aborts(self, site_dir: Path, config: SiteConfig) -> None:
        (site_dir / "i18n" / "press-translations.json").unlink()
        with pytest.raises(TranslationError, match="press-translations.json"):
            build_pages(site_dir, config, pages=["press"])

    def test_missing_trailer_document(self, site_dir: Path, config: SiteConfig) -> None:
        (site_dir / "trailer.html").unlink()
        with pytest.raises(TranslationError, match="trailer.html"):
            build_pages(site_dir, config, pages=["trailer"])

    def test_drifted_trailer_writes_nothing(self, site_dir: Path, config: SiteConfig) -> None:
        base = site_dir / "trailer.html"
        base.write_text(base.read_text(encoding="utf-8").replace(">Black Hole</div>", ""), encoding="utf-8")
        with pytest.raises(TemplateMarkerError):
            build_pages(site_dir, config, pages=["trailer"])
        assert not (site_dir / "es" / "trailer.html").exists()

    def test_strict_build_fails_on_sparse_records(self, site_dir: Path, config: SiteConfig) -> None:
        with pytest.raises(TranslationError):
            build_pages(site_dir, config, pages=["home"], strict=True)
