"""Unit tests for tapsite.config: site, page and storyboard models."""

from __future__ import annotations

from fractions import Fraction
from pathlib import Path

import pytest
from pydantic import ValidationError

from tapsite.config import (
    DEFAULT_LANGUAGES,
    CaptureSettings,
    SiteConfig,
    Storyboard,
    default_site_config,
    default_storyboard,
    get_site_dir,
    translations_dir,
)


class TestSiteConfig:
    def test_defaults(self) -> None:
        config = default_site_config()
        assert config.base_url == "https://tapandbuild.com"
        assert config.languages == DEFAULT_LANGUAGES
        assert config.languages[0] == config.default_language == "en"
        assert config.locale_map["pt"] == "pt_BR"
        assert config.locale_map["zh"] == "zh_CN"
        assert [p.name for p in config.pages] == ["home", "updates", "press", "trailer", "privacy", "terms"]

    def test_config_is_frozen(self) -> None:
        config = default_site_config()
        with pytest.raises(ValidationError):
            config.base_url = "https://example.com"

    def test_duplicate_language_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            SiteConfig(languages=("en", "es", "en"))

    def test_default_language_must_be_listed(self) -> None:
        with pytest.raises(ValidationError, match="default_language"):
            SiteConfig(languages=("es", "de"))

    def test_every_language_needs_a_locale(self) -> None:
        with pytest.raises(ValidationError, match="locale_map"):
            SiteConfig(languages=("en", "nl"))

    def test_page_lookup(self) -> None:
        config = default_site_config()
        assert config.page("press").path == "press.html"
        assert config.page("home").filename == "index.html"
        with pytest.raises(KeyError):
            config.page("blog")

    def test_home_priority_is_higher_for_default_language(self) -> None:
        home = default_site_config().page("home")
        assert home.priority_for("en", "en") == 1.0
        assert home.priority_for("ja", "en") == 0.8

    def test_flat_priority_pages(self) -> None:
        terms = default_site_config().page("terms")
        assert terms.priority_for("en", "en") == terms.priority_for("sv", "en") == 0.3


class TestStoryboard:
    def test_default_storyboard(self) -> None:
        storyboard = default_storyboard()
        assert storyboard.scene_count == 15
        assert storyboard.fps == 30
        assert storyboard.total_duration_ms == 18500
        assert storyboard.total_frames == 555

    def test_frame_period_is_exact(self) -> None:
        storyboard = Storyboard(scene_durations=(1000,), fps=30)
        assert storyboard.frame_period_ms == Fraction(100, 3)

    def test_total_frames_rounds_up(self) -> None:
        assert Storyboard(scene_durations=(1200, 1000, 1500), fps=30).total_frames == 111
        assert Storyboard(scene_durations=(1010,), fps=30).total_frames == 31

    def test_scene_shorter_than_a_frame_rejected(self) -> None:
        with pytest.raises(ValidationError, match="shorter than one frame period"):
            Storyboard(scene_durations=(1000, 20, 1000), fps=30)

    def test_empty_storyboard_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Storyboard(scene_durations=(), fps=30)


def test_capture_settings_defaults() -> None:
    settings = CaptureSettings()
    assert settings.viewport == {"width": 1920, "height": 1080}
    assert settings.realtime_tail_ms == 500
    assert settings.output_name == "trailer-output.mp4"


def test_get_site_dir_respects_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAPSITE_SITE_DIR", str(tmp_path))
    assert get_site_dir() == tmp_path.resolve()
    assert translations_dir(get_site_dir()) == tmp_path.resolve() / "i18n"


def test_get_site_dir_defaults_to_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TAPSITE_SITE_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    assert get_site_dir() == Path.cwd()
