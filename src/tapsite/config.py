"""Immutable site, page and capture configuration.

Everything a renderer, the sitemap assembler or the capture driver needs is
carried by the frozen models below and passed in explicitly.  Defaults match
the production site at tapandbuild.com.
"""

from __future__ import annotations

import math
import os
from fractions import Fraction
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_LANGUAGES: tuple[str, ...] = (
    "en", "es", "pt", "de", "fr", "it", "ja", "ko", "ru", "sv", "zh",
)

DEFAULT_LOCALE_MAP: dict[str, str] = {
    "en": "en_US",
    "es": "es_ES",
    "pt": "pt_BR",
    "de": "de_DE",
    "fr": "fr_FR",
    "it": "it_IT",
    "ja": "ja_JP",
    "ko": "ko_KR",
    "ru": "ru_RU",
    "sv": "sv_SE",
    "zh": "zh_CN",
}

# 15 scenes, ~18 seconds total
DEFAULT_SCENE_DURATIONS_MS: tuple[int, ...] = (
    1200, 1000, 1500, 1200, 1200, 1200, 1000, 1000, 1000, 1200, 1000, 1200, 1800, 1000, 2000,
)

ChangeFreq = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]


class PageSpec(BaseModel):
    """One page type of the site and its sitemap metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str                                   # "" for the home page, "press.html" etc. otherwise
    changefreq: ChangeFreq
    priority: float = Field(ge=0.0, le=1.0)
    default_priority: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    translations: Optional[str] = None          # file name under <site>/i18n/, None if not rendered here
    hand_maintained_default: bool = False       # default-language file is edited by hand, not generated

    @property
    def filename(self) -> str:
        """File written for this page inside a language directory."""
        return self.path or "index.html"

    def priority_for(self, lang: str, default_language: str) -> float:
        if lang == default_language and self.default_priority is not None:
            return self.default_priority
        return self.priority


DEFAULT_PAGES: tuple[PageSpec, ...] = (
    PageSpec(name="home", path="", changefreq="weekly", priority=0.8, default_priority=1.0,
             translations="translations.json", hand_maintained_default=True),
    PageSpec(name="updates", path="updates.html", changefreq="weekly", priority=0.7),
    PageSpec(name="press", path="press.html", changefreq="monthly", priority=0.5,
             translations="press-translations.json"),
    PageSpec(name="trailer", path="trailer.html", changefreq="monthly", priority=0.6,
             translations="trailer-translations.json"),
    PageSpec(name="privacy", path="privacy.html", changefreq="yearly", priority=0.3,
             translations="privacy-translations.json"),
    PageSpec(name="terms", path="terms.html", changefreq="yearly", priority=0.3,
             translations="terms-translations.json"),
)


class SiteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = "https://tapandbuild.com"
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    locale_map: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_LOCALE_MAP))
    default_language: str = "en"
    pages: tuple[PageSpec, ...] = DEFAULT_PAGES

    @model_validator(mode="after")
    def languages_consistent(self) -> "SiteConfig":
        if len(set(self.languages)) != len(self.languages):
            raise ValueError(f"languages must be unique, got {list(self.languages)}")
        if self.default_language not in self.languages:
            raise ValueError(
                f"default_language '{self.default_language}' is not in languages {list(self.languages)}"
            )
        missing = [lang for lang in self.languages if lang not in self.locale_map]
        if missing:
            raise ValueError(f"locale_map has no entry for: {missing}")
        return self

    def page(self, name: str) -> PageSpec:
        for page in self.pages:
            if page.name == name:
                return page
        raise KeyError(f"Unknown page '{name}'. Known pages: {[p.name for p in self.pages]}")


class Storyboard(BaseModel):
    """Fixed trailer storyboard: ordered scene durations at a given frame rate."""

    model_config = ConfigDict(frozen=True)

    scene_durations: tuple[int, ...] = Field(min_length=1)
    fps: int = Field(default=30, gt=0)

    @model_validator(mode="after")
    def scenes_cover_a_frame(self) -> "Storyboard":
        # A scene shorter than one frame period could be skipped without ever being shown.
        short = [d for d in self.scene_durations if d < self.frame_period_ms]
        if short:
            raise ValueError(
                f"scene durations {short} are shorter than one frame period "
                f"({float(self.frame_period_ms):.2f}ms at {self.fps}fps)"
            )
        return self

    @property
    def scene_count(self) -> int:
        return len(self.scene_durations)

    @property
    def total_duration_ms(self) -> int:
        return sum(self.scene_durations)

    @property
    def frame_period_ms(self) -> Fraction:
        """Exact frame period; kept rational so scene boundaries never drift."""
        return Fraction(1000, self.fps)

    @property
    def total_frames(self) -> int:
        return math.ceil(Fraction(self.total_duration_ms) / self.frame_period_ms)


class CaptureSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    settle_ms: int = Field(default=1500, ge=0)
    realtime_settle_ms: int = Field(default=1000, ge=0)
    realtime_tail_ms: int = Field(default=500, ge=0)   # recorded past the storyboard, trimmed by the transcode
    progress_interval_ms: int = Field(default=500, gt=0)
    ack_timeout_ms: int = Field(default=1000, gt=0)
    output_name: str = "trailer-output.mp4"
    frames_dir_name: str = "trailer-frames"
    trailer_name: str = "trailer.html"

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


def default_site_config() -> SiteConfig:
    return SiteConfig()


def default_storyboard() -> Storyboard:
    return Storyboard(scene_durations=DEFAULT_SCENE_DURATIONS_MS, fps=30)


def get_site_dir() -> Path:
    """Return the website root that all inputs and outputs are relative to.

    Respects the TAPSITE_SITE_DIR environment variable and falls back to the
    current working directory.
    """
    env_val = os.environ.get("TAPSITE_SITE_DIR")
    if env_val is not None:
        return Path(env_val).expanduser().resolve()
    return Path.cwd()


def translations_dir(site_dir: Path) -> Path:
    return site_dir / "i18n"
