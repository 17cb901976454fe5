"""Shared fixtures: a throwaway site directory with translation tables and a trailer document."""

from __future__ import annotations

import json
import string
from pathlib import Path

import pytest

from tapsite.config import SiteConfig, default_site_config
from tapsite.render.trailer import NAV_TEXT, SCENE_TEXT, trailer_substitutions


def trailer_keys() -> list[str]:
    """Every translation key the trailer marker table refers to."""
    keys = ["title", "taglineDesc", "dayLabel"]
    formatter = string.Formatter()
    for _, replacement in NAV_TEXT + SCENE_TEXT:
        for _, field, _, _ in formatter.parse(replacement):
            if field and field not in keys:
                keys.append(field)
    return keys


def trailer_record(lang: str) -> dict[str, str]:
    record = {key: f"{key}-{lang}" for key in trailer_keys()}
    record["dayLabel"] = "Tag" if lang == "de" else "Day"
    return record


def trailer_document(config: SiteConfig) -> str:
    """A minimal English trailer page carrying exactly one copy of every marker."""
    subs = trailer_substitutions("en", trailer_record("en"), config)
    lines = ["<!DOCTYPE html>"] + [sub.markers[0] for sub in subs] + ["</html>"]
    return "\n".join(lines)


def home_record(lang: str) -> dict[str, str]:
    return {
        "htmlLang": lang,
        "title": f"Tap & Build [{lang}]",
        "heroTitle": f"Build your empire [{lang}]",
        "metaDescription": f"Idle factory tycoon [{lang}]",
        "flag": f"<{lang}-flag>",
        "langName": lang.upper(),
    }


def legal_record(lang: str) -> dict[str, object]:
    return {
        "title": f"Privacy [{lang}]",
        "heading": f"Heading [{lang}]",
        "backLink": f"Back [{lang}]",
        "section2Items": [f"first item [{lang}]", f"second item [{lang}]"],
    }


@pytest.fixture
def config() -> SiteConfig:
    return default_site_config()


@pytest.fixture
def site_dir(tmp_path: Path, config: SiteConfig) -> Path:
    """Site root with every translation table for every language and an English trailer."""
    i18n = tmp_path / "i18n"
    i18n.mkdir()
    tables = {
        "translations.json": {lang: home_record(lang) for lang in config.languages},
        "press-translations.json": {lang: {"title": f"Press [{lang}]"} for lang in config.languages},
        "privacy-translations.json": {lang: legal_record(lang) for lang in config.languages},
        "terms-translations.json": {lang: legal_record(lang) for lang in config.languages},
        "trailer-translations.json": {lang: trailer_record(lang) for lang in config.languages},
    }
    for name, table in tables.items():
        (i18n / name).write_text(json.dumps(table, ensure_ascii=False), encoding="utf-8")
    (tmp_path / "trailer.html").write_text(trailer_document(config), encoding="utf-8")
    return tmp_path
