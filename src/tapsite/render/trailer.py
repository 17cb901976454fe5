"""Trailer page translation by structured marker substitution.

The trailer is authored once, in English, as ``trailer.html``.  Localized
copies are produced by replacing known English fragments ("markers") with
translated text.  The full list of (marker, replacement) pairs is built up
front and checked against the base document before anything is replaced, so
markup drift surfaces as a ``TemplateMarkerError`` instead of a silently
untranslated page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tapsite.config import SiteConfig
from tapsite.errors import TemplateMarkerError, TranslationError
from tapsite.i18n import TranslationRecord
from tapsite.render.environment import MISSING_PLACEHOLDER, escape_json_ld
from tapsite.render.seo import hreflang_tags, og_locale_alternates, page_url

logger = logging.getLogger(__name__)

TRAILER_PATH = "trailer.html"
DAILY_REWARD_DAYS = 14
DEFAULT_DESCRIPTION = "Interactive cinematic trailer for Tap & Build: Idle Factory Tycoon"
VIDEO_DESCRIPTION = (
    "Interactive cinematic trailer for Tap & Build: Idle Factory Tycoon. Experience all game "
    "features including 21 generators, prestige system, global leaderboards, and more."
)


@dataclass(frozen=True)
class Substitution:
    """Replace the first occurrence of the first marker found in the document."""

    markers: tuple[str, ...]    # alternatives for the same fragment; at least one must exist
    replacement: str


# (English fragment in trailer.html, replacement with {translationKey} fields)
NAV_TEXT: tuple[tuple[str, str], ...] = (
    ("Back to Home", "{backToHome}"),
    ("Download Free", "{downloadFree}"),
    ("Swipe or tap to navigate", "{controlsHint}"),
)

SCENE_TEXT: tuple[tuple[str, str], ...] = (
    # Scene 1 - Intro
    (">Idle Factory Tycoon</div>", ">{subtitle}</div>"),
    # Scene 2 - Tagline
    ('Tap. <span class="highlight">Build.</span> Dominate.', "{tagline}"),
    ("The ultimate idle factory tycoon. Start with a single tap, build an empire that spans dimensions.",
     "{taglineDesc}"),
    # Scene 3 - Generators
    ('🏭 <span class="highlight">21</span> Unique Generators', "{generatorsTitle}"),
    (">Conveyor Belt</div>", ">{gen1}</div>"),
    (">Assembly Line</div>", ">{gen2}</div>"),
    (">Robotic Arm</div>", ">{gen3}</div>"),
    (">Factory Floor</div>", ">{gen4}</div>"),
    (">Industrial Zone</div>", ">{gen5}</div>"),
    (">Global Network</div>", ">{gen6}</div>"),
    (">Quantum Fabricator</div>", ">{gen7}</div>"),
    (">Fusion Reactor</div>", ">{gen8}</div>"),
    (">Antimatter Engine</div>", ">{gen9}</div>"),
    (">Dyson Sphere</div>", ">{gen10}</div>"),
    (">Black Hole</div>", ">{gen11}</div>"),
    (">Multiverse Gateway</div>", ">{gen12}</div>"),
    (">Temporal Accelerator</div>", ">{gen13}</div>"),
    # Scene 4 - Prestige
    ('⭐ <span class="highlight">Prestige</span> System', "{prestigeTitle}"),
    (">PRESTIGE</div>", ">{prestigeText}</div>"),
    (">Permanent production multipliers</span>", ">{prestigeBenefit1}</span>"),
    (">Unlock ascension perks</span>", ">{prestigeBenefit2}</span>"),
    (">Compound growth: 1.08× per level</span>", ">{prestigeBenefit3}</span>"),
    (">Path to Transcendence</span>", ">{prestigeBenefit4}</span>"),
    # Scene 5 - Ascension
    ('🔱 <span class="highlight">Ascension</span> Perks', "{ascensionTitle}"),
    (">Production</div>", ">{branchProduction}</div>"),
    (">Efficient Factories<br>Bulk Discount<br>Industrial Revolution<br>Singularity</div>",
     ">{branchProductionPerks}</div>"),
    (">Tap Power</div>", ">{branchTap}</div>"),
    (">Strong Fingers<br>Precision Taps<br>Devastating Crits<br>Godlike Taps</div>", ">{branchTapPerks}</div>"),
    (">Offline</div>", ">{branchOffline}</div>"),
    (">Passive Income<br>Head Start<br>Prestige Mastery<br>Time Warp</div>", ">{branchOfflinePerks}</div>"),
    (">Luck</div>", ">{branchLuck}</div>"),
    (">Lucky Charm<br>Treasure Hunter<br>Golden Touch<br>Fortune's Favor</div>", ">{branchLuckPerks}</div>"),
    # Scene 6 - Artifacts
    ('💎 Collect <span class="highlight">Artifacts</span>', "{artifactsTitle}"),
    (">Common</div>", ">{rarityCommon}</div>"),
    (">Rare</div>", ">{rarityRare}</div>"),
    (">Epic</div>", ">{rarityEpic}</div>"),
    (">Legendary</div>", ">{rarityLegendary}</div>"),
    (">Mythic</div>", ">{rarityMythic}</div>"),
    ("Fuse 3 artifacts → 1 higher rarity", "{artifactFuse}"),
    # Scene 7 - Challenges
    ('🎯 Daily <span class="highlight">Challenges</span>', "{challengesTitle}"),
    (">Tap 10,000 times</div>", ">{challenge1}</div>"),
    (">Earn 1 Trillion</div>", ">{challenge2}</div>"),
    (">Reach 500 Combo</div>", ">{challenge3}</div>"),
    (">Buy 50 Generators</div>", ">{challenge4}</div>"),
    (">Prestige 3 Times</div>", ">{challenge5}</div>"),
    (">Weekly Bonus</div>", ">{challenge6}</div>"),
    # Scene 8 - Market
    ('📈 Live <span class="highlight">Market</span>', "{marketTitle}"),
    (">TECH INDEX</div>", ">{stockTech}</div>"),
    (">INDUSTRY ETF</div>", ">{stockIndustry}</div>"),
    (">COMMODITY</div>", ">{stockCommodity}</div>"),
    # Scene 9 - Leaderboards
    ('🏆 Global <span class="highlight">Leaderboards</span>', "{leaderboardTitle}"),
    (">Lifetime Earnings</span>", ">{lbCat1}</span>"),
    (">Highest CPS</span>", ">{lbCat2}</span>"),
    (">Total Taps</span>", ">{lbCat3}</span>"),
    (">Prestige Count</span>", ">{lbCat4}</span>"),
    (">Best Combo</span>", ">{lbCat5}</span>"),
    (">Transcendence</span>", ">{lbCat6}</span>"),
    # Scene 10 - Friend Rooms
    ('👥 Compete in <span class="highlight">Friend Rooms</span>', "{friendRoomsTitle}"),
    (">Factory Kings</span>", ">{room1Name}</span>"),
    (">Weekly Season</span>", ">{room2Name}</span>"),
    (">Trophy rewards!</div>", ">{room2Reward}</div>"),
    (">5 DAYS LEFT</div>", ">{room2TimeLeft}</div>"),
    (">Hall of Fame</span>", ">{room3Name}</span>"),
    (">Season Champions</div>", ">{room3Subtitle}</div>"),
    (">Eternal glory awaits</div>", ">{room3Desc}</div>"),
    # Scene 11 - Daily Rewards
    ('🎁 <span class="highlight">Daily</span> Rewards', "{dailyRewardsTitle}"),
    ("30 days of escalating rewards • Never miss a day!", "{dailyRewardsDesc}"),
    # Scene 12 - Lucky Wheel
    ('🎰 <span class="highlight">Lucky</span> Wheel', "{luckyWheelTitle}"),
    (">🪙 Bonus Coins</div>", ">🪙 {wheelPrize1}</div>"),
    (">⏱️ Time Boosts</div>", ">⏱️ {wheelPrize2}</div>"),
    (">💎 Rare Artifacts</div>", ">💎 {wheelPrize3}</div>"),
    (">⭐ Prestige Points</div>", ">⭐ {wheelPrize4}</div>"),
    (">🎰 Extra Spins</div>", ">🎰 {wheelPrize5}</div>"),
    (">🏆 JACKPOT!</div>", ">🏆 {wheelPrize6}</div>"),
    # Scene 13 - Respect
    ('A Game That <span class="highlight">Respects You</span>', "{respectTitle}"),
    (">No Forced Ads</div>", ">{respect1Title}</div>"),
    (">Ads are 100% optional. Watch for bonuses, never required.</div>", ">{respect1Desc}</div>"),
    (">No Paywalls</div>", ">{respect2Title}</div>"),
    (">All 21 generators, all features accessible completely FREE.</div>", ">{respect2Desc}</div>"),
    (">No Pay-to-Win</div>", ">{respect3Title}</div>"),
    (">Leaderboards are fair. Skill &amp; dedication, not wallet size.</div>", ">{respect3Desc}</div>"),
    (">No Energy System</div>", ">{respect4Title}</div>"),
    (">Play as much as you want, whenever you want.</div>", ">{respect4Desc}</div>"),
    (">One Fair Price</div>", ">{respect5Title}</div>"),
    (">$4.99 removes ads forever + bonuses. No subscriptions.</div>", ">{respect5Desc}</div>"),
    # Scene 14 - Offline
    (">Earn While You Sleep</h2>", ">{offlineTitle}</h2>"),
    (">Your factories never stop producing.<br>Come back to massive rewards!</p>", ">{offlineDesc}</p>"),
    (">+$847.3 TRILLION</div>", ">{offlineAmount}</div>"),
    # Scene 15 - CTA
    ("Your factory empire awaits", "{ctaText}"),
    (">🏭 21 Generators</span>", ">{ctaFeature1}</span>"),
    (">⭐ Prestige System</span>", ">{ctaFeature2}</span>"),
    (">🌍 Global Leaderboards</span>", ">{ctaFeature3}</span>"),
    (">💯 100% FREE</span>", ">{ctaFeature4}</span>"),
    (">DOWNLOAD FREE</button>", ">{ctaButton}</button>"),
)

# Fragments the base document may spell with a raw or an escaped ampersand.
MARKER_ALTERNATIVES: dict[str, tuple[str, ...]] = {
    ">Leaderboards are fair. Skill &amp; dedication, not wallet size.</div>": (
        ">Leaderboards are fair. Skill & dedication, not wallet size.</div>",
    ),
}


class _Lookup(dict):
    """Translation record view for ``str.format_map`` with placeholder fallback."""

    def __init__(self, record: TranslationRecord, where: str, strict: bool) -> None:
        super().__init__(record)
        self.where = where
        self.strict = strict

    def __missing__(self, key: str) -> str:
        if self.strict:
            raise TranslationError(self.where, f"missing translation key '{key}'")
        logger.warning("%s: missing translation key %r, rendering placeholder", self.where, key)
        return MISSING_PLACEHOLDER


def _head_block(lang: str, t: _Lookup, config: SiteConfig) -> str:
    canonical_url = page_url(config, lang, TRAILER_PATH)
    title = t["title"]
    description = t.get("taglineDesc") or DEFAULT_DESCRIPTION
    hreflang = hreflang_tags(config, TRAILER_PATH)
    return f"""<link rel="canonical" href="{canonical_url}">

    <!-- Hreflang Tags -->
{hreflang}

    <!-- Meta Description -->
    <meta name="description" content="{description}">
    <meta name="robots" content="index, follow">

    <!-- Open Graph -->
    <meta property="og:type" content="video.other">
    <meta property="og:url" content="{canonical_url}">
    <meta property="og:title" content="{title}">
    <meta property="og:description" content="{description}">
    <meta property="og:image" content="{config.base_url}/og-facebook.jpg">
    <meta property="og:image:width" content="1200">
    <meta property="og:image:height" content="630">
    <meta property="og:site_name" content="Tap & Build">
    <meta property="og:locale" content="{config.locale_map[lang]}">
{og_locale_alternates(lang, config)}

    <!-- Twitter Card -->
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:site" content="@HabbiGames">
    <meta name="twitter:title" content="{title}">
    <meta name="twitter:description" content="{description}">
    <meta name="twitter:image" content="{config.base_url}/og-twitter.jpg">

    <!-- VideoObject Schema -->
    <script type="application/ld+json">
    {{
        "@context": "https://schema.org",
        "@type": "VideoObject",
        "name": "{escape_json_ld(title)}",
        "description": "{VIDEO_DESCRIPTION}",
        "thumbnailUrl": "{config.base_url}/og-facebook.jpg",
        "uploadDate": "2026-01-01",
        "contentUrl": "{canonical_url}",
        "embedUrl": "{canonical_url}",
        "interactionStatistic": {{
            "@type": "InteractionCounter",
            "interactionType": {{ "@type": "WatchAction" }},
            "userInteractionCount": 0
        }},
        "publisher": {{
            "@type": "Organization",
            "name": "Habbi Games",
            "logo": {{
                "@type": "ImageObject",
                "url": "{config.base_url}/favicon-512.png"
            }}
        }}
    }}
    </script>"""


def day_label(lang: str, t: TranslationRecord, day: int) -> str:
    """Localized calendar label: "第3天" with a suffix, "3日目" in Japanese, "Tag 3" otherwise."""
    label = t["dayLabel"]
    suffix = t.get("daySuffix")
    if suffix:
        return f"{label}{day}{suffix}"
    if lang == "ja":
        return f"{day}{label}"
    return f"{label} {day}"


def trailer_substitutions(
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    strict: bool = False,
) -> list[Substitution]:
    """Build the ordered substitution list that localizes the trailer into *lang*."""
    t = _Lookup(record, f"trailer/{lang}", strict)
    english_canonical = f"{config.base_url}/{TRAILER_PATH}"

    subs = [
        Substitution(('<html lang="en">',), f'<html lang="{lang}">'),
        Substitution(("<title>Tap & Build - Cinematic Trailer</title>",), f"<title>{t['title']}</title>"),
        Substitution((f'<link rel="canonical" href="{english_canonical}">',), _head_block(lang, t, config)),
    ]
    for marker, replacement in NAV_TEXT:
        subs.append(Substitution((marker,), replacement.format_map(t)))
    if record.get("dayLabel"):
        for day in range(1, DAILY_REWARD_DAYS + 1):
            subs.append(Substitution((f">Day {day}</div>",), f">{day_label(lang, record, day)}</div>"))
    for marker, replacement in SCENE_TEXT:
        markers = (marker,) + MARKER_ALTERNATIVES.get(marker, ())
        subs.append(Substitution(markers, replacement.format_map(t)))
    return subs


def validate_markers(template: str, substitutions: list[Substitution], source: Path | str = "trailer.html") -> None:
    """Raise TemplateMarkerError listing every substitution with no marker in *template*."""
    missing = [
        " | ".join(sub.markers)
        for sub in substitutions
        if not any(marker in template for marker in sub.markers)
    ]
    if missing:
        raise TemplateMarkerError(source, missing)


def _claim(template: str, markers: tuple[str, ...], spans: list[tuple[int, int, str]]) -> Optional[tuple[int, int]]:
    """First occurrence of the first present marker not overlapping a claimed span."""
    for marker in markers:
        start = template.find(marker)
        while start != -1:
            end = start + len(marker)
            if not any(start < taken_end and taken_start < end for taken_start, taken_end, _ in spans):
                return start, end
            start = template.find(marker, start + 1)
    return None


def apply_substitutions(template: str, substitutions: list[Substitution]) -> str:
    """Replace every substitution's marker in one pass over the untouched *template*.

    Positions are located in the base document only, so a translation that
    happens to equal a later marker is never substituted again.  A marker
    listed twice claims successive occurrences.
    """
    spans: list[tuple[int, int, str]] = []
    for sub in substitutions:
        span = _claim(template, sub.markers, spans)
        if span is None:
            logger.debug("no unclaimed occurrence of %r", sub.markers[0])
            continue
        spans.append((span[0], span[1], sub.replacement))

    parts = []
    pos = 0
    for start, end, replacement in sorted(spans):
        parts.append(template[pos:start])
        parts.append(replacement)
        pos = end
    parts.append(template[pos:])
    return "".join(parts)


def translate_trailer(
    template: str,
    lang: str,
    record: TranslationRecord,
    config: SiteConfig,
    strict: bool = False,
    source: Optional[Path] = None,
) -> str:
    """Localize the English trailer document *template* into *lang*."""
    subs = trailer_substitutions(lang, record, config, strict=strict)
    validate_markers(template, subs, source or TRAILER_PATH)
    return apply_substitutions(template, subs)
