"""Temporality classification: does a query need live web grounding?"""

from __future__ import annotations

import re

from cao_engine.models.domain import TemporalityResult

CURRENT_PATTERNS = [
    re.compile(r"\bnow\b", re.I),
    re.compile(r"\btoday\b", re.I),
    re.compile(r"\btonight\b", re.I),
    re.compile(r"\bthis week\b", re.I),
    re.compile(r"\bthis weekend\b", re.I),
    re.compile(r"\bthis month\b", re.I),
    re.compile(r"\bcurrently?\b", re.I),
    re.compile(r"\bplaying now\b", re.I),
    re.compile(r"\bopen now\b", re.I),
    re.compile(r"\bnew release", re.I),
    re.compile(r"\bnew album", re.I),
    re.compile(r"\bnew movie", re.I),
    re.compile(r"\bjust (released|opened|came out)", re.I),
    re.compile(r"\brecent(ly)?\b", re.I),
    re.compile(r"\blatest\b", re.I),
    re.compile(r"\b(202[4-9]|20[3-9]\d)\b"),  # years 2024+
    re.compile(r"\bupcoming\b", re.I),
    re.compile(r"\btrending\b", re.I),
    re.compile(r"\bhot right now\b", re.I),
    re.compile(r"\bin theaters\b", re.I),
    re.compile(r"\bnow streaming\b", re.I),
    re.compile(r"\bjust added\b", re.I),
]

EVERGREEN_PATTERNS = [
    re.compile(r"\bbest\b", re.I),
    re.compile(r"\btop\s+\d+", re.I),
    re.compile(r"\bclassic", re.I),
    re.compile(r"\bfavorite", re.I),
    re.compile(r"\bpopular\b", re.I),
    re.compile(r"\brecommend", re.I),
    re.compile(r"\b(good|great)\s+(for|place|restaurant|movie)", re.I),
    re.compile(r"\blike\s+\w+$", re.I),  # "movies like X"
    re.compile(r"\bsimilar to\b", re.I),
    re.compile(r"\bhistoric", re.I),
    re.compile(r"\boldest\b", re.I),
    re.compile(r"\btimeless\b", re.I),
    re.compile(r"\b(90s|80s|70s|60s)\b", re.I),
    re.compile(r"\b19\d{2}\b"),
    re.compile(r"\b20[01]\d\b|\b202[0-3]\b"),
    re.compile(r"\ball[- ]time\b", re.I),
    re.compile(r"\bever\s+made\b", re.I),
]

DOMAIN_DEFAULTS: dict[str, str] = {
    "places": "current",
    "movies": "evergreen",
    "music": "evergreen",
    "events": "current",
    "videos": "evergreen",
    "articles": "current",
    "books": "evergreen",
    "news": "current",
    "general": "evergreen",
}


def classify_temporality(query: str, domain: str) -> TemporalityResult:
    current_score = sum(1 for p in CURRENT_PATTERNS if p.search(query))
    evergreen_score = sum(1 for p in EVERGREEN_PATTERNS if p.search(query))

    if current_score > evergreen_score:
        return TemporalityResult(
            type="current",
            confidence="high" if current_score >= 2 else "medium",
            reason=f"Query contains {current_score} temporal indicators",
            use_grounding=True,
        )

    if evergreen_score > current_score:
        return TemporalityResult(
            type="evergreen",
            confidence="high" if evergreen_score >= 2 else "medium",
            reason=f"Query contains {evergreen_score} evergreen indicators",
            use_grounding=False,
        )

    default_type = DOMAIN_DEFAULTS.get(domain, "evergreen")
    return TemporalityResult(
        type=default_type,
        confidence="low",
        reason=f"Using domain default for {domain}",
        use_grounding=default_type == "current",
    )


def needs_grounding(query: str, domain: str) -> bool:
    return classify_temporality(query, domain).use_grounding
