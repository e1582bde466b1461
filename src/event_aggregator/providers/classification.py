"""Best-effort display-category classification from free-text provider data.

Evidence is scanned in a fixed order -- tags, then venue subtypes, then
the event name and description -- against a keyword table; the first
match wins.  Only when no keyword matches does the start hour decide
between "Club Events", "Day Parties" and plain "Parties".
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Iterable, Sequence

GENERAL = "General Events"

CATEGORIES = (
    "Music",
    "Arts",
    "Sports",
    "Food",
    "Business",
    "Club Events",
    "Day Parties",
    "Parties",
    GENERAL,
)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Music": (
        "music", "concert", "festival", "live music", "band", "jazz", "symphony",
        "orchestra", "concert hall", "live music venue", "music venue",
    ),
    "Arts": (
        "art", "arts", "theater", "theatre", "exhibition", "museum", "gallery",
        "comedy", "dance", "film", "performing arts",
    ),
    "Sports": (
        "sport", "game", "match", "basketball", "football", "baseball", "soccer",
        "hockey", "marathon",
    ),
    "Food": ("food", "restaurant", "culinary", "tasting", "wine", "beer", "brunch"),
    "Business": (
        "business", "conference", "networking", "workshop", "seminar", "summit", "expo",
    ),
}

_NIGHTLIFE = ("night club", "clubbing", "dj", "nightlife", "club")
_DAY_PARTY = ("day party", "party", "social")
_PARTY = ("party", "celebration")


def _pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternation = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})s?\b")


_CATEGORY_PATTERNS = {name: _pattern(words) for name, words in CATEGORY_KEYWORDS.items()}
_NIGHTLIFE_PATTERN = _pattern(_NIGHTLIFE)
_DAY_PARTY_PATTERN = _pattern(_DAY_PARTY)
_PARTY_PATTERN = _pattern(_PARTY)


def _clean(text: str) -> str:
    return text.lower().replace("_", " ").replace("-", " ")


def _match_category(texts: Sequence[str]) -> str | None:
    for text in texts:
        for name, pattern in _CATEGORY_PATTERNS.items():
            if pattern.search(text):
                return name
    return None


def classify_event(
    *,
    tags: Sequence[str] = (),
    venue_subtypes: Sequence[str] = (),
    name: str = "",
    description: str = "",
    starts_at: dt.datetime | None = None,
) -> str:
    """Derive a display category for one provider item.

    Args:
        tags: Provider tags / classification names.
        venue_subtypes: Venue type labels (``night_club``, ``concert_hall``).
        name: Event title.
        description: Event description.
        starts_at: Venue-local start, used for the club/day-party split.

    Returns:
        One of :data:`CATEGORIES`.
    """
    tag_texts = [_clean(t) for t in tags if t]
    venue_texts = [_clean(v) for v in venue_subtypes if v]
    free_texts = [_clean(t) for t in (name, description) if t]
    everything = tag_texts + venue_texts + free_texts

    for texts in (tag_texts, venue_texts, free_texts):
        category = _match_category(texts)
        if category is not None:
            return category

    if starts_at is not None:
        hour = starts_at.hour
        if (hour >= 18 or hour <= 6) and any(_NIGHTLIFE_PATTERN.search(t) for t in everything):
            return "Club Events"
        if 12 <= hour <= 18 and any(_DAY_PARTY_PATTERN.search(t) for t in everything):
            return "Day Parties"

    if any(_PARTY_PATTERN.search(t) for t in everything):
        return "Parties"
    return GENERAL
