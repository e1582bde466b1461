"""Fuzzy similarity between events reported by different providers.

Titles and venue strings are normalized (lowercased, punctuation
removed, whitespace collapsed) and compared with a length-normalized
Levenshtein similarity ``1 - distance / max(len)``.  Both functions are
symmetric in their arguments.
"""

from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

from event_aggregator.aggregation.config import DedupConfig
from event_aggregator.models.event import VENUE_TBA, PublicEvent

_NON_ALNUM = re.compile(r"[^\w\s]|_", re.UNICODE)
_WHITESPACE = re.compile(r"\s+")


def normalize_for_matching(text: str | None) -> str:
    if not text:
        return ""
    result = _NON_ALNUM.sub("", text.lower())
    return _WHITESPACE.sub(" ", result).strip()


def string_similarity(a: str | None, b: str | None) -> float:
    """Normalized edit-distance similarity in ``[0, 1]``.

    Two empty strings are identical (1.0); one empty string matches
    nothing (0.0).
    """
    left = normalize_for_matching(a)
    right = normalize_for_matching(b)
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    distance = Levenshtein.distance(left, right)
    return 1.0 - distance / max(len(left), len(right))


def _location_key(event: PublicEvent) -> str:
    # "Venue TBA" carries no identity; fall back to the address
    if event.location and event.location != VENUE_TBA:
        return event.location
    return event.address


def is_duplicate(a: PublicEvent, b: PublicEvent, config: DedupConfig | None = None) -> bool:
    """Whether two events describe the same happening.

    Title similarity must exceed ``title_threshold`` and either the
    formatted dates match exactly or the venue similarity exceeds
    ``location_threshold``.
    """
    if config is None:
        config = DedupConfig()
    if string_similarity(a.title, b.title) <= config.title_threshold:
        return False
    if a.date == b.date:
        return True
    left, right = _location_key(a), _location_key(b)
    if not left or not right:
        return False
    return string_similarity(left, right) > config.location_threshold
