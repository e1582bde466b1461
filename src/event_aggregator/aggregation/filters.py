"""Hard filters and sort orders applied after deduplication and scoring."""

from __future__ import annotations

import datetime as dt
import math
import re
from collections.abc import Callable, Sequence

from event_aggregator.models.event import NormalizedEvent
from event_aggregator.models.search import PriceRange, SortKey, TimePreference, UserPreferences
from event_aggregator.providers.formatting import TIME_TBA

_AMOUNT = re.compile(r"\$\s?(\d+(?:,\d{3})*(?:\.\d+)?)")

# Start-hour buckets; evening wraps past midnight
TIME_BUCKETS: dict[str, Callable[[int], bool]] = {
    "morning": lambda hour: 5 <= hour < 12,
    "afternoon": lambda hour: 12 <= hour < 17,
    "evening": lambda hour: hour >= 17 or hour < 5,
}


def is_free(price: str) -> bool:
    return "free" in price.lower()


def price_bounds(price: str) -> tuple[float, float] | None:
    """Dollar bounds of a formatted price; ``None`` when it carries no figure."""
    if is_free(price):
        return 0.0, 0.0
    amounts = [float(a.replace(",", "")) for a in _AMOUNT.findall(price)]
    if not amounts:
        return None
    return min(amounts), max(amounts)


def matches_time_preference(event: NormalizedEvent, preference: TimePreference) -> bool:
    if preference == "any":
        return True
    if event.starts_at is None or event.time == TIME_TBA:
        return False
    return TIME_BUCKETS[preference](event.starts_at.hour)


def apply_preference_filters(
    events: Sequence[NormalizedEvent], preferences: UserPreferences | None
) -> list[NormalizedEvent]:
    """Hard-exclude events that miss the free/paid or time-of-day preference."""
    if preferences is None:
        return list(events)
    kept = []
    for event in events:
        if preferences.price_preference == "free" and not is_free(event.price):
            continue
        if preferences.price_preference == "paid" and is_free(event.price):
            continue
        if not matches_time_preference(event, preferences.time_preference):
            continue
        kept.append(event)
    return kept


def apply_price_range(
    events: Sequence[NormalizedEvent], price_range: PriceRange | None
) -> list[NormalizedEvent]:
    """Keep events whose price overlaps the range; unparseable prices pass."""
    if price_range is None:
        return list(events)
    kept = []
    for event in events:
        bounds = price_bounds(event.price)
        if bounds is None:
            kept.append(event)
            continue
        low, high = bounds
        if high == 0.0:
            if price_range.min == 0:
                kept.append(event)
            continue
        if low <= price_range.max and high >= price_range.min:
            kept.append(event)
    return kept


def apply_radius(events: Sequence[NormalizedEvent], radius: float) -> list[NormalizedEvent]:
    """Drop events farther than ``radius`` miles; unknown distances pass."""
    return [e for e in events if e.distance is None or e.distance <= radius]


def _relevance_key(event: NormalizedEvent) -> tuple:
    return (
        -event.relevance_score,
        event.distance if event.distance is not None else math.inf,
        -event.source.confidence,
    )


def _date_key(event: NormalizedEvent) -> tuple:
    missing = event.starts_at is None
    return (missing, event.starts_at or dt.datetime.min, *_relevance_key(event))


def _distance_key(event: NormalizedEvent) -> tuple:
    return (event.distance if event.distance is not None else math.inf, *_relevance_key(event))


def _price_key(event: NormalizedEvent) -> tuple:
    bounds = price_bounds(event.price)
    return (bounds[0] if bounds is not None else math.inf, *_relevance_key(event))


def _popularity_key(event: NormalizedEvent) -> tuple:
    attendees = event.attendees if event.attendees is not None else -1
    return (-attendees, *_relevance_key(event))


def _alphabetical_key(event: NormalizedEvent) -> tuple:
    return (event.title.casefold(), *_relevance_key(event))


SORT_KEYS: dict[str, Callable[[NormalizedEvent], tuple]] = {
    "relevance": _relevance_key,
    "date": _date_key,
    "distance": _distance_key,
    "price": _price_key,
    "popularity": _popularity_key,
    "alphabetical": _alphabetical_key,
}


def sort_events(events: Sequence[NormalizedEvent], sort: SortKey = "relevance") -> list[NormalizedEvent]:
    """Order events by ``sort``; every order falls back to relevance on ties."""
    return sorted(events, key=SORT_KEYS[sort])
