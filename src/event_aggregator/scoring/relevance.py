"""Relevance scoring from proximity, recency and user preferences.

Every score is clamped to ``[0, 1]``:

- base ``config.base`` (0.5)
- proximity bonus from the first band whose ``max_miles`` covers the distance
- recency bonus from the first band whose ``max_days`` covers the time
  until the event starts; events in the past get nothing
- a flat preference boost for favourite categories, applied afterwards
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from event_aggregator.aggregation.config import ScoringConfig
from event_aggregator.models.event import NormalizedEvent


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def proximity_bonus(distance: float | None, config: ScoringConfig) -> float:
    if distance is None:
        return 0.0
    for band in config.proximity:
        if distance <= band.max_miles:
            return band.bonus
    return 0.0


def recency_bonus(
    starts_at: dt.datetime | None, now: dt.datetime, config: ScoringConfig
) -> float:
    if starts_at is None or starts_at < now:
        return 0.0
    days_until = (starts_at - now).total_seconds() / 86400
    for band in config.recency:
        if days_until <= band.max_days:
            return band.bonus
    return 0.0


def score_event(
    event: NormalizedEvent,
    now: dt.datetime,
    config: ScoringConfig | None = None,
) -> float:
    """Base relevance score for one event.

    Args:
        event: Event with ``distance`` already computed (miles, or ``None``).
        now: Reference time, naive venue-local like ``event.starts_at``.
        config: Scoring bands; defaults when omitted.

    Returns:
        A float in ``[0, 1]``.
    """
    if config is None:
        config = ScoringConfig()
    total = (
        config.base
        + proximity_bonus(event.distance, config)
        + recency_bonus(event.starts_at, now, config)
    )
    return _clamp(total)


def matches_favorite(category: str, favorites: Sequence[str]) -> bool:
    """Case-insensitive substring match of any favourite against the category."""
    lowered = category.lower()
    return any(f.strip() and f.strip().lower() in lowered for f in favorites)


def apply_preference_boost(
    score: float,
    category: str,
    favorites: Sequence[str],
    config: ScoringConfig | None = None,
) -> float:
    if config is None:
        config = ScoringConfig()
    if matches_favorite(category, favorites):
        return _clamp(score + config.preference_boost)
    return _clamp(score)
