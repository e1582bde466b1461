"""Relevance scoring -- distance, recency and preference signals."""

from event_aggregator.scoring.geo import distance_between, haversine_miles
from event_aggregator.scoring.relevance import apply_preference_boost, matches_favorite, score_event

__all__ = [
    "apply_preference_boost",
    "distance_between",
    "haversine_miles",
    "matches_favorite",
    "score_event",
]
