"""Cross-provider deduplication -- similarity tests and greedy merge."""

from event_aggregator.dedup.engine import absorb, dedupe, pick_winner
from event_aggregator.dedup.similarity import is_duplicate, normalize_for_matching, string_similarity

__all__ = [
    "absorb",
    "dedupe",
    "is_duplicate",
    "normalize_for_matching",
    "pick_winner",
    "string_similarity",
]
