"""Greedy near-duplicate removal across provider result sets."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from event_aggregator.aggregation.config import DedupConfig
from event_aggregator.dedup.similarity import is_duplicate
from event_aggregator.models.event import PRICE_TBA, NormalizedEvent

logger = structlog.get_logger()


def dedup_order_key(event: NormalizedEvent, high_trust_provider: str) -> tuple:
    """Sort key: most trusted first, then a stable provider/id order."""
    source = event.source
    return (
        -source.confidence,
        0 if source.provider == high_trust_provider else 1,
        source.provider,
        source.original_id,
    )


def pick_winner(
    kept: NormalizedEvent, candidate: NormalizedEvent, high_trust_provider: str
) -> tuple[NormalizedEvent, NormalizedEvent]:
    """Return ``(winner, loser)``; the incumbent wins remaining ties."""
    if candidate.source.confidence > kept.source.confidence:
        return candidate, kept
    if (
        candidate.source.confidence == kept.source.confidence
        and candidate.source.provider == high_trust_provider
        and kept.source.provider != high_trust_provider
    ):
        return candidate, kept
    return kept, candidate


def absorb(winner: NormalizedEvent, loser: NormalizedEvent) -> NormalizedEvent:
    """Copy of ``winner`` filled in with fields only ``loser`` has."""
    update: dict = {}
    if winner.coordinates is None and loser.coordinates is not None:
        update["coordinates"] = loser.coordinates
        update["distance"] = loser.distance
    if not winner.has_description and loser.has_description:
        update["description"] = loser.description
    if not winner.image and loser.image:
        update["image"] = loser.image
    if winner.price == PRICE_TBA and loser.price != PRICE_TBA:
        update["price"] = loser.price

    missing_tags = [t for t in loser.tags if t not in winner.tags]
    if missing_tags:
        update["tags"] = [*winner.tags, *missing_tags]

    known_links = {t.link for t in winner.ticket_links}
    missing_links = [t for t in loser.ticket_links if t.link not in known_links]
    if missing_links:
        update["ticket_links"] = [*winner.ticket_links, *missing_links]

    if not update:
        return winner
    return winner.model_copy(update=update)


def dedupe(
    events: Iterable[NormalizedEvent], config: DedupConfig | None = None
) -> list[NormalizedEvent]:
    """Collapse near-duplicates, keeping the most trusted report of each.

    The input is ordered by :func:`dedup_order_key` first, so the result
    does not depend on which provider answered first.  Each candidate is
    compared against every event accepted so far; the first duplicate
    found absorbs it.

    Args:
        events: Events from all providers.
        config: Similarity thresholds and the high-trust provider.

    Returns:
        Surviving events in trust order.
    """
    if config is None:
        config = DedupConfig()
    ordered = sorted(events, key=lambda e: dedup_order_key(e, config.high_trust_provider))

    unique: list[NormalizedEvent] = []
    merged = 0
    for candidate in ordered:
        for index, kept in enumerate(unique):
            if is_duplicate(kept, candidate, config):
                winner, loser = pick_winner(kept, candidate, config.high_trust_provider)
                unique[index] = absorb(winner, loser)
                merged += 1
                logger.debug(
                    "duplicate_merged",
                    kept=winner.source.provider,
                    dropped=loser.source.provider,
                    title=winner.title,
                )
                break
        else:
            unique.append(candidate)

    if merged:
        logger.info("dedup_complete", input=len(ordered), output=len(unique), merged=merged)
    return unique
