"""Aggregation orchestrator: one search request in, one result envelope out.

Runs the full pipeline:
1. Resolve the search origin (fails fast with an ``error`` envelope)
2. Fan out to every provider adapter concurrently and settle all outcomes
3. Tag events with their distance from the origin
4. Deduplicate across providers
5. Score, boost favourite categories, apply hard filters
6. Sort, paginate and strip internal metadata

:meth:`EventAggregator.aggregate` never raises.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import structlog

from event_aggregator.aggregation.config import AggregationConfig
from event_aggregator.aggregation.filters import (
    apply_preference_filters,
    apply_price_range,
    apply_radius,
    sort_events,
)
from event_aggregator.dedup.engine import dedupe
from event_aggregator.geocoding.resolver import GeocodingResolver
from event_aggregator.models.event import Coordinates, NormalizedEvent
from event_aggregator.models.search import ResultEnvelope, SearchRequest
from event_aggregator.providers.base import ProviderAdapter, ProviderOutcome
from event_aggregator.scoring.geo import distance_between
from event_aggregator.scoring.relevance import apply_preference_boost, score_event

logger = structlog.get_logger()

LOCATION_ERROR = "Could not determine location. Please enter a city, address or coordinates."
NO_PROVIDERS_ERROR = "No event providers are configured."
ALL_PROVIDERS_FAILED_ERROR = "All event providers failed. Please try again later."
UNEXPECTED_ERROR = "Event search failed unexpectedly. Please try again later."
PAGE_SIZE_ERROR = "Requested page size exceeds the configured maximum."

_FAILED_STATUSES = {"error", "timeout", "rate_limited"}


@dataclass
class RankedEvents:
    """Filtered, sorted events before pagination; ``error`` set on failure."""

    events: list[NormalizedEvent] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    error: str | None = None


class EventAggregator:
    """Top-level entry point combining geocoding, providers, dedup and scoring.

    All collaborators are injected so tests can use fresh instances.
    """

    def __init__(
        self,
        resolver: GeocodingResolver,
        adapters: Sequence[ProviderAdapter],
        config: AggregationConfig | None = None,
        now: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        self._resolver = resolver
        self._adapters = list(adapters)
        self._config = config or AggregationConfig()
        self._now = now

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    async def aggregate(self, request: SearchRequest) -> ResultEnvelope:
        """Run the pipeline and return one page of results."""
        size = request.size
        if size > self._config.pagination.max_size:
            logger.warning(
                "aggregation_page_too_large",
                size=size,
                max_size=self._config.pagination.max_size,
            )
            return ResultEnvelope.failure(request.page, PAGE_SIZE_ERROR)
        try:
            ranked = await self.rank(request)
        except Exception as e:
            logger.exception("aggregation_failed", error=str(e))
            return ResultEnvelope.failure(request.page, UNEXPECTED_ERROR)
        if ranked.error is not None:
            return ResultEnvelope.failure(request.page, ranked.error)

        total = len(ranked.events)
        start = request.page * size
        page_events = ranked.events[start : start + size]

        logger.info(
            "aggregation_complete",
            total=total,
            page=request.page,
            returned=len(page_events),
            sources=ranked.sources,
        )
        return ResultEnvelope(
            events=[e.strip_source_metadata() for e in page_events],
            total_count=total,
            page=request.page,
            total_pages=math.ceil(total / size),
            sources=ranked.sources,
        )

    async def rank(self, request: SearchRequest) -> RankedEvents:
        """Every surviving event for ``request``, in final order, metadata intact."""
        origin = await self._resolver.resolve(request.location)
        if origin is None:
            logger.warning("aggregation_location_unresolved", location=str(request.location))
            return RankedEvents(error=LOCATION_ERROR)

        available = [a for a in self._adapters if a.is_available()]
        if not available:
            logger.warning("aggregation_no_providers", configured=len(self._adapters))
            return RankedEvents(error=NO_PROVIDERS_ERROR)

        outcomes = await self._search_all(available, request, origin)
        if all(o.status in _FAILED_STATUSES for o in outcomes):
            return RankedEvents(error=ALL_PROVIDERS_FAILED_ERROR)

        collected = [
            self._with_distance(event, origin) for outcome in outcomes for event in outcome.events
        ]
        unique = dedupe(collected, self._config.dedup)
        scored = self._score(unique, request)

        filtered = apply_radius(scored, request.radius)
        filtered = apply_preference_filters(filtered, request.preferences)
        filtered = apply_price_range(filtered, request.price_range)
        ordered = sort_events(filtered, request.sort)

        contributing = {e.source.provider for e in ordered}
        logger.info(
            "aggregation_ranked",
            collected=len(collected),
            unique=len(unique),
            filtered=len(ordered),
        )
        return RankedEvents(
            events=ordered,
            sources=[a.name for a in available if a.name in contributing],
        )

    async def _search_all(
        self,
        adapters: Sequence[ProviderAdapter],
        request: SearchRequest,
        origin: Coordinates,
    ) -> list[ProviderOutcome]:
        results = await asyncio.gather(
            *(adapter.search(request, origin) for adapter in adapters),
            return_exceptions=True,
        )

        outcomes: list[ProviderOutcome] = []
        for adapter, result in zip(adapters, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(
                    "provider_search_escaped",
                    provider=adapter.name,
                    error=str(result),
                )
                result = ProviderOutcome(provider=adapter.name, status="error", error=str(result))
            logger.info(
                "provider_status",
                provider=result.provider,
                status=result.status,
                result_count=len(result.events),
                latency_ms=result.latency_ms,
                error=result.error,
            )
            outcomes.append(result)
        return outcomes

    @staticmethod
    def _with_distance(event: NormalizedEvent, origin: Coordinates) -> NormalizedEvent:
        return event.model_copy(update={"distance": distance_between(origin, event.coordinates)})

    def _score(
        self, events: Sequence[NormalizedEvent], request: SearchRequest
    ) -> list[NormalizedEvent]:
        now = self._now()
        favorites = request.preferences.favorite_categories if request.preferences else []
        scoring = self._config.scoring
        scored = []
        for event in events:
            score = score_event(event, now, scoring)
            if favorites:
                score = apply_preference_boost(score, event.category, favorites, scoring)
            scored.append(event.model_copy(update={"relevance_score": score}))
        return scored
