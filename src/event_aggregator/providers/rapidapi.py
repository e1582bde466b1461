"""RapidAPI real-time events search adapter.

The API only does coarse keyword search, so one user search fans out into
several queries (the user's keyword, then popular category synonyms),
issued one after another with a short delay to respect the provider's
rate limit.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from event_aggregator.models.event import (
    NO_DESCRIPTION,
    VENUE_TBA,
    Coordinates,
    NormalizedEvent,
    Organizer,
    TicketLink,
)
from event_aggregator.models.search import SearchRequest
from event_aggregator.providers.base import ProviderAdapter
from event_aggregator.providers.classification import classify_event
from event_aggregator.providers.errors import (
    PermanentProviderError,
    ProviderError,
    RateLimitExceededError,
)
from event_aggregator.providers.formatting import (
    coordinates_or_none,
    first_text,
    format_date,
    format_time,
    parse_timestamp,
    stable_event_id,
)
from event_aggregator.providers.pricing import PriceSignals, extract_price
from event_aggregator.providers.schemas import RapidApiEvent, RapidApiResponse

logger = structlog.get_logger()

POPULAR_CATEGORIES = (
    "concert",
    "music festival",
    "comedy show",
    "sports",
    "theater",
    "art",
    "food",
    "business",
    "conference",
)
CATEGORY_QUERIES = 4
PAGE_SIZE = 10


def build_queries(keyword: str | None, has_location: bool = True) -> list[str]:
    """Query strings for one search, de-duplicated case-insensitively."""
    candidates = [keyword.strip() if keyword and keyword.strip() else "events entertainment"]
    candidates.extend(POPULAR_CATEGORIES[:CATEGORY_QUERIES])
    if has_location:
        candidates.append("entertainment events")
    candidates.append("trending popular events")

    seen: set[str] = set()
    queries: list[str] = []
    for query in candidates:
        key = " ".join(query.lower().split())
        if key not in seen:
            seen.add(key)
            queries.append(query)
    return queries


class RapidApiAdapter(ProviderAdapter):
    name = "rapidapi"

    def __init__(self, *args: Any, host: str = "real-time-events-search.p.rapidapi.com", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._host = host

    @property
    def base_url(self) -> str:
        return f"https://{self._host}"

    def _headers(self) -> dict[str, str]:
        return {"X-RapidAPI-Key": self._credential, "X-RapidAPI-Host": self._host}

    async def fetch(self, request: SearchRequest, origin: Coordinates) -> list[NormalizedEvent]:
        if isinstance(request.location, str) and request.location.strip():
            location = request.location.strip()
        else:
            location = f"{origin.lat},{origin.lng}"

        queries = build_queries(request.keyword)
        per_query = max(PAGE_SIZE, self.config.max_results // len(queries))

        events: dict[str, NormalizedEvent] = {}
        last_error: ProviderError | None = None

        for index, query in enumerate(queries):
            if index:
                await asyncio.sleep(self.config.query_delay_seconds)
            try:
                batch = await self._run_query(query, location, per_query)
            except RateLimitExceededError:
                if not events:
                    raise
                logger.warning("rapidapi_quota_reached", completed_queries=index)
                break
            except ProviderError as e:
                last_error = e
                logger.warning("rapidapi_query_failed", query=query, error=str(e))
                continue
            for event in batch:
                events.setdefault(event.source.original_id, event)
            if len(events) >= self.config.max_results:
                break

        if not events and last_error is not None:
            raise last_error

        logger.info("rapidapi_search_complete", queries=len(queries), events=len(events))
        return list(events.values())

    async def _run_query(self, query: str, location: str, limit: int) -> list[NormalizedEvent]:
        collected: list[NormalizedEvent] = []
        start = 0
        while len(collected) < limit:
            payload = await self._get(
                f"{self.base_url}/search-events",
                {
                    "query": query,
                    "location": location,
                    "start": start,
                    "limit": PAGE_SIZE,
                    "date": "any",
                    "is_virtual": "false",
                },
                headers=self._headers(),
            )
            try:
                response = RapidApiResponse.model_validate(payload)
            except ValidationError as e:
                raise PermanentProviderError(self.name, f"malformed response: {e}") from e
            if response.status.upper() != "OK":
                raise PermanentProviderError(self.name, f"status {response.status}")
            if not response.data:
                break
            collected.extend(self.parse_items(response.data))
            if len(response.data) < PAGE_SIZE:
                break
            start += PAGE_SIZE
            await asyncio.sleep(self.config.query_delay_seconds)
        return collected[:limit]

    def parse_item(self, raw: dict[str, Any]) -> NormalizedEvent:
        item = RapidApiEvent.model_validate(raw)
        if not item.name.strip():
            raise ValueError("event has no name")
        venue = item.venue
        starts_at = parse_timestamp(item.start_time)
        ends_at = parse_timestamp(item.end_time)

        venue_labels = []
        if venue is not None:
            venue_labels = [v for v in [venue.subtype, *venue.subtypes] if v]

        category = classify_event(
            tags=item.tags,
            venue_subtypes=venue_labels,
            name=item.name,
            description=item.description or "",
            starts_at=starts_at,
        )

        tickets = [TicketLink(source=t.source or "Tickets", link=t.link) for t in item.ticket_links]
        price = extract_price(
            PriceSignals(
                is_free=bool(item.is_free or (item.price and item.price.is_free)),
                structured_min=item.price.min if item.price else None,
                structured_max=item.price.max if item.price else None,
                flat_min=item.min_price,
                flat_max=item.max_price,
                ticket_links=tickets,
                text=f"{item.name} {item.description or ''}",
                category=category,
                venue_labels=venue_labels + ([venue.name] if venue and venue.name else []),
            )
        )

        links = tickets or [TicketLink(source=i.source or "Info", link=i.link) for i in item.info_links]
        if item.link and all(link.link != item.link for link in links):
            links.insert(0, TicketLink(source=item.publisher or "Event Page", link=item.link))

        venue_name = first_text(venue.name if venue else None) or VENUE_TBA
        return NormalizedEvent(
            id=stable_event_id(self.name, item.event_id),
            title=item.name.strip(),
            description=first_text(item.description) or NO_DESCRIPTION,
            category=category,
            date=format_date(starts_at),
            time=format_time(starts_at, ends_at),
            location=venue_name,
            address=first_text(venue.full_address if venue else None) or "",
            coordinates=coordinates_or_none(venue.latitude, venue.longitude) if venue else None,
            price=price,
            image=item.thumbnail,
            organizer=Organizer(
                name=first_text(item.publisher, venue.name if venue else None) or "Event Organizer",
                avatar=item.publisher_favicon,
            ),
            attendees=None,
            ticket_links=links,
            tags=item.tags,
            source=self._source(item.event_id),
            starts_at=starts_at,
            ends_at=ends_at,
        )
