"""Eventbrite v3 search adapter."""

from __future__ import annotations

import math
from typing import Any

import structlog
from pydantic import ValidationError

from event_aggregator.models.event import (
    NO_DESCRIPTION,
    PRICE_TBA,
    VENUE_TBA,
    Coordinates,
    NormalizedEvent,
    Organizer,
    TicketLink,
)
from event_aggregator.models.search import SearchRequest
from event_aggregator.providers.base import ProviderAdapter
from event_aggregator.providers.classification import classify_event
from event_aggregator.providers.errors import PermanentProviderError
from event_aggregator.providers.formatting import (
    coordinates_or_none,
    first_text,
    format_date,
    format_time,
    parse_timestamp,
    stable_event_id,
)
from event_aggregator.providers.pricing import TICKETS_AVAILABLE, PriceSignals, extract_price
from event_aggregator.providers.schemas import EbAddress, EventbriteEvent, EventbriteResponse

logger = structlog.get_logger()


def _address(address: EbAddress | None) -> str:
    if address is None:
        return ""
    if address.localized_address_display:
        return address.localized_address_display
    parts = [address.address_1, address.city, address.region, address.country]
    return ", ".join(p for p in parts if p)


class EventbriteAdapter(ProviderAdapter):
    name = "eventbrite"
    base_url = "https://www.eventbriteapi.com/v3"

    async def fetch(self, request: SearchRequest, origin: Coordinates) -> list[NormalizedEvent]:
        params: dict[str, Any] = {
            "location.latitude": origin.lat,
            "location.longitude": origin.lng,
            "location.within": f"{max(1, math.ceil(request.radius))}mi",
            "expand": "venue,organizer,ticket_availability,category",
            "page_size": self.config.max_results,
        }
        if request.keyword:
            params["q"] = request.keyword

        payload = await self._get(
            f"{self.base_url}/events/search/",
            params,
            headers={"Authorization": f"Bearer {self._credential}"},
        )
        try:
            response = EventbriteResponse.model_validate(payload)
        except ValidationError as e:
            raise PermanentProviderError(self.name, f"malformed response: {e}") from e

        events = self.parse_items(response.events)
        logger.info("eventbrite_search_complete", events=len(events))
        return events

    def parse_item(self, raw: dict[str, Any]) -> NormalizedEvent:
        item = EventbriteEvent.model_validate(raw)
        title = first_text(item.name.text)
        if title is None:
            raise ValueError("event has no name")

        starts_at = parse_timestamp(item.start.local if item.start else None)
        ends_at = parse_timestamp(item.end.local if item.end else None)
        description = first_text(item.description.text if item.description else None, item.summary)

        tags = [n.name for n in (item.category, item.subcategory) if n and n.name]
        category = classify_event(
            tags=tags,
            name=title,
            description=description or "",
            starts_at=starts_at,
        )

        availability = item.ticket_availability
        price = extract_price(
            PriceSignals(
                is_free=item.is_free,
                structured_min=(
                    availability.minimum_ticket_price.major_value
                    if availability and availability.minimum_ticket_price
                    else None
                ),
                structured_max=(
                    availability.maximum_ticket_price.major_value
                    if availability and availability.maximum_ticket_price
                    else None
                ),
            )
        )
        if price == PRICE_TBA:
            price = TICKETS_AVAILABLE

        venue = item.venue
        address = venue.address if venue else None
        venue_name = first_text(venue.name if venue else None) or VENUE_TBA
        organizer = item.organizer

        return NormalizedEvent(
            id=stable_event_id(self.name, item.id),
            title=title,
            description=description or NO_DESCRIPTION,
            category=category,
            date=format_date(starts_at),
            time=format_time(starts_at, ends_at),
            location=venue_name,
            address=_address(address),
            coordinates=coordinates_or_none(address.latitude, address.longitude) if address else None,
            price=price,
            image=item.logo.url if item.logo else None,
            organizer=Organizer(
                name=first_text(organizer.name if organizer else None, venue.name if venue else None)
                or "Event Organizer",
                avatar=organizer.logo.url if organizer and organizer.logo else None,
            ),
            attendees=None,
            ticket_links=[TicketLink(source="Eventbrite", link=item.url)] if item.url else [],
            tags=tags,
            source=self._source(item.id),
            starts_at=starts_at,
            ends_at=ends_at,
        )
