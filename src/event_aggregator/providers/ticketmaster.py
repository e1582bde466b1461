"""Ticketmaster Discovery API adapter."""

from __future__ import annotations

import math
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
from event_aggregator.providers.errors import PermanentProviderError
from event_aggregator.providers.formatting import (
    combine_local,
    coordinates_or_none,
    first_text,
    format_date,
    format_time,
    parse_timestamp,
    stable_event_id,
)
from event_aggregator.providers.pricing import PriceSignals, extract_price
from event_aggregator.providers.schemas import (
    TicketmasterEvent,
    TicketmasterResponse,
    TmImage,
    TmVenue,
)

logger = structlog.get_logger()

MAX_PAGE_SIZE = 200


def _best_image(images: list[TmImage]) -> str | None:
    if not images:
        return None
    return max(images, key=lambda i: (i.ratio == "16_9", i.width or 0)).url


def _venue_address(venue: TmVenue) -> str:
    parts = [
        (venue.address or {}).get("line1"),
        venue.city.name if venue.city else None,
        (venue.state or {}).get("stateCode"),
        venue.postal_code,
    ]
    return ", ".join(p for p in parts if p)


class TicketmasterAdapter(ProviderAdapter):
    name = "ticketmaster"
    high_trust = True
    base_url = "https://app.ticketmaster.com/discovery/v2"

    async def fetch(self, request: SearchRequest, origin: Coordinates) -> list[NormalizedEvent]:
        params: dict[str, Any] = {
            "apikey": self._credential,
            "latlong": f"{origin.lat},{origin.lng}",
            "radius": max(1, math.ceil(request.radius)),
            "unit": "miles",
            "size": min(self.config.max_results, MAX_PAGE_SIZE),
            "page": 0,
            "sort": "relevance,desc",
        }
        if request.keyword:
            params["keyword"] = request.keyword
        if request.preferences and len(request.preferences.favorite_categories) == 1:
            params["classificationName"] = request.preferences.favorite_categories[0]

        payload = await self._get(f"{self.base_url}/events.json", params)
        try:
            response = TicketmasterResponse.model_validate(payload)
        except ValidationError as e:
            raise PermanentProviderError(self.name, f"malformed response: {e}") from e

        items = response.embedded.events if response.embedded else []
        events = self.parse_items(items)
        logger.info("ticketmaster_search_complete", events=len(events))
        return events

    def _ticket_links(self, item: TicketmasterEvent, venue: TmVenue | None) -> list[TicketLink]:
        links: list[TicketLink] = []
        if item.url:
            links.append(TicketLink(source="Ticketmaster", link=item.url))
            public = item.sales.public if item.sales else None
            on_sale_from = parse_timestamp(public.start_date_time) if public else None
            if on_sale_from is not None and self._now().replace(tzinfo=None) >= on_sale_from:
                links.append(TicketLink(source="Buy Tickets", link=item.url))
        if item.sales:
            for presale in item.sales.presales:
                if presale.url:
                    links.append(TicketLink(source=presale.name or "Presale", link=presale.url))
        if venue and venue.box_office_info and venue.box_office_info.phone_number_detail:
            links.append(
                TicketLink(source="Box Office", link=f"tel:{venue.box_office_info.phone_number_detail}")
            )
        return links

    def parse_item(self, raw: dict[str, Any]) -> NormalizedEvent:
        item = TicketmasterEvent.model_validate(raw)
        if not item.name.strip():
            raise ValueError("event has no name")
        venue = item.embedded.venues[0] if item.embedded and item.embedded.venues else None

        start = item.dates.start if item.dates else None
        end = item.dates.end if item.dates else None
        starts_at = combine_local(start.local_date, start.local_time) if start else None
        ends_at = combine_local(end.local_date, end.local_time) if end else None

        tags = []
        for classification in item.classifications:
            for named in (classification.segment, classification.genre, classification.sub_genre):
                if named and named.name and named.name.lower() != "undefined":
                    tags.append(named.name)

        category = classify_event(
            tags=tags,
            name=item.name,
            description=item.info or "",
            starts_at=starts_at if start and start.local_time else None,
        )

        description = " ".join(
            p for p in (item.info or item.please_note, item.promoter.description if item.promoter else None) if p
        )

        links = self._ticket_links(item, venue)
        price_range = item.price_ranges[0] if item.price_ranges else None
        accessibility = (item.accessibility.info or "") if item.accessibility else ""
        price = extract_price(
            PriceSignals(
                is_free="free" in accessibility.lower(),
                structured_min=price_range.min if price_range else None,
                structured_max=price_range.max if price_range else None,
                ticket_links=[link for link in links if not link.link.startswith("tel:")],
                text=f"{item.name} {description}",
                category=category,
                venue_labels=[venue.name] if venue and venue.name else [],
            )
        )

        venue_name = first_text(venue.name if venue else None) or VENUE_TBA
        coordinates = None
        if venue and venue.location:
            coordinates = coordinates_or_none(venue.location.latitude, venue.location.longitude)

        return NormalizedEvent(
            id=stable_event_id(self.name, item.id),
            title=item.name.strip(),
            description=first_text(description) or NO_DESCRIPTION,
            category=category,
            date=format_date(starts_at),
            time=format_time(starts_at, ends_at, has_time=bool(start and start.local_time)),
            location=venue_name,
            address=_venue_address(venue) if venue else "",
            coordinates=coordinates,
            price=price,
            image=_best_image(item.images),
            organizer=Organizer(
                name=first_text(
                    item.promoter.name if item.promoter else None,
                    venue.name if venue else None,
                )
                or "Ticketmaster",
            ),
            attendees=None,
            ticket_links=links,
            tags=tags,
            source=self._source(item.id),
            starts_at=starts_at,
            ends_at=ends_at,
        )
