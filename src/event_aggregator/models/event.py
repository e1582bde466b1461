"""Canonical event records shared by every provider adapter.

``NormalizedEvent`` carries aggregation-internal metadata (source,
relevance score, distance, parsed timestamps) alongside the display
fields.  ``PublicEvent`` is the same record with that metadata stripped;
it is what leaves the orchestrator.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NO_DESCRIPTION = "No description available"
VENUE_TBA = "Venue TBA"
PRICE_TBA = "Price TBA"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)


class Organizer(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    avatar: str | None = None


class TicketLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    link: str


class SourceMetadata(BaseModel):
    """Which provider contributed an event and how much it is trusted."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    provider: str
    original_id: str
    confidence: float = Field(ge=0.0, le=1.0)
    last_updated: dt.datetime


class PublicEvent(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    description: str = NO_DESCRIPTION
    category: str = "General Events"
    date: str
    time: str
    location: str = VENUE_TBA
    address: str = ""
    coordinates: Coordinates | None = None
    price: str = PRICE_TBA
    image: str | None = None
    organizer: Organizer
    attendees: int | None = None
    ticket_links: list[TicketLink] = []
    tags: list[str] = []

    @field_validator("price")
    @classmethod
    def price_not_blank(cls, v: str) -> str:
        if not v.strip():
            return PRICE_TBA
        return v

    @property
    def has_description(self) -> bool:
        """False when the description is the placeholder sentinel."""
        return bool(self.description.strip()) and self.description != NO_DESCRIPTION


class NormalizedEvent(PublicEvent):
    source: SourceMetadata
    starts_at: dt.datetime | None = None
    ends_at: dt.datetime | None = None
    relevance_score: float = 0.0
    distance: float | None = None

    def strip_source_metadata(self) -> PublicEvent:
        """Drop aggregation-internal fields before handing the event to callers."""
        return PublicEvent.model_validate(self.model_dump(include=set(PublicEvent.model_fields)))
