"""Raw provider payload schemas, validated at the adapter boundary.

Each provider's response envelope is parsed leniently with the item list
kept as raw JSON values, so a malformed item can be skipped on its own
instead of failing the whole batch.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# RapidAPI real-time events search
# ---------------------------------------------------------------------------


class RapidApiLink(_Raw):
    source: str = ""
    link: str


class RapidApiPrice(_Raw):
    min: Any = None
    max: Any = None
    currency: str | None = None
    is_free: bool | None = None


class RapidApiVenue(_Raw):
    name: str | None = None
    full_address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None
    state: str | None = None
    subtype: str | None = None
    subtypes: list[str] = []


class RapidApiEvent(_Raw):
    event_id: str
    name: str
    link: str | None = None
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    is_virtual: bool = False
    thumbnail: str | None = None
    publisher: str | None = None
    publisher_favicon: str | None = None
    ticket_links: list[RapidApiLink] = []
    info_links: list[RapidApiLink] = []
    venue: RapidApiVenue | None = None
    tags: list[str] = []
    price: RapidApiPrice | None = None
    min_price: Any = None
    max_price: Any = None
    is_free: bool | None = None


class RapidApiResponse(_Raw):
    status: str = "OK"
    data: list[Any] = []


# ---------------------------------------------------------------------------
# Ticketmaster Discovery v2
# ---------------------------------------------------------------------------


class Named(_Raw):
    name: str | None = None


class TmClassification(_Raw):
    segment: Named | None = None
    genre: Named | None = None
    sub_genre: Named | None = Field(default=None, alias="subGenre")


class TmImage(_Raw):
    url: str
    ratio: str | None = None
    width: int | None = None


class TmPriceRange(_Raw):
    min: float | None = None
    max: float | None = None
    currency: str | None = None


class TmStart(_Raw):
    local_date: str | None = Field(default=None, alias="localDate")
    local_time: str | None = Field(default=None, alias="localTime")


class TmDates(_Raw):
    start: TmStart | None = None
    end: TmStart | None = None


class TmPublicSale(_Raw):
    start_date_time: str | None = Field(default=None, alias="startDateTime")


class TmPresale(_Raw):
    name: str | None = None
    url: str | None = None


class TmSales(_Raw):
    public: TmPublicSale | None = Field(default=None, alias="public")
    presales: list[TmPresale] = []


class TmLocation(_Raw):
    latitude: float | None = None
    longitude: float | None = None


class TmBoxOffice(_Raw):
    phone_number_detail: str | None = Field(default=None, alias="phoneNumberDetail")


class TmVenue(_Raw):
    name: str | None = None
    address: dict[str, Any] | None = None
    city: Named | None = None
    state: dict[str, Any] | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    location: TmLocation | None = None
    box_office_info: TmBoxOffice | None = Field(default=None, alias="boxOfficeInfo")


class TmEmbeddedVenues(_Raw):
    venues: list[TmVenue] = []


class TmAccessibility(_Raw):
    info: str | None = None


class TmPromoter(_Raw):
    name: str | None = None
    description: str | None = None


class TicketmasterEvent(_Raw):
    id: str
    name: str
    url: str | None = None
    info: str | None = None
    please_note: str | None = Field(default=None, alias="pleaseNote")
    images: list[TmImage] = []
    dates: TmDates | None = None
    price_ranges: list[TmPriceRange] = Field(default=[], alias="priceRanges")
    classifications: list[TmClassification] = []
    embedded: TmEmbeddedVenues | None = Field(default=None, alias="_embedded")
    accessibility: TmAccessibility | None = None
    promoter: TmPromoter | None = None
    sales: TmSales | None = None


class TmEmbeddedEvents(_Raw):
    events: list[Any] = []


class TicketmasterResponse(_Raw):
    embedded: TmEmbeddedEvents | None = Field(default=None, alias="_embedded")
    page: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Eventbrite v3
# ---------------------------------------------------------------------------


class EbText(_Raw):
    text: str | None = None


class EbMoment(_Raw):
    local: str | None = None
    utc: str | None = None


class EbImage(_Raw):
    url: str | None = None


class EbAddress(_Raw):
    address_1: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    localized_address_display: str | None = None


class EbVenue(_Raw):
    name: str | None = None
    address: EbAddress | None = None


class EbOrganizer(_Raw):
    name: str | None = None
    logo: EbImage | None = None


class EbMoney(_Raw):
    major_value: Any = None


class EbTicketAvailability(_Raw):
    minimum_ticket_price: EbMoney | None = None
    maximum_ticket_price: EbMoney | None = None
    has_available_tickets: bool | None = None


class EventbriteEvent(_Raw):
    id: str
    name: EbText
    description: EbText | None = None
    summary: str | None = None
    url: str | None = None
    start: EbMoment | None = None
    end: EbMoment | None = None
    is_free: bool = False
    logo: EbImage | None = None
    venue: EbVenue | None = None
    organizer: EbOrganizer | None = None
    ticket_availability: EbTicketAvailability | None = None
    category: Named | None = None
    subcategory: Named | None = None


class EventbriteResponse(_Raw):
    events: list[Any] = []
    pagination: dict[str, Any] | None = None
