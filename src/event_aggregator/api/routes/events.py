"""REST API endpoint for aggregated event search."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from event_aggregator.aggregation.orchestrator import EventAggregator
from event_aggregator.api.deps import get_aggregator
from event_aggregator.models.event import Coordinates
from event_aggregator.models.search import (
    MAX_PAGE_SIZE,
    PricePreference,
    PriceRange,
    ResultEnvelope,
    SearchRequest,
    SortKey,
    TimePreference,
    UserPreferences,
)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("/search", response_model=ResultEnvelope)
async def search_events(
    aggregator: EventAggregator = Depends(get_aggregator),
    keyword: str | None = None,
    location: str | None = None,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius: float = Query(default=25.0, gt=0, le=500),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    sort: SortKey = "relevance",
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    category: list[str] = Query(default=[]),
    price_preference: PricePreference = "any",
    time_preference: TimePreference = "any",
) -> ResultEnvelope:
    """Search every configured provider around a location.

    Either ``location`` (free text or ``"lat, lng"``) or both ``lat`` and
    ``lng`` must be given.  Failures come back as an envelope with
    ``error`` set, not as HTTP errors.
    """
    if lat is not None and lng is not None:
        origin: str | Coordinates | None = Coordinates(lat=lat, lng=lng)
    else:
        origin = location

    price_range = None
    if min_price is not None or max_price is not None:
        price_range = {"min": min_price or 0.0, "max": max_price if max_price is not None else math.inf}

    try:
        request = SearchRequest(
            keyword=keyword,
            location=origin,
            radius=radius,
            page=page,
            size=size,
            sort=sort,
            price_range=PriceRange(**price_range) if price_range else None,
            preferences=UserPreferences(
                favorite_categories=category,
                price_preference=price_preference,
                time_preference=time_preference,
            ),
        )
    except ValidationError as e:
        detail = e.errors(include_url=False, include_context=False)
        raise HTTPException(status_code=422, detail=detail) from e

    return await aggregator.aggregate(request)
