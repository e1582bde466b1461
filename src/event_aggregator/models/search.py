"""Search request and result envelope models."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from event_aggregator.models.event import Coordinates, PublicEvent

SortKey = Literal["relevance", "date", "distance", "price", "popularity", "alphabetical"]
PricePreference = Literal["free", "paid", "any"]
TimePreference = Literal["morning", "afternoon", "evening", "any"]

MAX_PAGE_SIZE = 100


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PriceRange(_CamelModel):
    """Inclusive dollar bounds applied to formatted prices."""

    min: float = Field(default=0.0, ge=0.0)
    max: float = Field(default=math.inf, ge=0.0)

    @model_validator(mode="after")
    def check_bounds(self) -> "PriceRange":
        if self.min > self.max:
            raise ValueError("price range min must not exceed max")
        return self


class UserPreferences(_CamelModel):
    favorite_categories: list[str] = []
    price_preference: PricePreference = "any"
    time_preference: TimePreference = "any"


class SearchRequest(_CamelModel):
    """Input to :meth:`EventAggregator.aggregate`.

    ``radius`` is always in miles.  ``page`` is zero-based and ``size`` is
    bounded by :data:`MAX_PAGE_SIZE`.
    """

    keyword: str | None = None
    location: str | Coordinates | None = None
    radius: float = Field(default=25.0, gt=0.0)
    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)
    sort: SortKey = "relevance"
    price_range: PriceRange | None = None
    preferences: UserPreferences | None = None


class ResultEnvelope(_CamelModel):
    events: list[PublicEvent] = []
    total_count: int = 0
    page: int = 0
    total_pages: int = 0
    sources: list[str] = []
    error: str | None = None

    @classmethod
    def failure(cls, page: int, error: str) -> "ResultEnvelope":
        """Empty envelope carrying a user-facing error message."""
        return cls(page=page, error=error)
