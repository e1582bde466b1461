"""Resolve free-text locations or coordinate pairs into a search origin."""

from __future__ import annotations

import re
from collections.abc import Sequence

import structlog
from pydantic import ValidationError

from event_aggregator.geocoding.cache import TTLCache
from event_aggregator.geocoding.providers import Geocoder
from event_aggregator.models.event import Coordinates

logger = structlog.get_logger()

_COORDINATE_PAIR = re.compile(r"^\s*(-?\d{1,3}(?:\.\d+)?)\s*,\s*(-?\d{1,3}(?:\.\d+)?)\s*$")


def parse_coordinate_pair(text: str) -> Coordinates | None:
    """Parse ``"<lat>, <lng>"`` without any network call."""
    match = _COORDINATE_PAIR.match(text)
    if match is None:
        return None
    try:
        return Coordinates(lat=float(match.group(1)), lng=float(match.group(2)))
    except ValidationError:
        return None


class GeocodingResolver:
    """Try each geocoder in priority order, caching successful lookups.

    Backend failures are logged and skipped; ``resolve`` returns ``None``
    only when every backend came up empty.
    """

    def __init__(self, geocoders: Sequence[Geocoder], cache: TTLCache[Coordinates]) -> None:
        self._geocoders = list(geocoders)
        self._cache = cache

    @property
    def geocoders(self) -> list[Geocoder]:
        return list(self._geocoders)

    async def resolve(self, location: str | Coordinates | None) -> Coordinates | None:
        if location is None:
            return None
        if isinstance(location, Coordinates):
            return location

        direct = parse_coordinate_pair(location)
        if direct is not None:
            return direct

        if not location.strip():
            return None

        cached = self._cache.get(location)
        if cached is not None:
            logger.debug("geocode_cache_hit", location=location)
            return cached

        for geocoder in self._geocoders:
            if not geocoder.is_available():
                continue
            try:
                result = await geocoder.geocode(location)
            except Exception as e:
                logger.warning(
                    "geocoder_failed",
                    geocoder=geocoder.name,
                    location=location,
                    error=str(e),
                )
                continue
            if result is not None:
                logger.info("geocode_resolved", geocoder=geocoder.name, location=location)
                self._cache.set(location, result)
                return result

        logger.warning("geocode_unresolved", location=location)
        return None

    async def reverse(self, lat: float, lng: float) -> str:
        """Human-readable address for a coordinate pair.

        Falls back to ``"<lat>, <lng>"`` rounded to four places.
        """
        for geocoder in self._geocoders:
            if not geocoder.is_available():
                continue
            try:
                address = await geocoder.reverse(lat, lng)
            except Exception as e:
                logger.warning(
                    "reverse_geocoder_failed",
                    geocoder=geocoder.name,
                    error=str(e),
                )
                continue
            if address:
                return address
        return f"{lat:.4f}, {lng:.4f}"
