"""Geocoding backends: Mapbox, TomTom and a static city table."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

import httpx
import structlog
import yaml
from pydantic import BaseModel, ValidationError

from event_aggregator.aggregation.config import GeocoderConfig
from event_aggregator.models.event import Coordinates
from event_aggregator.providers.errors import (
    PermanentProviderError,
    ProviderUnavailableError,
    RateLimitExceededError,
)
from event_aggregator.providers.http import RetryPolicy, get_json
from event_aggregator.providers.rate_limiter import RateLimiter

logger = structlog.get_logger()


class Geocoder(ABC):
    """Forward and reverse lookup against one backend.

    Returning ``None`` means "no answer"; raising means the backend failed.
    The resolver treats both the same way and moves on to the next backend.
    """

    name: str

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def geocode(self, address: str) -> Coordinates | None: ...

    async def reverse(self, lat: float, lng: float) -> str | None:
        return None


class _HttpGeocoder(Geocoder):
    def __init__(
        self,
        client: httpx.AsyncClient,
        credential: str,
        config: GeocoderConfig,
        rate_limiter: RateLimiter,
    ) -> None:
        self._client = client
        self._credential = credential
        self._policy = RetryPolicy(
            timeout_seconds=config.timeout_seconds,
            max_attempts=config.max_attempts,
            backoff_base_seconds=config.backoff_base_seconds,
        )
        self._rate_limiter = rate_limiter
        if config.rate_limit is not None:
            rate_limiter.configure(
                self.name, config.rate_limit.max_requests, config.rate_limit.window_seconds
            )

    def is_available(self) -> bool:
        return bool(self._credential)

    async def _get(self, url: str, params: dict[str, str | int]) -> dict:
        if not self.is_available():
            raise ProviderUnavailableError(self.name, "missing credentials")
        if not self._rate_limiter.try_acquire(self.name):
            raise RateLimitExceededError(self.name, "geocoding quota exhausted")
        payload = await get_json(
            self._client, url, provider=self.name, params=params, policy=self._policy
        )
        if not isinstance(payload, dict):
            raise PermanentProviderError(self.name, "unexpected response shape")
        return payload


class _MapboxFeature(BaseModel):
    center: tuple[float, float]
    place_name: str | None = None


class _MapboxResponse(BaseModel):
    features: list[_MapboxFeature] = []


class MapboxGeocoder(_HttpGeocoder):
    name = "mapbox"
    base_url = "https://api.mapbox.com/geocoding/v5/mapbox.places"

    async def _features(self, query: str) -> list[_MapboxFeature]:
        payload = await self._get(
            f"{self.base_url}/{quote(query, safe=',')}.json",
            {"access_token": self._credential, "limit": 1},
        )
        try:
            return _MapboxResponse.model_validate(payload).features
        except ValidationError as e:
            raise PermanentProviderError(self.name, f"malformed payload: {e}") from e

    async def geocode(self, address: str) -> Coordinates | None:
        features = await self._features(address)
        if not features:
            return None
        lng, lat = features[0].center
        return Coordinates(lat=lat, lng=lng)

    async def reverse(self, lat: float, lng: float) -> str | None:
        features = await self._features(f"{lng},{lat}")
        if not features:
            return None
        return features[0].place_name


class _TomTomPosition(BaseModel):
    lat: float
    lon: float


class _TomTomResult(BaseModel):
    position: _TomTomPosition


class _TomTomResponse(BaseModel):
    results: list[_TomTomResult] = []


class _TomTomAddress(BaseModel):
    freeformAddress: str | None = None


class _TomTomReverseItem(BaseModel):
    address: _TomTomAddress


class _TomTomReverseResponse(BaseModel):
    addresses: list[_TomTomReverseItem] = []


class TomTomGeocoder(_HttpGeocoder):
    name = "tomtom"
    base_url = "https://api.tomtom.com/search/2"

    async def geocode(self, address: str) -> Coordinates | None:
        payload = await self._get(
            f"{self.base_url}/geocode/{quote(address)}.json",
            {"key": self._credential, "limit": 1},
        )
        try:
            results = _TomTomResponse.model_validate(payload).results
        except ValidationError as e:
            raise PermanentProviderError(self.name, f"malformed payload: {e}") from e
        if not results:
            return None
        position = results[0].position
        return Coordinates(lat=position.lat, lng=position.lon)

    async def reverse(self, lat: float, lng: float) -> str | None:
        payload = await self._get(
            f"{self.base_url}/reverseGeocode/{lat},{lng}.json",
            {"key": self._credential},
        )
        try:
            addresses = _TomTomReverseResponse.model_validate(payload).addresses
        except ValidationError as e:
            raise PermanentProviderError(self.name, f"malformed payload: {e}") from e
        if not addresses:
            return None
        return addresses[0].address.freeformAddress


def load_city_coordinates(path: Path) -> dict[str, Coordinates]:
    """Load the static ``city -> [lat, lng]`` table from YAML.

    Returns an empty table when the file does not exist.
    """
    if not path.exists():
        logger.warning("city_table_missing", path=str(path))
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return {
        str(city).strip().lower(): Coordinates(lat=pair[0], lng=pair[1])
        for city, pair in data.items()
    }


class StaticCityGeocoder(Geocoder):
    """Last-resort lookup of major-city coordinates.

    Matches the whole input, then the part before the first comma, so
    ``"Chicago, IL"`` resolves like ``"chicago"``.
    """

    name = "static"

    def __init__(self, cities: dict[str, Coordinates]) -> None:
        self._cities = cities

    async def geocode(self, address: str) -> Coordinates | None:
        key = address.strip().lower()
        if key in self._cities:
            return self._cities[key]
        head = key.split(",", 1)[0].strip()
        return self._cities.get(head)
