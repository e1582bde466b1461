"""Tests for location resolution, geocoder backends and the TTL cache."""

import httpx
import pytest

from event_aggregator.aggregation.config import GeocoderConfig
from event_aggregator.config.settings import Settings
from event_aggregator.geocoding.cache import TTLCache
from event_aggregator.geocoding.providers import (
    Geocoder,
    MapboxGeocoder,
    StaticCityGeocoder,
    TomTomGeocoder,
    load_city_coordinates,
)
from event_aggregator.geocoding.resolver import GeocodingResolver, parse_coordinate_pair
from event_aggregator.models.event import Coordinates
from event_aggregator.providers.errors import TransientProviderError
from event_aggregator.providers.rate_limiter import RateLimiter

CHICAGO = Coordinates(lat=41.8781, lng=-87.6298)
FAST = GeocoderConfig(timeout_seconds=1.0, max_attempts=1, backoff_base_seconds=0.0)


class _FakeGeocoder(Geocoder):
    def __init__(self, name, result=None, error=None, address=None, available=True) -> None:
        self.name = name
        self._result = result
        self._error = error
        self._address = address
        self._available = available
        self.calls = 0

    def is_available(self) -> bool:
        return self._available

    async def geocode(self, address):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result

    async def reverse(self, lat, lng):
        if self._error is not None:
            raise self._error
        return self._address


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _resolver(*geocoders: Geocoder) -> GeocodingResolver:
    return GeocodingResolver(list(geocoders), TTLCache[Coordinates](3600))


class TestParseCoordinatePair:
    def test_valid(self) -> None:
        assert parse_coordinate_pair("41.8781, -87.6298") == CHICAGO

    def test_no_space(self) -> None:
        assert parse_coordinate_pair("41.8781,-87.6298") == CHICAGO

    def test_out_of_range(self) -> None:
        assert parse_coordinate_pair("91.0, 0") is None

    def test_free_text(self) -> None:
        assert parse_coordinate_pair("Chicago, IL") is None


class TestTTLCache:
    def test_expiry(self) -> None:
        clock = _FakeClock()
        cache = TTLCache[str](10, clock=clock)
        cache.set("k", "v")
        clock.now = 9.9
        assert cache.get("k") == "v"
        clock.now = 10.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_expired_keys_do_not_accumulate(self) -> None:
        clock = _FakeClock()
        cache = TTLCache[str](10, clock=clock)
        for i in range(50):
            cache.set(f"town {i}", "v")
        clock.now = 10.0
        assert len(cache) == 0
        cache.set("fresh", "v")
        assert len(cache) == 1

    def test_write_sweeps_expired_entries(self) -> None:
        clock = _FakeClock()
        cache = TTLCache[str](10, clock=clock)
        cache.set("old", "v")
        clock.now = 5.0
        cache.set("newer", "v")
        clock.now = 12.0
        cache.set("newest", "v")
        assert cache._entries.keys() == {"newer", "newest"}

    def test_oldest_entry_is_evicted_when_full(self) -> None:
        clock = _FakeClock()
        cache = TTLCache[str](10, clock=clock, max_entries=2)
        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("a", "1b")
        cache.set("c", "3")
        assert cache.get("b") is None
        assert cache.get("a") == "1b"
        assert cache.get("c") == "3"

    def test_clear(self) -> None:
        cache = TTLCache[str](10)
        cache.set("a", "1")
        cache.set("b", "2")
        assert len(cache) == 2
        cache.clear()
        assert cache.get("a") is None


class TestResolve:
    async def test_coordinates_pass_through(self) -> None:
        backend = _FakeGeocoder("fake", result=Coordinates(lat=0, lng=0))
        assert await _resolver(backend).resolve(CHICAGO) == CHICAGO
        assert backend.calls == 0

    async def test_coordinate_text_needs_no_backend(self) -> None:
        backend = _FakeGeocoder("fake")
        assert await _resolver(backend).resolve("41.8781, -87.6298") == CHICAGO
        assert backend.calls == 0

    async def test_blank(self) -> None:
        resolver = _resolver(_FakeGeocoder("fake", result=CHICAGO))
        assert await resolver.resolve(None) is None
        assert await resolver.resolve("   ") is None

    async def test_falls_through_failures_in_order(self) -> None:
        broken = _FakeGeocoder("broken", error=TransientProviderError("broken", "HTTP 503"))
        empty = _FakeGeocoder("empty", result=None)
        static = StaticCityGeocoder({"chicago": CHICAGO})
        result = await _resolver(broken, empty, static).resolve("Chicago, IL")
        assert result == CHICAGO
        assert broken.calls == 1
        assert empty.calls == 1

    async def test_unavailable_backends_are_skipped(self) -> None:
        offline = _FakeGeocoder("offline", result=Coordinates(lat=0, lng=0), available=False)
        online = _FakeGeocoder("online", result=CHICAGO)
        assert await _resolver(offline, online).resolve("Chicago") == CHICAGO
        assert offline.calls == 0

    async def test_successful_lookups_are_cached(self) -> None:
        backend = _FakeGeocoder("fake", result=CHICAGO)
        resolver = _resolver(backend)
        await resolver.resolve("Chicago")
        await resolver.resolve("Chicago")
        assert backend.calls == 1

    async def test_misses_are_not_cached(self) -> None:
        backend = _FakeGeocoder("fake", result=None)
        resolver = _resolver(backend)
        assert await resolver.resolve("Atlantis") is None
        assert await resolver.resolve("Atlantis") is None
        assert backend.calls == 2


class TestReverse:
    async def test_first_answer_wins(self) -> None:
        broken = _FakeGeocoder("broken", error=RuntimeError("boom"))
        named = _FakeGeocoder("named", address="Chicago, Illinois, United States")
        assert await _resolver(broken, named).reverse(41.8781, -87.6298) == (
            "Chicago, Illinois, United States"
        )

    async def test_fallback_formats_coordinates(self) -> None:
        assert await _resolver().reverse(41.878114, -87.629798) == "41.8781, -87.6298"


class TestStaticCityGeocoder:
    async def test_matches_head_before_comma(self) -> None:
        geocoder = StaticCityGeocoder({"chicago": CHICAGO})
        assert await geocoder.geocode("  CHICAGO, IL ") == CHICAGO
        assert await geocoder.geocode("Springfield") is None

    def test_load_table(self, tmp_path) -> None:
        path = tmp_path / "cities.yaml"
        path.write_text("Chicago: [41.8781, -87.6298]\n")
        assert load_city_coordinates(path) == {"chicago": CHICAGO}

    def test_missing_table(self, tmp_path) -> None:
        assert load_city_coordinates(tmp_path / "nope.yaml") == {}

    def test_packaged_table(self) -> None:
        cities = load_city_coordinates(Settings().city_coordinates_path)
        assert cities["chicago"] == CHICAGO
        assert "new york" in cities


class TestHttpGeocoders:
    async def test_mapbox_forward_and_reverse(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"features": [{"center": [-87.6298, 41.8781], "place_name": "Chicago, Illinois"}]},
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            geocoder = MapboxGeocoder(client, "pk.test", FAST, RateLimiter())
            assert await geocoder.geocode("Chicago") == CHICAGO
            assert await geocoder.reverse(41.8781, -87.6298) == "Chicago, Illinois"

        assert seen[0].url.params["access_token"] == "pk.test"
        assert seen[0].url.path.endswith("/Chicago.json")

    async def test_mapbox_no_features(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"features": []})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            geocoder = MapboxGeocoder(client, "pk.test", FAST, RateLimiter())
            assert await geocoder.geocode("Atlantis") is None

    async def test_tomtom_forward(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["key"] == "tt-key"
            return httpx.Response(
                200, json={"results": [{"position": {"lat": 41.8781, "lon": -87.6298}}]}
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            geocoder = TomTomGeocoder(client, "tt-key", FAST, RateLimiter())
            assert await geocoder.geocode("Chicago") == CHICAGO

    async def test_http_failure_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            geocoder = TomTomGeocoder(client, "tt-key", FAST, RateLimiter())
            with pytest.raises(TransientProviderError):
                await geocoder.geocode("Chicago")

    def test_missing_credential_is_unavailable(self) -> None:
        geocoder = MapboxGeocoder(None, "", FAST, RateLimiter())
        assert not geocoder.is_available()
