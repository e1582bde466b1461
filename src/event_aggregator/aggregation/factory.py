"""Wire settings and configuration into a ready-to-use aggregator."""

from __future__ import annotations

import httpx
import structlog

from event_aggregator.aggregation.config import AggregationConfig, load_aggregation_config
from event_aggregator.aggregation.orchestrator import EventAggregator
from event_aggregator.config.settings import Settings
from event_aggregator.geocoding.cache import TTLCache
from event_aggregator.geocoding.providers import (
    MapboxGeocoder,
    StaticCityGeocoder,
    TomTomGeocoder,
    load_city_coordinates,
)
from event_aggregator.geocoding.resolver import GeocodingResolver
from event_aggregator.models.event import Coordinates
from event_aggregator.providers.eventbrite import EventbriteAdapter
from event_aggregator.providers.rapidapi import RapidApiAdapter
from event_aggregator.providers.rate_limiter import RateLimiter
from event_aggregator.providers.ticketmaster import TicketmasterAdapter

logger = structlog.get_logger()


def build_aggregator(
    settings: Settings,
    client: httpx.AsyncClient,
    config: AggregationConfig | None = None,
    rate_limiter: RateLimiter | None = None,
) -> EventAggregator:
    """Construct the resolver, adapters and orchestrator for one process.

    Args:
        settings: Credentials and file paths.
        client: Shared HTTP client; the caller owns its lifetime.
        config: Aggregation config; loaded from ``settings`` when omitted.
        rate_limiter: Shared quota tracker; a fresh one when omitted.
    """
    if config is None:
        config = load_aggregation_config(settings.aggregation_config_path)
    if rate_limiter is None:
        rate_limiter = RateLimiter()

    geocoding = config.geocoding
    resolver = GeocodingResolver(
        [
            MapboxGeocoder(client, settings.mapbox_token, geocoding.mapbox, rate_limiter),
            TomTomGeocoder(client, settings.tomtom_api_key, geocoding.tomtom, rate_limiter),
            StaticCityGeocoder(load_city_coordinates(settings.city_coordinates_path)),
        ],
        TTLCache[Coordinates](
            geocoding.cache_ttl_seconds, max_entries=geocoding.cache_max_entries
        ),
    )

    providers = config.providers
    adapters = [
        TicketmasterAdapter(client, settings.ticketmaster_api_key, providers.ticketmaster, rate_limiter),
        EventbriteAdapter(client, settings.eventbrite_token, providers.eventbrite, rate_limiter),
        RapidApiAdapter(
            client,
            settings.rapidapi_key,
            providers.rapidapi,
            rate_limiter,
            host=settings.rapidapi_host,
        ),
    ]

    logger.info(
        "aggregator_built",
        providers=[a.name for a in adapters if a.is_available()],
        geocoders=[g.name for g in resolver.geocoders if g.is_available()],
    )
    return EventAggregator(resolver, adapters, config)
