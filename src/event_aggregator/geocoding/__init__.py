"""Geocoding -- location text to search origin."""

from event_aggregator.geocoding.cache import TTLCache
from event_aggregator.geocoding.providers import (
    Geocoder,
    MapboxGeocoder,
    StaticCityGeocoder,
    TomTomGeocoder,
    load_city_coordinates,
)
from event_aggregator.geocoding.resolver import GeocodingResolver, parse_coordinate_pair

__all__ = [
    "Geocoder",
    "GeocodingResolver",
    "MapboxGeocoder",
    "StaticCityGeocoder",
    "TTLCache",
    "TomTomGeocoder",
    "load_city_coordinates",
    "parse_coordinate_pair",
]
