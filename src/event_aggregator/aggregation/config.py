"""Aggregation pipeline configuration with sensible defaults.

All parameters can be overridden via ``config/aggregation.yaml``.
If the file does not exist, defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, model_validator

from event_aggregator.models.search import MAX_PAGE_SIZE


class ProximityBand(BaseModel):
    """Score bonus granted when the event lies within ``max_miles``."""

    max_miles: float
    bonus: float


class RecencyBand(BaseModel):
    """Score bonus granted when the event starts within ``max_days``."""

    max_days: float
    bonus: float


class ScoringConfig(BaseModel):
    """Parameters for relevance scoring."""

    base: float = 0.5
    proximity: list[ProximityBand] = [
        ProximityBand(max_miles=5, bonus=0.3),
        ProximityBand(max_miles=15, bonus=0.2),
        ProximityBand(max_miles=30, bonus=0.1),
    ]
    recency: list[RecencyBand] = [
        RecencyBand(max_days=7, bonus=0.2),
        RecencyBand(max_days=30, bonus=0.1),
    ]
    preference_boost: float = 0.2

    @model_validator(mode="after")
    def sort_bands(self) -> "ScoringConfig":
        """Keep bands ordered tightest-first so the first match wins."""
        self.proximity = sorted(self.proximity, key=lambda b: b.max_miles)
        self.recency = sorted(self.recency, key=lambda b: b.max_days)
        return self


class DedupConfig(BaseModel):
    """Thresholds for near-duplicate detection."""

    title_threshold: float = 0.8
    location_threshold: float = 0.7
    high_trust_provider: str = "ticketmaster"


class RateLimitConfig(BaseModel):
    """Rolling-window request quota."""

    max_requests: int
    window_seconds: float


class ProviderConfig(BaseModel):
    """Per-provider request policy."""

    enabled: bool = True
    confidence: float = 0.7
    timeout_seconds: float = 12.0
    search_timeout_seconds: float = 15.0
    max_attempts: int = 3
    backoff_base_seconds: float = 0.5
    query_delay_seconds: float = 0.2
    max_results: int = 50
    rate_limit: RateLimitConfig | None = None

    @model_validator(mode="after")
    def warn_if_confidence_out_of_range(self) -> "ProviderConfig":
        """Log a warning if confidence falls outside [0, 1]."""
        if not 0.0 <= self.confidence <= 1.0:
            structlog.get_logger().warning(
                "provider_confidence_out_of_range",
                confidence=self.confidence,
            )
        return self


class ProvidersConfig(BaseModel):
    """Policies for every event provider."""

    rapidapi: ProviderConfig = ProviderConfig(
        confidence=0.7,
        max_results=50,
        rate_limit=RateLimitConfig(max_requests=500, window_seconds=3600),
    )
    ticketmaster: ProviderConfig = ProviderConfig(
        confidence=0.9,
        timeout_seconds=10.0,
        max_results=50,
        rate_limit=RateLimitConfig(max_requests=5000, window_seconds=86400),
    )
    eventbrite: ProviderConfig = ProviderConfig(
        confidence=0.8,
        timeout_seconds=10.0,
        max_results=50,
        rate_limit=RateLimitConfig(max_requests=1000, window_seconds=3600),
    )


class GeocoderConfig(BaseModel):
    """Request policy for a single geocoding backend."""

    timeout_seconds: float = 8.0
    max_attempts: int = 2
    backoff_base_seconds: float = 0.5
    rate_limit: RateLimitConfig | None = None


class GeocodingConfig(BaseModel):
    """Geocoding resolver settings."""

    cache_ttl_seconds: float = 86400.0
    cache_max_entries: int = Field(default=10_000, ge=1)
    mapbox: GeocoderConfig = GeocoderConfig(
        rate_limit=RateLimitConfig(max_requests=600, window_seconds=60),
    )
    tomtom: GeocoderConfig = GeocoderConfig(
        rate_limit=RateLimitConfig(max_requests=2500, window_seconds=86400),
    )


class PaginationConfig(BaseModel):
    """Page size defaults and caps."""

    default_size: int = 20
    max_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class AggregationConfig(BaseModel):
    """Top-level aggregation configuration combining all sub-configs."""

    scoring: ScoringConfig = ScoringConfig()
    dedup: DedupConfig = DedupConfig()
    providers: ProvidersConfig = ProvidersConfig()
    geocoding: GeocodingConfig = GeocodingConfig()
    pagination: PaginationConfig = PaginationConfig()


def load_aggregation_config(path: Path) -> AggregationConfig:
    """Load aggregation configuration from a YAML file.

    If the file does not exist, returns an ``AggregationConfig`` with all
    default values.  Partial overrides are supported -- only the keys
    present in the YAML file will override defaults.
    """
    if not path.exists():
        return AggregationConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return AggregationConfig.model_validate(_merge_defaults(AggregationConfig().model_dump(), data))


def _merge_defaults(defaults: dict, overrides: dict) -> dict:
    """Deep-merge ``overrides`` onto ``defaults`` so nested sections stay partial."""
    merged = dict(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged
