"""Shared test fixtures."""

import datetime as dt
import sys

import pytest
import structlog
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from event_aggregator.aggregation.config import AggregationConfig, ProviderConfig
from event_aggregator.aggregation.orchestrator import EventAggregator
from event_aggregator.api.app import app
from event_aggregator.api.deps import get_aggregator
from event_aggregator.geocoding.cache import TTLCache
from event_aggregator.geocoding.providers import StaticCityGeocoder
from event_aggregator.geocoding.resolver import GeocodingResolver
from event_aggregator.models.event import (
    Coordinates,
    NormalizedEvent,
    Organizer,
    SourceMetadata,
    TicketLink,
)
from event_aggregator.persistence.models import Base
from event_aggregator.providers.base import ProviderAdapter
from event_aggregator.providers.formatting import stable_event_id
from event_aggregator.providers.rate_limiter import RateLimiter

CHICAGO = Coordinates(lat=41.8781, lng=-87.6298)
FIXED_NOW = dt.datetime(2023, 7, 1, 12, 0)


def _make_event(
    provider: str = "ticketmaster",
    original_id: str = "1",
    confidence: float = 0.9,
    title: str = "Jazz Night",
    **overrides,
) -> NormalizedEvent:
    fields = {
        "id": stable_event_id(provider, original_id),
        "title": title,
        "date": "July 28, 2023",
        "time": "7:00 PM onwards",
        "location": "Blue Note",
        "address": "131 W 3rd St, Chicago, IL",
        "coordinates": Coordinates(lat=41.88, lng=-87.63),
        "price": "$25 - $50",
        "organizer": Organizer(name="Jazz Society"),
        "ticket_links": [TicketLink(source="Tickets", link=f"https://{provider}.example.com/{original_id}")],
        "source": SourceMetadata(
            provider=provider,
            original_id=original_id,
            confidence=confidence,
            last_updated=dt.datetime(2023, 7, 1, tzinfo=dt.timezone.utc),
        ),
        "starts_at": dt.datetime(2023, 7, 28, 19, 0),
    }
    fields.update(overrides)
    return NormalizedEvent(**fields)


class _StubAdapter(ProviderAdapter):
    """Adapter that returns canned events (or raises) without any HTTP."""

    def __init__(
        self,
        name: str,
        events: list[NormalizedEvent] | None = None,
        error: Exception | None = None,
        confidence: float = 0.8,
        available: bool = True,
    ) -> None:
        self.name = name
        self._events = events or []
        self._error = error
        self.calls = 0
        super().__init__(
            None,
            "key" if available else "",
            ProviderConfig(confidence=confidence),
            RateLimiter(),
        )

    async def fetch(self, request, origin):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return list(self._events)

    def parse_item(self, raw):
        raise NotImplementedError


def _make_aggregator(
    adapters: list[ProviderAdapter],
    config: AggregationConfig | None = None,
) -> EventAggregator:
    resolver = GeocodingResolver(
        [StaticCityGeocoder({"chicago": CHICAGO})],
        TTLCache[Coordinates](60),
    )
    return EventAggregator(resolver, adapters, config, now=lambda: FIXED_NOW)


@pytest.fixture(autouse=True)
def _logs_to_stderr():
    """Keep log lines off stdout so commands that print JSON stay parseable."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_event():
    """Factory for ``NormalizedEvent`` with sensible Chicago defaults."""
    return _make_event


@pytest.fixture
def make_adapter():
    """Factory for canned-result provider adapters."""
    return _StubAdapter


@pytest.fixture
def make_aggregator():
    """Factory for an aggregator resolving only ``chicago``."""
    return _make_aggregator


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
def stub_aggregator() -> EventAggregator:
    """Aggregator with two healthy providers and one unconfigured."""
    return _make_aggregator(
        [
            _StubAdapter(
                "ticketmaster",
                [
                    _make_event("ticketmaster", "tm-1", 0.9),
                    _make_event(
                        "ticketmaster",
                        "tm-2",
                        0.9,
                        title="Cubs vs Cardinals",
                        category="Sports",
                        location="Wrigley Field",
                        date="July 29, 2023",
                    ),
                ],
                confidence=0.9,
            ),
            _StubAdapter(
                "rapidapi",
                [_make_event("rapidapi", "ra-1", 0.7, price="Free")],
                confidence=0.7,
            ),
            _StubAdapter("eventbrite", available=False),
        ]
    )


@pytest.fixture
async def api_client(stub_aggregator):
    """Async HTTP client hitting the FastAPI app with a stub aggregator."""
    app.dependency_overrides[get_aggregator] = lambda: stub_aggregator
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
