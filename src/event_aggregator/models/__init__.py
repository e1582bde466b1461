from event_aggregator.models.event import (
    NO_DESCRIPTION,
    PRICE_TBA,
    VENUE_TBA,
    Coordinates,
    NormalizedEvent,
    Organizer,
    PublicEvent,
    SourceMetadata,
    TicketLink,
)
from event_aggregator.models.search import (
    PriceRange,
    ResultEnvelope,
    SearchRequest,
    UserPreferences,
)

__all__ = [
    "NO_DESCRIPTION",
    "PRICE_TBA",
    "VENUE_TBA",
    "Coordinates",
    "NormalizedEvent",
    "Organizer",
    "PriceRange",
    "PublicEvent",
    "ResultEnvelope",
    "SearchRequest",
    "SourceMetadata",
    "TicketLink",
    "UserPreferences",
]
