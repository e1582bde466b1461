"""Write aggregated events to the database for offline population runs.

Provides two functions:
- ``flatten_event``: Map a ``NormalizedEvent`` onto ``EventRecord`` columns.
- ``store_events``: Upsert a batch keyed by ``(source, external_id)``.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from event_aggregator.models.event import NO_DESCRIPTION, NormalizedEvent
from event_aggregator.persistence.models import EventRecord

logger = structlog.get_logger()


def flatten_event(event: NormalizedEvent) -> dict:
    """Flatten one event into ``EventRecord`` column values."""
    purchasable = [t for t in event.ticket_links if not t.link.startswith("tel:")]
    return {
        "source": event.source.provider,
        "external_id": event.source.original_id,
        "title": event.title,
        "description": event.description if event.description != NO_DESCRIPTION else None,
        "category": event.category,
        "starts_at": event.starts_at,
        "ends_at": event.ends_at,
        "event_date": event.date,
        "event_time": event.time,
        "venue_name": event.location,
        "venue_address": event.address or None,
        "latitude": event.coordinates.lat if event.coordinates else None,
        "longitude": event.coordinates.lng if event.coordinates else None,
        "price": event.price,
        "image_url": event.image,
        "ticket_url": purchasable[0].link if purchasable else None,
        "ticket_links": [t.model_dump() for t in event.ticket_links],
        "tags": list(event.tags),
        "organizer_name": event.organizer.name,
        "attendees_count": event.attendees,
    }


async def store_events(
    session_factory: async_sessionmaker[AsyncSession],
    events: Sequence[NormalizedEvent],
) -> int:
    """Insert new events and refresh existing ones in a single transaction.

    Returns:
        Number of rows written (inserted + updated).
    """
    if not events:
        return 0

    rows: dict[tuple[str, str], dict] = {}
    for event in events:
        row = flatten_event(event)
        rows[(row["source"], row["external_id"])] = row

    inserted = updated = 0
    async with session_factory() as session, session.begin():
        result = await session.execute(
            select(EventRecord).where(
                tuple_(EventRecord.source, EventRecord.external_id).in_(list(rows))
            )
        )
        existing = {(r.source, r.external_id): r for r in result.scalars()}

        for key, row in rows.items():
            record = existing.get(key)
            if record is None:
                session.add(EventRecord(**row))
                inserted += 1
            else:
                for column, value in row.items():
                    setattr(record, column, value)
                updated += 1

    logger.info("events_stored", inserted=inserted, updated=updated)
    return inserted + updated
