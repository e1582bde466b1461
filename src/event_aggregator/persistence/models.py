from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class EventRecord(Base):
    __tablename__ = "events"
    __table_args__ = (sa.UniqueConstraint("source", "external_id", name="uq_events_source_external_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Natural key: provider name + the provider's own event id
    source: Mapped[str] = mapped_column(sa.String, index=True)
    external_id: Mapped[str] = mapped_column(sa.String)

    title: Mapped[str] = mapped_column(sa.String)
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    category: Mapped[str] = mapped_column(sa.String, index=True)

    # Parsed venue-local timestamps plus the display strings
    starts_at: Mapped[datetime | None] = mapped_column(sa.DateTime, nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(sa.DateTime, nullable=True)
    event_date: Mapped[str] = mapped_column(sa.String)
    event_time: Mapped[str] = mapped_column(sa.String)

    venue_name: Mapped[str] = mapped_column(sa.String)
    venue_address: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    latitude: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(sa.Float, nullable=True)

    price: Mapped[str] = mapped_column(sa.String)
    image_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    ticket_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    ticket_links: Mapped[list | None] = mapped_column(sa.JSON, nullable=True)
    tags: Mapped[list | None] = mapped_column(sa.JSON, nullable=True)
    organizer_name: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    attendees_count: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.func.now())
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.func.now(), onupdate=sa.func.now()
    )
