"""Display formatting helpers shared by the provider adapters."""

from __future__ import annotations

import datetime as dt
import hashlib

from pydantic import ValidationError

from event_aggregator.models.event import Coordinates

DATE_TBA = "Date TBA"
TIME_TBA = "Time TBA"

_ID_MODULUS = 2**31


def stable_event_id(provider: str, native_id: str) -> int:
    """Deterministic bounded integer id for a provider's native event id."""
    digest = hashlib.sha256(f"{provider}:{native_id}".encode()).digest()
    return int.from_bytes(digest[:8], "big") % _ID_MODULUS


def parse_timestamp(value: str | None) -> dt.datetime | None:
    """Parse a provider timestamp into a naive wall-clock datetime.

    Offsets are dropped rather than converted: providers report venue-local
    times and the time-of-day filters work on the venue's clock.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def combine_local(date_text: str | None, time_text: str | None) -> dt.datetime | None:
    """Join separate ``YYYY-MM-DD`` and ``HH:MM[:SS]`` fields."""
    if not date_text:
        return None
    if time_text:
        return parse_timestamp(f"{date_text}T{time_text}")
    return parse_timestamp(date_text)


def format_date(start: dt.datetime | None) -> str:
    """``July 28, 2023`` style date, or ``Date TBA``."""
    if start is None:
        return DATE_TBA
    return f"{start:%B} {start.day}, {start.year}"


def _clock(moment: dt.datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_time(
    start: dt.datetime | None,
    end: dt.datetime | None = None,
    *,
    has_time: bool = True,
) -> str:
    """Time range (``7:00 PM - 10:00 PM``) or open-ended (``6:00 PM onwards``).

    ``has_time`` is False when the provider only supplied a calendar date.
    """
    if start is None or not has_time:
        return TIME_TBA
    if end is None or end <= start:
        return f"{_clock(start)} onwards"
    return f"{_clock(start)} - {_clock(end)}"


def coordinates_or_none(lat: object, lng: object) -> Coordinates | None:
    """Venue geometry when both parts are present and in range."""
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(lat=lat, lng=lng)
    except ValidationError:
        return None


def first_text(*values: object) -> str | None:
    """First value that is a non-blank string, stripped."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
