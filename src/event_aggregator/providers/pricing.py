"""Price extraction: a fixed fallback chain from structured data to ``Price TBA``.

Every stage returns a formatted display string or ``None``; the first
non-``None`` result wins.  The output is always one of ``Free``,
``$N``, ``$N - $M``, ``See <Platform>``, ``Tickets Available`` or
``Price TBA``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlparse

from event_aggregator.models.event import PRICE_TBA, TicketLink

FREE = "Free"
TICKETS_AVAILABLE = "Tickets Available"

# Query parameters that ticket platforms use to carry a price
PRICE_QUERY_PARAMS = ("price", "min_price", "max_price", "minPrice", "maxPrice", "amount")

# Preference order when no price can be read from a ticket link
KNOWN_PLATFORMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Eventbrite", ("eventbrite",)),
    ("Ticketmaster", ("ticketmaster",)),
    ("SeeTickets", ("seetickets",)),
    ("AXS", ("axs",)),
    ("DICE", ("dice", "dicefm")),
    ("StubHub", ("stubhub",)),
    ("Vivid Seats", ("vividseats",)),
    ("Bandsintown", ("bandsintown",)),
)

# (venue/category keywords, category, low, high) -- checked in order
PRICE_ESTIMATES: tuple[tuple[tuple[str, ...], str | None, float, float], ...] = (
    (("arena", "stadium", "amphitheater", "amphitheatre"), "Music", 45, 150),
    (("arena", "stadium"), "Sports", 30, 120),
    (("theater", "theatre", "playhouse", "opera house"), None, 25, 85),
    (("comedy club",), None, 15, 40),
    (("night club", "nightclub"), None, 10, 30),
)

_FREE_TEXT = re.compile(r"\b(?:free|no charge|complimentary)\b")
_DOLLAR_TEXT = re.compile(r"\$\s?(\d+(?:,\d{3})*(?:\.\d{1,2})?)")


@dataclass(frozen=True)
class PriceSignals:
    """Everything a provider item exposes that could carry a price.

    Adapters fill only the fields their payload has.
    """

    is_free: bool = False
    structured_min: object = None
    structured_max: object = None
    flat_min: object = None
    flat_max: object = None
    named_prices: Sequence[object] = ()
    ticket_links: Sequence[TicketLink] = ()
    text: str = ""
    category: str | None = None
    venue_labels: Sequence[str] = field(default_factory=tuple)


def to_amount(value: object) -> float | None:
    """Coerce a provider price value (number or numeric string) to float."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().lstrip("$").replace(",", "")
        try:
            amount = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if amount != amount or amount < 0 or amount == float("inf"):
        return None
    return amount


def format_amount(amount: float) -> str:
    if amount == int(amount):
        return f"${int(amount)}"
    return f"${amount:.2f}"


def format_range(low: float | None, high: float | None) -> str | None:
    """``$N`` / ``$N - $M`` / ``Free`` from optional bounds."""
    if low is None and high is None:
        return None
    if low is None:
        low = high
    if high is None:
        high = low
    if low > high:
        low, high = high, low
    if high == 0:
        return FREE
    if low == high:
        return format_amount(low)
    return f"{format_amount(low)} - {format_amount(high)}"


def _free_flag(signals: PriceSignals) -> str | None:
    return FREE if signals.is_free else None


def _structured(signals: PriceSignals) -> str | None:
    return format_range(to_amount(signals.structured_min), to_amount(signals.structured_max))


def _flat(signals: PriceSignals) -> str | None:
    return format_range(to_amount(signals.flat_min), to_amount(signals.flat_max))


def _named(signals: PriceSignals) -> str | None:
    amounts = [a for a in (to_amount(v) for v in signals.named_prices) if a is not None]
    if not amounts:
        return None
    return format_range(min(amounts), max(amounts))


def _ticket_link_params(signals: PriceSignals) -> str | None:
    amounts: list[float] = []
    for ticket in signals.ticket_links:
        query = parse_qs(urlparse(ticket.link).query)
        for key in PRICE_QUERY_PARAMS:
            for raw in query.get(key, ()):
                amount = to_amount(raw)
                if amount is not None:
                    amounts.append(amount)
    if not amounts:
        return None
    return format_range(min(amounts), max(amounts))


def _platform_key(ticket: TicketLink) -> str:
    host = urlparse(ticket.link).hostname or ""
    source = re.sub(r"[^a-z0-9]", "", ticket.source.lower())
    return f"{source} {host.replace('.', ' ')}"


def _known_platform(signals: PriceSignals) -> str | None:
    keys = [_platform_key(t) for t in signals.ticket_links]
    for platform, markers in KNOWN_PLATFORMS:
        for key in keys:
            if any(re.search(rf"\b{marker}\b", key) for marker in markers):
                return f"See {platform}"
    return None


def _free_text(signals: PriceSignals) -> str | None:
    text = signals.text.lower()
    if _FREE_TEXT.search(text):
        return FREE
    amounts = [to_amount(m) for m in _DOLLAR_TEXT.findall(text)]
    found = [a for a in amounts if a is not None]
    if not found:
        return None
    return format_range(min(found), max(found))


def _estimate(signals: PriceSignals) -> str | None:
    labels = " ".join(signals.venue_labels).lower().replace("_", " ")
    if not labels:
        return None
    for keywords, category, low, high in PRICE_ESTIMATES:
        if category is not None and signals.category != category:
            continue
        if any(re.search(rf"\b{re.escape(k)}\b", labels) for k in keywords):
            return format_range(low, high)
    return None


def _any_ticket_link(signals: PriceSignals) -> str | None:
    return TICKETS_AVAILABLE if signals.ticket_links else None


PRICE_CHAIN: tuple[Callable[[PriceSignals], str | None], ...] = (
    _free_flag,
    _structured,
    _flat,
    _named,
    _ticket_link_params,
    _known_platform,
    _free_text,
    _estimate,
    _any_ticket_link,
)


def extract_price(signals: PriceSignals) -> str:
    """Run the fallback chain and return a non-empty display price."""
    for stage in PRICE_CHAIN:
        result = stage(signals)
        if result:
            return result
    return PRICE_TBA
