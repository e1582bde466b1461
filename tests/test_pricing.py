"""Tests for the price extraction fallback chain."""

import math

import pytest

from event_aggregator.models.event import PRICE_TBA, TicketLink
from event_aggregator.providers.pricing import (
    FREE,
    TICKETS_AVAILABLE,
    PriceSignals,
    extract_price,
    format_amount,
    format_range,
    to_amount,
)


class TestAmounts:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (25, 25.0),
            ("24.50", 24.5),
            ("$30", 30.0),
            ("1,200", 1200.0),
            ("n/a", None),
            ("-5", None),
            (True, None),
            (math.nan, None),
            (None, None),
        ],
    )
    def test_to_amount(self, raw, expected) -> None:
        assert to_amount(raw) == expected

    def test_format_amount(self) -> None:
        assert format_amount(20.0) == "$20"
        assert format_amount(24.5) == "$24.50"

    def test_format_range(self) -> None:
        assert format_range(None, None) is None
        assert format_range(25, 50) == "$25 - $50"
        assert format_range(50, 20) == "$20 - $50"
        assert format_range(None, 40) == "$40"
        assert format_range(0, 0) == FREE


class TestExtractPrice:
    def test_free_flag_wins_over_amounts(self) -> None:
        signals = PriceSignals(is_free=True, structured_min=10, structured_max=20)
        assert extract_price(signals) == FREE

    def test_structured_range(self) -> None:
        assert extract_price(PriceSignals(structured_min=25, structured_max=50)) == "$25 - $50"

    def test_structured_single(self) -> None:
        assert extract_price(PriceSignals(structured_min="20.00", structured_max="20.00")) == "$20"

    def test_flat_fields(self) -> None:
        assert extract_price(PriceSignals(flat_min="15")) == "$15"

    def test_named_prices(self) -> None:
        assert extract_price(PriceSignals(named_prices=["$30", "$10", "n/a"])) == "$10 - $30"

    def test_ticket_link_query_params(self) -> None:
        links = [TicketLink(source="Tix", link="https://tix.example.com/e/1?price=35")]
        assert extract_price(PriceSignals(ticket_links=links)) == "$35"

    def test_known_platform(self) -> None:
        links = [TicketLink(source="Eventbrite", link="https://www.eventbrite.com/e/123")]
        assert extract_price(PriceSignals(ticket_links=links)) == "See Eventbrite"

    def test_known_platform_preference_order(self) -> None:
        links = [
            TicketLink(source="AXS", link="https://www.axs.com/events/1"),
            TicketLink(source="Ticketmaster", link="https://www.ticketmaster.com/event/1"),
        ]
        assert extract_price(PriceSignals(ticket_links=links)) == "See Ticketmaster"

    def test_free_text(self) -> None:
        assert extract_price(PriceSignals(text="Free admission for all ages")) == FREE

    def test_dollar_text(self) -> None:
        assert extract_price(PriceSignals(text="Tickets $30 at the door")) == "$30"

    def test_estimate_music_arena(self) -> None:
        signals = PriceSignals(category="Music", venue_labels=["United Center Arena"])
        assert extract_price(signals) == "$45 - $150"

    def test_estimate_sports_stadium(self) -> None:
        signals = PriceSignals(category="Sports", venue_labels=["stadium"])
        assert extract_price(signals) == "$30 - $120"

    def test_estimate_comedy_club_subtype(self) -> None:
        signals = PriceSignals(category="Arts", venue_labels=["comedy_club"])
        assert extract_price(signals) == "$15 - $40"

    def test_arena_without_matching_category_is_not_estimated(self) -> None:
        signals = PriceSignals(category="Business", venue_labels=["Convention Arena"])
        assert extract_price(signals) == PRICE_TBA

    def test_unknown_ticket_link(self) -> None:
        links = [TicketLink(source="Box", link="https://example.com/tickets")]
        assert extract_price(PriceSignals(ticket_links=links)) == TICKETS_AVAILABLE

    def test_nothing_known(self) -> None:
        assert extract_price(PriceSignals()) == PRICE_TBA
