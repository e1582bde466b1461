"""Tests for cross-provider deduplication."""

from event_aggregator.aggregation.config import DedupConfig
from event_aggregator.dedup.engine import absorb, dedupe, pick_winner
from event_aggregator.models.event import NO_DESCRIPTION, PRICE_TBA, Coordinates, TicketLink


class TestDedupe:
    def test_most_trusted_report_survives(self, make_event) -> None:
        low = make_event("rapidapi", "ra-1", 0.7)
        high = make_event("ticketmaster", "tm-1", 0.9)
        for events in ([low, high], [high, low]):
            result = dedupe(events)
            assert len(result) == 1
            assert result[0].source.provider == "ticketmaster"
            assert result[0].source.confidence == 0.9

    def test_distinct_events_survive(self, make_event) -> None:
        events = [
            make_event("ticketmaster", "1", title="Jazz Night"),
            make_event("ticketmaster", "2", title="Cubs vs Cardinals", location="Wrigley Field"),
            make_event("eventbrite", "3", 0.8, title="Startup Pitch Night", location="1871"),
        ]
        assert len(dedupe(events)) == 3

    def test_high_trust_provider_wins_ties(self, make_event) -> None:
        eventbrite = make_event("eventbrite", "eb-1", 0.8)
        ticketmaster = make_event("ticketmaster", "tm-1", 0.8)
        result = dedupe([eventbrite, ticketmaster], DedupConfig(high_trust_provider="ticketmaster"))
        assert [e.source.provider for e in result] == ["ticketmaster"]

    def test_idempotent(self, make_event) -> None:
        events = [
            make_event("rapidapi", "ra-1", 0.7),
            make_event("ticketmaster", "tm-1", 0.9),
            make_event("eventbrite", "eb-1", 0.8, title="Jazz Night!"),
            make_event("eventbrite", "eb-2", 0.8, title="Cubs vs Cardinals", location="Wrigley Field"),
        ]
        once = dedupe(events)
        assert dedupe(once) == once

    def test_losers_fill_missing_fields(self, make_event) -> None:
        sparse = make_event(
            "ticketmaster",
            "tm-1",
            0.9,
            description=NO_DESCRIPTION,
            coordinates=None,
            image=None,
            price=PRICE_TBA,
            tags=["Music"],
        )
        rich = make_event(
            "rapidapi",
            "ra-1",
            0.7,
            description="Late-night trio set.",
            image="https://img.example.com/jazz.jpg",
            price="$20",
            tags=["Music", "Jazz"],
        )
        [merged] = dedupe([rich, sparse])
        assert merged.source.provider == "ticketmaster"
        assert merged.description == "Late-night trio set."
        assert merged.coordinates == Coordinates(lat=41.88, lng=-87.63)
        assert merged.image == "https://img.example.com/jazz.jpg"
        assert merged.price == "$20"
        assert merged.tags == ["Music", "Jazz"]
        assert len(merged.ticket_links) == 2


class TestPickWinner:
    def test_higher_confidence(self, make_event) -> None:
        kept = make_event("rapidapi", "1", 0.7)
        candidate = make_event("eventbrite", "2", 0.8)
        winner, loser = pick_winner(kept, candidate, "ticketmaster")
        assert winner is candidate
        assert loser is kept

    def test_incumbent_keeps_plain_ties(self, make_event) -> None:
        kept = make_event("eventbrite", "1", 0.8)
        candidate = make_event("rapidapi", "2", 0.8)
        winner, _ = pick_winner(kept, candidate, "ticketmaster")
        assert winner is kept


class TestAbsorb:
    def test_nothing_to_add_returns_winner(self, make_event) -> None:
        winner = make_event("ticketmaster", "1")
        loser = make_event("ticketmaster", "1")
        assert absorb(winner, loser) is winner

    def test_ticket_links_are_unioned_by_url(self, make_event) -> None:
        shared = TicketLink(source="Ticketmaster", link="https://www.ticketmaster.com/event/1")
        winner = make_event("ticketmaster", "1", ticket_links=[shared])
        loser = make_event(
            "rapidapi",
            "2",
            ticket_links=[
                TicketLink(source="TM", link=shared.link),
                TicketLink(source="AXS", link="https://www.axs.com/events/1"),
            ],
        )
        merged = absorb(winner, loser)
        assert [t.link for t in merged.ticket_links] == [
            "https://www.ticketmaster.com/event/1",
            "https://www.axs.com/events/1",
        ]
