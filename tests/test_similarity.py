"""Tests for fuzzy event similarity."""

import pytest

from event_aggregator.aggregation.config import DedupConfig
from event_aggregator.dedup.similarity import is_duplicate, normalize_for_matching, string_similarity
from event_aggregator.models.event import VENUE_TBA


class TestNormalizeForMatching:
    def test_punctuation_and_case(self) -> None:
        assert normalize_for_matching("Jazz Night!  @ The Blue-Note") == "jazz night the bluenote"

    def test_empty(self) -> None:
        assert normalize_for_matching(None) == ""
        assert normalize_for_matching("   ") == ""


class TestStringSimilarity:
    def test_identical(self) -> None:
        assert string_similarity("Jazz Night", "jazz night!") == 1.0

    def test_both_empty(self) -> None:
        assert string_similarity("", None) == 1.0

    def test_one_empty(self) -> None:
        assert string_similarity("Jazz Night", "") == 0.0

    def test_edit_distance(self) -> None:
        # kitten -> sitting: 3 edits over 7 characters
        assert string_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_symmetric(self) -> None:
        pairs = [("Jazz Night", "Jazz Nights"), ("Blue Note", "The Blue Note Club"), ("a", "")]
        for a, b in pairs:
            assert string_similarity(a, b) == string_similarity(b, a)


class TestIsDuplicate:
    def test_same_title_same_date(self, make_event) -> None:
        a = make_event("ticketmaster", "1", location="Blue Note")
        b = make_event("rapidapi", "2", title="Jazz Night!", location="Somewhere Else")
        assert is_duplicate(a, b)

    def test_same_title_similar_venue_different_date(self, make_event) -> None:
        a = make_event("ticketmaster", "1", date="July 28, 2023", location="Blue Note Chicago")
        b = make_event("rapidapi", "2", date="July 29, 2023", location="Blue Note, Chicago")
        assert is_duplicate(a, b)

    def test_same_title_different_date_and_venue(self, make_event) -> None:
        a = make_event("ticketmaster", "1", date="July 28, 2023", location="Blue Note")
        b = make_event("rapidapi", "2", date="August 4, 2023", location="Green Mill")
        assert not is_duplicate(a, b)

    def test_different_titles(self, make_event) -> None:
        a = make_event("ticketmaster", "1", title="Jazz Night")
        b = make_event("rapidapi", "2", title="Comedy Showcase")
        assert not is_duplicate(a, b)

    def test_placeholder_venue_falls_back_to_address(self, make_event) -> None:
        a = make_event("ticketmaster", "1", date="July 28, 2023", location=VENUE_TBA)
        b = make_event("rapidapi", "2", date="July 29, 2023", location=VENUE_TBA)
        assert is_duplicate(a, b)

    def test_no_venue_information(self, make_event) -> None:
        a = make_event("ticketmaster", "1", date="July 28, 2023", location=VENUE_TBA, address="")
        b = make_event("rapidapi", "2", date="July 29, 2023", location="Blue Note")
        assert not is_duplicate(a, b)

    def test_thresholds_are_exclusive(self, make_event) -> None:
        a = make_event("ticketmaster", "1", title="Jazz Night")
        b = make_event("rapidapi", "2", title="Jazz Night")
        assert not is_duplicate(a, b, DedupConfig(title_threshold=1.0))

    def test_symmetric(self, make_event) -> None:
        a = make_event("ticketmaster", "1", date="July 28, 2023", location="Blue Note Chicago")
        b = make_event("rapidapi", "2", title="Jazz Nights", date="July 29, 2023", location="Blue Note")
        assert is_duplicate(a, b) == is_duplicate(b, a)
