"""Persistence sink -- flattened event records for population tooling."""

from event_aggregator.persistence.models import Base, EventRecord
from event_aggregator.persistence.sink import flatten_event, store_events

__all__ = ["Base", "EventRecord", "flatten_event", "store_events"]
