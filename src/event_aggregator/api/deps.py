"""FastAPI dependency injection for the shared aggregator."""

from fastapi import Request

from event_aggregator.aggregation.orchestrator import EventAggregator


def get_aggregator(request: Request) -> EventAggregator:
    """Return the process-wide aggregator built at startup."""
    return request.app.state.aggregator
