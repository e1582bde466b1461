"""Health check endpoint."""

from fastapi import APIRouter, Depends

from event_aggregator.aggregation.orchestrator import EventAggregator
from event_aggregator.api.deps import get_aggregator

router = APIRouter()


@router.get("/health")
async def health(aggregator: EventAggregator = Depends(get_aggregator)) -> dict:
    """Liveness plus the providers that currently have credentials."""
    return {
        "status": "ok",
        "providers": [a.name for a in aggregator.adapters if a.is_available()],
    }
