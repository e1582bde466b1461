"""FastAPI application for the Event Aggregator API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_aggregator.aggregation.factory import build_aggregator
from event_aggregator.api.routes.events import router as events_router
from event_aggregator.api.routes.health import router as health_router
from event_aggregator.config.settings import get_settings
from event_aggregator.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    async with httpx.AsyncClient(follow_redirects=True) as client:
        app.state.aggregator = build_aggregator(settings, client)
        yield


app = FastAPI(title="Event Aggregator API", version="0.1.0", lifespan=lifespan)

# CORS for browser clients during local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(events_router)
