"""Provider adapter contract and the non-throwing search wrapper."""

from __future__ import annotations

import asyncio
import datetime as dt
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
import structlog
from pydantic import ValidationError

from event_aggregator.aggregation.config import ProviderConfig
from event_aggregator.models.event import Coordinates, NormalizedEvent, SourceMetadata
from event_aggregator.models.search import SearchRequest
from event_aggregator.providers.errors import (
    PermanentProviderError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitExceededError,
)
from event_aggregator.providers.http import RetryPolicy, get_json
from event_aggregator.providers.rate_limiter import RateLimiter

logger = structlog.get_logger()

OutcomeStatus = Literal["ok", "empty", "unavailable", "rate_limited", "timeout", "error"]


@dataclass
class ProviderOutcome:
    """Result of one adapter search: events on success, an error string otherwise."""

    provider: str
    status: OutcomeStatus
    events: list[NormalizedEvent] = field(default_factory=list)
    error: str | None = None
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ProviderAdapter(ABC):
    """Translate a search request into one provider's API and back.

    Subclasses implement :meth:`fetch` (which may raise any
    :class:`ProviderError`) and :meth:`parse_item` (which may raise on a
    malformed item).  :meth:`search` wraps both so that nothing escapes.
    """

    name: str
    high_trust: bool = False

    def __init__(
        self,
        client: httpx.AsyncClient,
        credential: str,
        config: ProviderConfig,
        rate_limiter: RateLimiter,
        now: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._credential = credential
        self.config = config
        self._rate_limiter = rate_limiter
        self._now = now
        self._policy = RetryPolicy(
            timeout_seconds=config.timeout_seconds,
            max_attempts=config.max_attempts,
            backoff_base_seconds=config.backoff_base_seconds,
        )
        if config.rate_limit is not None:
            rate_limiter.configure(
                self.name, config.rate_limit.max_requests, config.rate_limit.window_seconds
            )

    @property
    def confidence(self) -> float:
        return self.config.confidence

    def is_available(self) -> bool:
        return self.config.enabled and bool(self._credential)

    @abstractmethod
    async def fetch(self, request: SearchRequest, origin: Coordinates) -> list[NormalizedEvent]:
        """Query the provider and map its payload to events."""

    @abstractmethod
    def parse_item(self, raw: dict[str, Any]) -> NormalizedEvent:
        """Map one raw payload item to an event. May raise on malformed input."""

    async def search(self, request: SearchRequest, origin: Coordinates) -> ProviderOutcome:
        """Timeboxed, non-throwing search around ``origin``."""
        started = time.monotonic()

        def elapsed() -> int:
            return int((time.monotonic() - started) * 1000)

        if not self.is_available():
            return ProviderOutcome(
                provider=self.name,
                status="unavailable",
                error=str(ProviderUnavailableError(self.name, "not configured")),
            )

        try:
            events = await asyncio.wait_for(
                self.fetch(request, origin), timeout=self.config.search_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "provider_search_timeout",
                provider=self.name,
                timeout_seconds=self.config.search_timeout_seconds,
            )
            return ProviderOutcome(
                provider=self.name, status="timeout", error="search timed out", latency_ms=elapsed()
            )
        except RateLimitExceededError as e:
            logger.warning("provider_rate_limited", provider=self.name)
            return ProviderOutcome(
                provider=self.name, status="rate_limited", error=str(e), latency_ms=elapsed()
            )
        except ProviderError as e:
            logger.warning("provider_search_failed", provider=self.name, error=str(e))
            return ProviderOutcome(
                provider=self.name, status="error", error=str(e), latency_ms=elapsed()
            )
        except Exception as e:
            logger.exception("provider_search_crashed", provider=self.name, error=str(e))
            return ProviderOutcome(
                provider=self.name, status="error", error=str(e), latency_ms=elapsed()
            )

        events = events[: self.config.max_results]
        return ProviderOutcome(
            provider=self.name,
            status="ok" if events else "empty",
            events=events,
            latency_ms=elapsed(),
        )

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    async def _get(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Rate-limited GET returning a JSON object."""
        if not self._rate_limiter.try_acquire(self.name):
            raise RateLimitExceededError(self.name, "request quota exhausted")
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            params=params,
            headers=headers,
            policy=self._policy,
        )
        if not isinstance(payload, dict):
            raise PermanentProviderError(self.name, "expected a JSON object")
        return payload

    def parse_items(self, items: Iterable[Any]) -> list[NormalizedEvent]:
        """Map a batch, skipping (and logging) malformed items."""
        events: list[NormalizedEvent] = []
        skipped = 0
        for raw in items:
            if not isinstance(raw, dict):
                skipped += 1
                logger.warning(
                    "provider_item_skipped",
                    provider=self.name,
                    item_id=None,
                    error=f"expected an object, got {type(raw).__name__}",
                )
                continue
            try:
                events.append(self.parse_item(raw))
            except (ValidationError, ValueError, TypeError, KeyError) as e:
                skipped += 1
                logger.warning(
                    "provider_item_skipped",
                    provider=self.name,
                    item_id=raw.get("id") or raw.get("event_id"),
                    error=str(e),
                )
        if skipped:
            logger.info("provider_items_parsed", provider=self.name, parsed=len(events), skipped=skipped)
        return events

    def _source(self, native_id: str) -> SourceMetadata:
        return SourceMetadata(
            provider=self.name,
            original_id=native_id,
            confidence=self.confidence,
            last_updated=self._now(),
        )
