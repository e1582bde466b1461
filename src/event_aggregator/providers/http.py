"""Shared GET-with-retry helper for provider and geocoder calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from event_aggregator.providers.errors import PermanentProviderError, TransientProviderError

logger = structlog.get_logger()

RETRYABLE_STATUS = frozenset({408, 429})


@dataclass(frozen=True)
class RetryPolicy:
    """Per-call timeout and bounded exponential backoff."""

    timeout_seconds: float = 10.0
    max_attempts: int = 3
    backoff_base_seconds: float = 0.5

    def backoff(self, attempt: int) -> float:
        return self.backoff_base_seconds * 2**attempt


def is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in RETRYABLE_STATUS


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    policy: RetryPolicy = RetryPolicy(),
) -> Any:
    """GET ``url`` and decode the JSON body, retrying transient failures.

    Args:
        client: Shared async client (injected so tests can mock transport).
        url: Absolute request URL.
        provider: Provider name used in errors and log context.
        params: Query parameters.
        headers: Extra request headers (auth keys).
        policy: Timeout and retry budget.

    Returns:
        The decoded JSON payload.

    Raises:
        TransientProviderError: Retries exhausted on a retryable failure.
        PermanentProviderError: Non-retryable status or undecodable body.
    """
    attempts = max(1, policy.max_attempts)
    last_error: TransientProviderError | None = None

    for attempt in range(attempts):
        try:
            response = await client.get(
                url, params=params, headers=headers, timeout=policy.timeout_seconds
            )
        except httpx.TimeoutException as e:
            last_error = TransientProviderError(provider, f"timeout: {e!r}")
        except httpx.TransportError as e:
            last_error = TransientProviderError(provider, f"transport error: {e!r}")
        else:
            status = response.status_code
            if status < 400:
                try:
                    return response.json()
                except ValueError as e:
                    raise PermanentProviderError(
                        provider, f"malformed JSON body: {e}", status_code=status
                    ) from e
            if not is_retryable_status(status):
                raise PermanentProviderError(
                    provider, f"HTTP {status}: {response.text[:200]}", status_code=status
                )
            last_error = TransientProviderError(provider, f"HTTP {status}", status_code=status)

        if attempt < attempts - 1:
            delay = policy.backoff(attempt)
            logger.info(
                "provider_request_retry",
                provider=provider,
                attempt=attempt + 1,
                delay_seconds=delay,
                error=last_error.message,
            )
            await asyncio.sleep(delay)

    assert last_error is not None
    raise last_error
