"""Provider error taxonomy.

None of these escape an adapter's ``search``; they are converted into a
:class:`~event_aggregator.providers.base.ProviderOutcome` failure arm.
"""


class ProviderError(Exception):
    """Base class for every failure raised while talking to a provider."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderUnavailableError(ProviderError):
    """Provider is not configured (missing credentials or disabled)."""


class RateLimitExceededError(ProviderError):
    """The provider's rolling-window quota is exhausted."""


class TransientProviderError(ProviderError):
    """Retryable failure: transport error, timeout, 408, 429 or 5xx."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(provider, message)
        self.status_code = status_code


class PermanentProviderError(ProviderError):
    """Non-retryable failure: other 4xx responses or a malformed payload."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(provider, message)
        self.status_code = status_code
