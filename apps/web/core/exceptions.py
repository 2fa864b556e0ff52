"""Error taxonomy shared by the store, provider client, and channel adapters."""


class OutreachError(Exception):
    """Base exception carrying enough detail to decide retry policy upstream."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class AuthError(OutreachError):
    """Bad or expired credential. Never retried automatically."""


class ConflictError(OutreachError):
    """Resource already exists (e.g. duplicate webhook subscription)."""


class NotFoundError(OutreachError):
    """Resource does not exist."""


class ProviderAPIError(OutreachError):
    """Scheduling provider returned an unexpected non-2xx response."""


class PersistenceError(OutreachError):
    """A store write failed."""


class AdapterError(OutreachError):
    """A channel send failed at transport or application level."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message, provider, status_code, response_body)
        self.error_code = error_code


class AdapterRateLimitError(AdapterError):
    """Channel rejected the send due to rate limiting."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        retry_after: float | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(
            message, provider, status_code=429, response_body=response_body
        )
        self.retry_after = retry_after
