"""
Calendly API client - webhook subscription management.

Synchronous: callers are management commands and onboarding views, never the
notification path. No retries; errors carry status code and body so the
caller decides.

API Reference: https://developer.calendly.com/api-docs
"""

import logging
from typing import Any

from django.conf import settings

import httpx
from outreach_schemas import (
    CalendlyEvent,
    CalendlyUser,
    CalendlyWebhookSubscription,
    ScopeTarget,
)

from apps.web.core.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    OutreachError,
    ProviderAPIError,
)

logger = logging.getLogger(__name__)

PROVIDER = "calendly"


class CalendlyClient:
    """
    Thin wrapper over the Calendly v2 REST API.

    Usage:
        with CalendlyClient(connection.calendly_token) as calendly:
            user = calendly.get_current_user()
    """

    # Max page size accepted by list endpoints
    PAGE_SIZE = 100

    def __init__(
        self,
        token: str,
        http_client: httpx.Client | None = None,
        base_url: str | None = None,
    ) -> None:
        """
        Initialize the Calendly client.

        Args:
            token: Personal access or OAuth token of the connected account.
            http_client: Optional HTTP client for dependency injection (testing).
            base_url: Override of settings.CALENDLY_API_URL.
        """
        if not token:
            raise AuthError("Calendly token is required", provider=PROVIDER)

        self._token = token
        self._base_url = (base_url or settings.CALENDLY_API_URL).rstrip("/")
        self._client = http_client or httpx.Client(
            timeout=settings.CALENDLY_TIMEOUT_SECONDS
        )
        self._owns_client = http_client is None

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "CalendlyClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Users
    # =========================================================================

    def get_current_user(self) -> CalendlyUser:
        """Resolve the user and organization URIs behind the token."""
        data = self._request("GET", f"{self._base_url}/users/me")
        return CalendlyUser.model_validate(data["resource"])

    # =========================================================================
    # Webhook subscriptions
    # =========================================================================

    def create_subscription(
        self,
        scope_target: ScopeTarget,
        callback_url: str,
        events: list[CalendlyEvent],
        signing_key: str | None = None,
    ) -> CalendlyWebhookSubscription:
        """
        Register a webhook subscription.

        Raises:
            AuthError: Token rejected.
            ConflictError: A subscription for this callback already exists.
            ProviderAPIError: Any other non-2xx response.
        """
        body: dict[str, Any] = {
            "url": callback_url,
            "events": [event.value for event in events],
            "organization": scope_target.organization_uri,
            "scope": scope_target.scope.value,
        }
        if scope_target.user_uri:
            body["user"] = scope_target.user_uri
        if signing_key:
            body["signing_key"] = signing_key

        data = self._request(
            "POST", f"{self._base_url}/webhook_subscriptions", json=body
        )
        subscription = CalendlyWebhookSubscription.model_validate(data["resource"])
        logger.info(
            "Created Calendly subscription %s (%s scope)",
            subscription.uri,
            scope_target.scope.value,
        )
        return subscription

    def list_subscriptions(
        self, scope_target: ScopeTarget
    ) -> list[CalendlyWebhookSubscription]:
        """List all subscriptions within a scope, following pagination."""
        params: dict[str, Any] | None = {
            **scope_target.as_query(),
            "count": self.PAGE_SIZE,
        }
        url: str | None = f"{self._base_url}/webhook_subscriptions"

        subscriptions: list[CalendlyWebhookSubscription] = []
        while url:
            data = self._request("GET", url, params=params)
            subscriptions.extend(
                CalendlyWebhookSubscription.model_validate(item)
                for item in data.get("collection", [])
            )
            # next_page already carries the query string
            url = (data.get("pagination") or {}).get("next_page")
            params = None

        return subscriptions

    def delete_subscription(self, handle_uri: str) -> None:
        """
        Delete a subscription by its handle.

        A subscription that no longer exists counts as deleted.
        """
        try:
            self._request("DELETE", handle_uri)
        except NotFoundError:
            logger.info("Calendly subscription %s already gone", handle_uri)
            return
        logger.info("Deleted Calendly subscription %s", handle_uri)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            raise ProviderAPIError(
                f"Calendly request failed: {e}", provider=PROVIDER
            ) from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return {}
            result: dict[str, Any] = response.json()
            return result

        raise _map_error(response)


def _map_error(response: httpx.Response) -> OutreachError:
    """Map a non-2xx Calendly response onto the error taxonomy."""
    status = response.status_code
    body = response.text

    try:
        detail = response.json()
    except ValueError:
        detail = {}
    message = ""
    if isinstance(detail, dict):
        message = str(detail.get("message") or detail.get("title") or "")

    if status in (401, 403):
        return AuthError(
            f"Calendly rejected credentials: {message or status}",
            provider=PROVIDER,
            status_code=status,
            response_body=body,
        )

    if status in (404, 410):
        return NotFoundError(
            f"Calendly resource not found: {message or status}",
            provider=PROVIDER,
            status_code=status,
            response_body=body,
        )

    if status == 409 or (400 <= status < 500 and "already exists" in body.lower()):
        return ConflictError(
            f"Calendly resource already exists: {message or status}",
            provider=PROVIDER,
            status_code=status,
            response_body=body,
        )

    text = f"Calendly API error {status}"
    if message:
        text = f"{text}: {message}"
    return ProviderAPIError(
        text,
        provider=PROVIDER,
        status_code=status,
        response_body=body,
    )
