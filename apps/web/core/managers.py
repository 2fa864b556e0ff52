"""
Custom managers for multi-tenancy.

ClientScopedManager filters queries by the current client connection.
"""

from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models

from .exceptions import AuthError

if TYPE_CHECKING:
    from django.http import HttpRequest

    from .models import ClientConnection, ClientScopedModel

_T = TypeVar("_T", bound="ClientScopedModel")


class ClientScopedManager(models.Manager[_T]):
    """
    Manager that filters by client.

    Usage in views:
        # Automatically scoped to request.client
        bookings = Booking.objects.for_client(request).all()

    SECURITY: Always use for_client() in views, never raw querysets.
    """

    def for_client(self, request: "HttpRequest") -> models.QuerySet[_T]:
        """
        Filter queryset by the client attached to the request.

        Args:
            request: HttpRequest with .client attribute (set by ClientMiddleware)

        Returns:
            QuerySet filtered to the request's client

        Raises:
            ValueError: If request has no client attached
        """
        client: Any = getattr(request, "client", None)
        if client is None:
            msg = "Request has no client attached. Is ClientMiddleware enabled?"
            raise ValueError(msg)
        return self.filter(client=client)


class ClientConnectionManager(models.Manager["ClientConnection"]):
    """Lookups used to resolve the owning client of an inbound request."""

    def for_access_token(
        self, token: str | None, active_only: bool = True
    ) -> "ClientConnection":
        """
        Resolve an access credential to exactly one client connection.

        Raises:
            AuthError: If the token is empty or matches no (active) connection.
        """
        if not token:
            raise AuthError("Access token is required")

        qs = self.filter(access_token=token)
        if active_only:
            qs = qs.filter(is_active=True)

        matches = list(qs[:2])
        if len(matches) != 1:
            raise AuthError("Invalid access token")
        return matches[0]

    def match_provider_user(self, user_uri: str | None) -> "ClientConnection | None":
        """
        Find the active connection whose Calendly user matches a webhook host.

        Calendly sends full user URIs; connections may have been stored with a
        different host prefix, so the trailing identifier is compared.
        """
        if not user_uri:
            return None

        user_id = user_uri.rstrip("/").rsplit("/", 1)[-1]
        if not user_id:
            return None

        candidates = self.filter(is_active=True, calendly_user_uri__contains=user_id)
        for connection in candidates:
            stored_id = connection.calendly_user_uri.rstrip("/").rsplit("/", 1)[-1]
            if stored_id and stored_id == user_id:
                return connection
        return None
