"""
Client middleware - attaches current client connection to request.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from django.http import HttpRequest, HttpResponse

from .exceptions import AuthError

if TYPE_CHECKING:
    from .models import ClientConnection

ACCESS_TOKEN_HEADER = "X-Access-Token"


class ClientMiddleware:
    """
    Middleware that attaches the current client connection to the request.

    Client is determined by (in order):
    1. X-Access-Token header (API calls, triggers)
    2. ?code= query parameter (dashboard deep links)

    Sets request.client to the matching connection (active or not) or None.
    Views decide whether an inactive client may proceed.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Skip for admin
        if request.path.startswith("/admin/"):
            return self.get_response(request)

        request.client = self._get_client(request)  # type: ignore[attr-defined]
        return self.get_response(request)

    def _get_client(self, request: HttpRequest) -> "ClientConnection | None":
        """Resolve client from request."""
        # Lazy import to avoid circular dependency
        from .models import ClientConnection

        token = request.headers.get(ACCESS_TOKEN_HEADER) or request.GET.get("code")
        if not token:
            return None

        try:
            return ClientConnection.objects.for_access_token(token, active_only=False)
        except AuthError:
            return None
