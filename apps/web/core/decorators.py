"""
Decorators for request handling and validation.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, JsonResponse


def client_required(
    active: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator that requires a resolved client connection on the request.

    ClientMiddleware resolves the access credential; this rejects the request
    with 401 before any write happens when it did not resolve (or resolved to
    an inactive connection and ``active`` is True).

    Usage:
        @client_required()
        def ingest_booking(request):
            ...
    """

    def decorator(view_func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
            client = getattr(request, "client", None)

            if client is None:
                return JsonResponse(
                    {"success": False, "error": "Invalid access token"},
                    status=401,
                )

            if active and not client.is_active:
                return JsonResponse(
                    {"success": False, "error": "Client connection is inactive"},
                    status=401,
                )

            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator
