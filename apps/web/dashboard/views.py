"""
Dashboard views - client-facing JSON read keyed by access credential.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from apps.web.core.decorators import client_required
from apps.web.core.http import json_response
from apps.web.dashboard.services.dashboard import build_dashboard


@require_GET
@client_required(active=False)
def dashboard(request: HttpRequest) -> JsonResponse:
    """
    GET /api/dashboard/

    Authenticated by X-Access-Token header or ?code= deep-link parameter.
    Inactive clients can still read their history.
    """
    client = request.client  # type: ignore[attr-defined]
    response = build_dashboard(client)
    return json_response(response.model_dump(mode="json"))
