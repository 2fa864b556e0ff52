"""
Booking API views - provider webhooks, occurrence triggers and artifacts.

Endpoints:
- Calendly webhook receiver (signature-checked when a signing key is set)
- Credential-based occurrence trigger for non-webhook integrations
- Artifact attach (PDF upload or pre-hosted URL)
- Call outcome update reported by the client
"""

import json
import logging
import uuid
from typing import Any

from django.conf import settings
from django.core.files.storage import default_storage
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from outreach_schemas import (
    BookingOccurrencePayload,
    BookingOutcomeUpdate,
    CalendlyWebhookPayload,
)
from pydantic import ValidationError as PydanticValidationError

from apps.web.bookings.models import Booking
from apps.web.bookings.serializers import (
    ArtifactAttachRequest,
    ArtifactAttachResponse,
    BookingSchema,
    BookingUpdateResponse,
    IgnoredResponse,
    IngestResponse,
)
from apps.web.bookings.services.ingestion import (
    IngestResult,
    attach_artifact,
    handle_calendly_event,
    record_booking_occurrence,
    verify_calendly_signature,
)
from apps.web.bookings.services.store import update_booking_outcome
from apps.web.core.decorators import client_required
from apps.web.core.exceptions import NotFoundError, OutreachError
from apps.web.core.http import (
    bad_request,
    error_response,
    json_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Calendly-Webhook-Signature"
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


class _UploadRejected(Exception):
    """Uploaded file is not an acceptable artifact."""


def _parse_json(request: HttpRequest) -> Any:
    return json.loads(request.body or b"null")


def _ingest_response(result: IngestResult) -> JsonResponse:
    response = IngestResponse(
        booking=BookingSchema.model_validate(result.booking),
        created=result.created,
        status_changed=result.status_changed,
        notification=result.notification,
    )
    return json_response(
        response.model_dump(mode="json"), status=201 if result.created else 200
    )


@csrf_exempt
@require_POST
def calendly_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive a Calendly invitee.created / invitee.canceled delivery.

    POST /webhooks/calendly/
    """
    signing_key = settings.CALENDLY_SIGNING_KEY
    if signing_key:
        try:
            verify_calendly_signature(
                request.body,
                request.headers.get(SIGNATURE_HEADER),
                signing_key,
                tolerance=settings.CALENDLY_SIGNATURE_TOLERANCE_SECONDS,
            )
        except OutreachError as e:
            logger.warning("Rejected Calendly webhook: %s", e.message)
            return error_response(e)
    else:
        logger.warning("CALENDLY_SIGNING_KEY not set, accepting unsigned webhook")

    try:
        raw = _parse_json(request)
    except ValueError:
        return bad_request("Invalid JSON")

    try:
        payload = CalendlyWebhookPayload.model_validate(raw)
    except PydanticValidationError as e:
        return validation_error_response(e)

    try:
        result = handle_calendly_event(payload, raw)
    except OutreachError as e:
        logger.warning("Calendly webhook %s not recorded: %s", payload.event, e.message)
        return error_response(e)

    if result is None:
        return json_response(IgnoredResponse().model_dump(mode="json"))
    return _ingest_response(result)


@csrf_exempt
@require_POST
@client_required()
def ingest_booking(request: HttpRequest) -> JsonResponse:
    """
    Record a booking occurrence for the client owning the access token.

    POST /api/bookings/
    Header: X-Access-Token
    """
    client = request.client  # type: ignore[attr-defined]

    try:
        raw = _parse_json(request)
    except ValueError:
        return bad_request("Invalid JSON")

    try:
        payload = BookingOccurrencePayload.model_validate(raw)
    except PydanticValidationError as e:
        return validation_error_response(e)

    try:
        result = record_booking_occurrence(client, payload, raw)
    except OutreachError as e:
        return error_response(e)

    return _ingest_response(result)


@csrf_exempt
@require_POST
@client_required()
def attach_booking_artifact(request: HttpRequest, booking_id: int) -> JsonResponse:
    """
    Attach a conversation PDF to a booking and notify the client's channels.

    POST /api/bookings/<id>/artifact/
    Body: multipart ``file`` (PDF) or JSON ``{"artifact_url": "..."}``
    """
    client = request.client  # type: ignore[attr-defined]

    try:
        if "file" in request.FILES:
            artifact_url = _store_upload(request, client.pk, booking_id)
        else:
            try:
                raw = _parse_json(request)
            except ValueError:
                return bad_request("Invalid JSON")
            try:
                body = ArtifactAttachRequest.model_validate(raw)
            except PydanticValidationError as e:
                return validation_error_response(e)
            artifact_url = str(body.artifact_url)

        booking, report = attach_artifact(client, booking_id, artifact_url)
    except _UploadRejected as e:
        return bad_request(str(e))
    except OutreachError as e:
        return error_response(e)

    response = ArtifactAttachResponse(
        booking=BookingSchema.model_validate(booking),
        notification=report,
    )
    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["POST", "PATCH"])
@client_required()
def update_booking(request: HttpRequest, booking_id: int) -> JsonResponse:
    """
    Record the call outcome of one of the client's bookings.

    POST|PATCH /api/bookings/<id>/
    Header: X-Access-Token
    Body: any of showed_up, call_outcome, closer_notes, archived
    """
    client = request.client  # type: ignore[attr-defined]

    try:
        raw = _parse_json(request)
    except ValueError:
        return bad_request("Invalid JSON")

    try:
        update = BookingOutcomeUpdate.model_validate(raw)
    except PydanticValidationError as e:
        return validation_error_response(e)

    try:
        booking = update_booking_outcome(client, booking_id, update)
    except OutreachError as e:
        return error_response(e)

    response = BookingUpdateResponse(
        booking=BookingSchema.model_validate(booking),
        status_changed=booking.status != booking.previous_status,
    )
    return json_response(response.model_dump(mode="json"))


def _store_upload(request: HttpRequest, client_id: int, booking_id: int) -> str:
    """Save an uploaded PDF with the default storage and return its URL."""
    if not Booking.objects.for_client(request).filter(pk=booking_id).exists():
        raise NotFoundError(f"Booking {booking_id} not found")

    upload = request.FILES["file"]
    is_pdf = upload.content_type in PDF_CONTENT_TYPES or (
        upload.name or ""
    ).lower().endswith(".pdf")
    if not is_pdf:
        raise _UploadRejected("Only PDF files are accepted")

    path = f"artifacts/{client_id}/{booking_id}/{uuid.uuid4().hex}.pdf"
    name = default_storage.save(path, upload)
    url = default_storage.url(name)
    logger.info("Stored artifact for booking %s at %s", booking_id, name)
    return request.build_absolute_uri(url)
