"""
Booking ingestion - turns provider webhooks and trigger calls into bookings.

Handles:
1. Calendly webhook signature verification
2. Matching a webhook to its client connection
3. Recording the booking through the store
4. Notifying the client's channels only on real state changes
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Any

from outreach_schemas import (
    BookingOccurrencePayload,
    BookingStatus,
    CalendlyEvent,
    CalendlyWebhookPayload,
    DispatchReport,
    OccurrenceKind,
)

from apps.web.bookings.models import Booking
from apps.web.bookings.services.store import set_artifact, upsert_booking
from apps.web.core.exceptions import AuthError, NotFoundError
from apps.web.core.models import ClientConnection
from apps.web.notifications.services.dispatcher import build_occurrence, dispatch

logger = logging.getLogger(__name__)

HANDLED_EVENTS = {
    CalendlyEvent.INVITEE_CREATED.value,
    CalendlyEvent.INVITEE_CANCELED.value,
}


@dataclass
class IngestResult:
    """Outcome of recording one booking occurrence."""

    booking: Booking
    created: bool
    status_changed: bool
    notification: DispatchReport | None = None


def record_booking_occurrence(
    connection: ClientConnection,
    payload: BookingOccurrencePayload,
    raw_payload: dict[str, Any],
) -> IngestResult:
    """
    Upsert a booking and notify the client when something actually changed.

    A redelivered occurrence updates the row but sends nothing. A new
    booking notifies booking_created (or booking_canceled when the first
    thing we hear is the cancellation); an existing booking notifies
    booking_canceled only when its status moved to canceled.

    Raises:
        PersistenceError: If the store write fails.
    """
    fields = payload.model_dump(exclude={"provider_event_id"})
    fields["status"] = payload.status.value
    fields["raw_payload"] = raw_payload

    booking, created = upsert_booking(connection, payload.provider_event_id, fields)
    status_changed = not created and booking.previous_status != booking.status

    kind: OccurrenceKind | None = None
    if booking.status == Booking.Status.CANCELED and (created or status_changed):
        kind = OccurrenceKind.BOOKING_CANCELED
    elif created:
        kind = OccurrenceKind.BOOKING_CREATED

    result = IngestResult(
        booking=booking, created=created, status_changed=status_changed
    )
    if kind is None:
        logger.info(
            "Booking %s for client %s unchanged in status, not notifying",
            booking.pk,
            connection.pk,
        )
        return result

    result.notification = dispatch(build_occurrence(booking, kind))
    return result


def handle_calendly_event(
    payload: CalendlyWebhookPayload, raw_payload: dict[str, Any]
) -> IngestResult | None:
    """
    Process one Calendly webhook delivery.

    Returns None when the event is ignored (unhandled event kind or an
    event type the client does not watch).

    Raises:
        NotFoundError: If no active client owns the event's host.
    """
    if payload.event not in HANDLED_EVENTS:
        logger.info("Ignoring Calendly event %s", payload.event)
        return None

    invitee = payload.payload
    scheduled = invitee.scheduled_event
    host_uri = (scheduled.host_user_uri if scheduled else None) or payload.created_by

    connection = ClientConnection.objects.match_provider_user(host_uri)
    if connection is None:
        raise NotFoundError(f"No active client for Calendly user {host_uri}")

    event_type_uri = scheduled.event_type if scheduled else None
    if not connection.watches(event_type_uri):
        logger.info(
            "Event type %s not watched by client %s, skipping",
            event_type_uri,
            connection.pk,
        )
        return None

    status = (
        BookingStatus.CANCELED
        if payload.event == CalendlyEvent.INVITEE_CANCELED.value
        else BookingStatus.SCHEDULED
    )
    occurrence = BookingOccurrencePayload(
        provider_event_id=invitee.uri,
        scheduled_event_uri=(scheduled.uri if scheduled else None) or "",
        contact_name=invitee.name or "",
        contact_email=invitee.email or "",
        contact_phone=invitee.phone or "",
        event_type_name=(scheduled.name if scheduled else None) or "",
        event_type_uri=event_type_uri or "",
        event_time=scheduled.start_time if scheduled else None,
        status=status,
        cancel_url=invitee.cancel_url or "",
        reschedule_url=invitee.reschedule_url or "",
    )
    return record_booking_occurrence(connection, occurrence, raw_payload)


def attach_artifact(
    connection: ClientConnection, booking_id: int, artifact_url: str
) -> tuple[Booking, DispatchReport]:
    """
    Attach an artifact to a booking and announce it.

    The reference is persisted first; delivery failures are only reported
    and never undo it.

    Raises:
        NotFoundError: If the booking does not belong to this client.
        PersistenceError: If the store write fails.
    """
    booking = set_artifact(connection, booking_id, artifact_url)
    report = dispatch(
        build_occurrence(booking, OccurrenceKind.ARTIFACT_ATTACHED, artifact_url)
    )
    return booking, report


def verify_calendly_signature(
    body: bytes,
    header: str | None,
    signing_key: str,
    tolerance: int | None = None,
    now: float | None = None,
) -> None:
    """
    Verify a Calendly-Webhook-Signature header.

    The header looks like ``t=1492774577,v1=5257a869...``; v1 is the hex
    HMAC-SHA256 of ``"{t}.{body}"`` keyed with the subscription's signing key.

    Raises:
        AuthError: If the header is missing, malformed, stale, or wrong.
    """
    if not header:
        raise AuthError("Missing Calendly signature", provider="calendly")

    parts: dict[str, str] = {}
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts[key] = value

    timestamp = parts.get("t")
    signature = parts.get("v1")
    if not timestamp or not signature:
        raise AuthError("Malformed Calendly signature", provider="calendly")

    if tolerance:
        try:
            signed_at = int(timestamp)
        except ValueError as e:
            raise AuthError(
                "Malformed Calendly signature timestamp", provider="calendly"
            ) from e
        current = now if now is not None else time.time()
        if abs(current - signed_at) > tolerance:
            raise AuthError("Calendly signature is too old", provider="calendly")

    signed_payload = timestamp.encode() + b"." + body
    expected = hmac.new(
        signing_key.encode(), signed_payload, hashlib.sha256
    ).hexdigest()
    if not hmac.compare_digest(expected, signature):
        raise AuthError("Invalid Calendly signature", provider="calendly")
