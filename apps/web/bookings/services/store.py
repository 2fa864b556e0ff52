"""
Booking store - persistence of bookings keyed by (client, provider event id).

Handles:
1. Atomic insert-or-update of ingested bookings
2. Forward-only status transitions (terminal states never regress)
3. Reads ordered by event time
4. Artifact references attached after the meeting
5. Client-reported call outcomes
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from django.db import DatabaseError, IntegrityError, models, transaction
from django.utils import timezone

from outreach_schemas import BookingOutcomeUpdate

from apps.web.bookings.models import Booking
from apps.web.core.exceptions import NotFoundError, PersistenceError
from apps.web.core.models import ClientConnection

logger = logging.getLogger(__name__)

# Fields fully replaced by every upsert. artifact_url is owned by set_artifact
# and the outcome fields by update_booking_outcome.
INGESTION_FIELDS = (
    "scheduled_event_uri",
    "contact_name",
    "contact_email",
    "contact_phone",
    "event_type_name",
    "event_type_uri",
    "event_time",
    "status",
    "cancel_url",
    "reschedule_url",
    "raw_payload",
)


def upsert_booking(
    client: ClientConnection,
    provider_event_id: str,
    fields: dict[str, Any],
) -> tuple[Booking, bool]:
    """
    Insert or update the booking for (client, provider_event_id).

    Ingestion fields missing from ``fields`` are reset to their defaults, so
    a redelivered payload fully describes the row. A completed or canceled
    booking keeps its status.

    The returned booking has ``previous_status`` set to its status before
    this call (None when created).

    Returns:
        (booking, created)

    Raises:
        ValueError: If ``fields`` contains a non-ingestion field.
        PersistenceError: If the database write fails.
    """
    unknown = set(fields) - set(INGESTION_FIELDS)
    if unknown:
        raise ValueError(f"Not ingestion fields: {', '.join(sorted(unknown))}")

    values = {name: fields.get(name, _default(name)) for name in INGESTION_FIELDS}

    try:
        return _upsert(client, provider_event_id, values)
    except IntegrityError:
        # Concurrent insert of the same key won; the row exists now
        logger.info(
            "Concurrent insert for booking %s (client %s), retrying as update",
            provider_event_id,
            client.pk,
        )
    except DatabaseError as e:
        raise PersistenceError(f"Failed to upsert booking: {e}") from e

    try:
        return _upsert(client, provider_event_id, values)
    except DatabaseError as e:
        raise PersistenceError(f"Failed to upsert booking: {e}") from e


def get_bookings_for_client(
    client: ClientConnection, since: datetime | None = None
) -> list[Booking]:
    """All bookings of a client, newest event first, undated last."""
    qs = Booking.objects.filter(client=client)
    if since is not None:
        qs = qs.filter(event_time__gte=since)
    return list(
        qs.order_by(models.F("event_time").desc(nulls_last=True), "-created_at")
    )


def count_active(client: ClientConnection) -> int:
    """Number of bookings of a client, regardless of status."""
    return Booking.objects.filter(client=client).count()


def mark_completed(booking_ids: Iterable[int]) -> int:
    """
    Move scheduled bookings to completed.

    Only rows still scheduled are touched, so a concurrent cancellation is
    never overwritten. Returns the number of rows updated.
    """
    ids = list(booking_ids)
    if not ids:
        return 0

    try:
        return Booking.objects.filter(
            pk__in=ids, status=Booking.Status.SCHEDULED
        ).update(status=Booking.Status.COMPLETED, updated_at=timezone.now())
    except DatabaseError as e:
        raise PersistenceError(f"Failed to mark bookings completed: {e}") from e


def set_artifact(client: ClientConnection, booking_id: int, url: str) -> Booking:
    """
    Attach an artifact reference to a booking.

    Raises:
        NotFoundError: If the booking does not belong to this client.
        PersistenceError: If the database write fails.
    """
    try:
        booking = Booking.objects.get(client=client, pk=booking_id)
    except Booking.DoesNotExist as e:
        raise NotFoundError(f"Booking {booking_id} not found") from e

    booking.artifact_url = url
    try:
        booking.save(update_fields=["artifact_url", "updated_at"])
    except DatabaseError as e:
        raise PersistenceError(f"Failed to attach artifact: {e}") from e

    logger.info("Attached artifact to booking %s", booking.pk)
    return booking


def update_booking_outcome(
    client: ClientConnection, booking_id: int, update: BookingOutcomeUpdate
) -> Booking:
    """
    Record what happened on the call.

    Only fields present in ``update`` are written. Marking a scheduled
    booking as showed up completes it; a canceled booking stays canceled.

    Raises:
        NotFoundError: If the booking does not belong to this client.
        PersistenceError: If the database write fails.
    """
    values = update.model_dump(exclude_unset=True)

    try:
        with transaction.atomic():
            try:
                booking = Booking.objects.select_for_update().get(
                    client=client, pk=booking_id
                )
            except Booking.DoesNotExist as e:
                raise NotFoundError(f"Booking {booking_id} not found") from e

            booking.previous_status = booking.status
            update_fields = ["updated_at"]
            for name, value in values.items():
                if value is None and name in ("call_outcome", "closer_notes"):
                    value = ""
                if value is None and name == "archived":
                    continue
                setattr(booking, name, value)
                update_fields.append(name)

            if booking.showed_up and booking.status == Booking.Status.SCHEDULED:
                booking.status = Booking.Status.COMPLETED
                update_fields.append("status")

            booking.save(update_fields=update_fields)
    except DatabaseError as e:
        raise PersistenceError(f"Failed to update booking outcome: {e}") from e

    logger.info(
        "Updated outcome of booking %s (%s)", booking.pk, ", ".join(sorted(values))
    )
    return booking


def _default(name: str) -> Any:
    return Booking._meta.get_field(name).get_default()


def _upsert(
    client: ClientConnection, provider_event_id: str, values: dict[str, Any]
) -> tuple[Booking, bool]:
    with transaction.atomic():
        booking = (
            Booking.objects.select_for_update()
            .filter(client=client, provider_event_id=provider_event_id)
            .first()
        )

        if booking is None:
            booking = Booking.objects.create(
                client=client, provider_event_id=provider_event_id, **values
            )
            booking.previous_status = None
            return booking, True

        previous_status = booking.status
        if booking.is_terminal:
            values = {**values, "status": previous_status}
        for name, value in values.items():
            setattr(booking, name, value)
        booking.save()
        booking.previous_status = previous_status
        return booking, False
