"""
Booking reconciler - derives completed status for past bookings.

The provider sends no event when a meeting happens, so a scheduled booking
whose time has passed is completed on read. The corrected state is returned
even when persisting it fails; the next read retries the write.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from django.utils import timezone

from apps.web.bookings.models import Booking
from apps.web.bookings.services.store import get_bookings_for_client, mark_completed
from apps.web.core.exceptions import PersistenceError
from apps.web.core.models import ClientConnection

logger = logging.getLogger(__name__)


def reconcile_bookings(
    bookings: Sequence[Booking], now: datetime | None = None
) -> list[Booking]:
    """
    Complete every scheduled booking whose event time is strictly in the past.

    Terminal and undated bookings are left alone. At most one bulk write is
    issued, and none when nothing needs to change.
    """
    now = now or timezone.now()
    due = [
        booking
        for booking in bookings
        if booking.status == Booking.Status.SCHEDULED
        and booking.event_time is not None
        and booking.event_time < now
    ]
    if not due:
        return list(bookings)

    for booking in due:
        booking.status = Booking.Status.COMPLETED

    try:
        updated = mark_completed([booking.pk for booking in due])
    except PersistenceError:
        logger.exception(
            "Failed to persist %d completed bookings, serving corrected state",
            len(due),
        )
    else:
        logger.info("Completed %d past bookings", updated)

    return list(bookings)


def get_reconciled_bookings(
    client: ClientConnection,
    since: datetime | None = None,
    now: datetime | None = None,
) -> list[Booking]:
    """Bookings of a client with past scheduled ones completed."""
    return reconcile_bookings(get_bookings_for_client(client, since=since), now=now)


def sweep_past_bookings(now: datetime | None = None) -> int:
    """
    Complete past scheduled bookings across all clients.

    Used by the periodic reconcile_bookings command so clients that never
    open the dashboard still converge.
    """
    now = now or timezone.now()
    due_ids = list(
        Booking.objects.filter(
            status=Booking.Status.SCHEDULED, event_time__lt=now
        ).values_list("pk", flat=True)
    )
    if not due_ids:
        return 0
    return mark_completed(due_ids)
