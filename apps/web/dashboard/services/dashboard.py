"""
Client dashboard read - summary, recent stats and reconciled bookings.
"""

import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

from apps.web.bookings.serializers import BookingSchema
from apps.web.bookings.services.reconciler import get_reconciled_bookings
from apps.web.bookings.services.store import count_active
from apps.web.core.models import ClientConnection
from apps.web.dashboard.models import CampaignStat
from apps.web.dashboard.serializers import (
    CampaignStatSchema,
    ConnectionSummary,
    DashboardResponse,
    DashboardStats,
)

logger = logging.getLogger(__name__)


def get_stats_history(
    connection: ClientConnection, days: int | None = None, now: datetime | None = None
) -> list[CampaignStat]:
    """Daily stats for the last ``days`` days, newest first."""
    days = settings.DASHBOARD_STATS_DAYS if days is None else days
    today = timezone.localdate(now or timezone.now())
    return list(
        CampaignStat.objects.filter(
            client=connection, date__gte=today - timedelta(days=days)
        ).order_by("-date")
    )


def build_dashboard(
    connection: ClientConnection, now: datetime | None = None
) -> DashboardResponse:
    """
    Assemble the dashboard for a client.

    Bookings go through the reconciler, so past scheduled meetings are
    shown (and stored) as completed.
    """
    history = get_stats_history(connection, now=now)
    bookings = get_reconciled_bookings(connection, now=now)

    logger.info(
        "Dashboard for client %s: %d stat rows, %d bookings",
        connection.pk,
        len(history),
        len(bookings),
    )

    history_schemas = [CampaignStatSchema.model_validate(stat) for stat in history]
    return DashboardResponse(
        connection=ConnectionSummary.model_validate(connection),
        stats=DashboardStats(
            latest=history_schemas[0] if history_schemas else None,
            history=history_schemas,
            active_booking_count=count_active(connection),
        ),
        bookings=[BookingSchema.model_validate(booking) for booking in bookings],
    )
