"""
Notification dispatcher - fans one occurrence out to a client's chat channels.

Handles:
1. Resolving which channels a client has configured
2. Rendering and sending per channel, concurrently, each with its own timeout
3. Containing failures per channel so one channel never blocks another
4. Reporting what happened without ever raising to the caller
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from django.conf import settings
from django.db import DatabaseError

from outreach_schemas import (
    ChannelKind,
    ChannelOutcome,
    DeliveryStatus,
    DispatchReport,
    NotificationOccurrence,
    OccurrenceKind,
)

from apps.web.bookings.models import Booking
from apps.web.core.exceptions import AdapterError
from apps.web.core.models import ClientConnection
from apps.web.notifications.adapters import ChannelAdapter, get_adapter

logger = logging.getLogger(__name__)


def build_occurrence(
    booking: Booking,
    kind: OccurrenceKind,
    artifact_url: str | None = None,
) -> NotificationOccurrence:
    """Snapshot a booking and its client into a dispatchable occurrence."""
    client = booking.client
    return NotificationOccurrence(
        kind=kind,
        client_id=client.pk,
        booking_id=booking.pk,
        client_name=client.name,
        contact_name=booking.contact_name,
        contact_email=booking.contact_email,
        contact_phone=booking.contact_phone,
        event_type_name=booking.event_type_name,
        event_time=booking.event_time,
        timezone=client.timezone or "UTC",
        dashboard_url=client.dashboard_url,
        artifact_url=artifact_url or booking.artifact_url or None,
    )


def dispatch(occurrence: NotificationOccurrence) -> DispatchReport:
    """
    Deliver an occurrence to every channel configured for its client.

    Never raises: missing or inactive clients and channel failures are all
    recorded in the returned report.

    Synchronous. When called from a running event loop the whole dispatch
    runs in a worker thread, so the ORM lookup and the per-channel event loop
    stay off the caller's loop; the caller blocks until the report is ready.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _dispatch(occurrence)

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(_dispatch, occurrence).result()


def _dispatch(occurrence: NotificationOccurrence) -> DispatchReport:
    report = DispatchReport(
        kind=occurrence.kind,
        client_id=occurrence.client_id,
        booking_id=occurrence.booking_id,
    )

    try:
        connection = ClientConnection.objects.get(pk=occurrence.client_id)
    except ClientConnection.DoesNotExist:
        logger.warning(
            "Dispatch of %s skipped: client %s not found",
            occurrence.kind.value,
            occurrence.client_id,
        )
        report.skipped_reason = "client_not_found"
        return report
    except DatabaseError:
        logger.exception(
            "Dispatch of %s skipped: failed to load client %s",
            occurrence.kind.value,
            occurrence.client_id,
        )
        report.skipped_reason = "client_lookup_failed"
        return report

    targets = channel_targets(connection)
    if not targets:
        logger.info("Client %s has no channels configured", connection.pk)
        report.skipped_reason = "no_channels_configured"
        return report

    if not connection.is_active:
        logger.info(
            "Dispatch of %s skipped: client %s is inactive",
            occurrence.kind.value,
            connection.pk,
        )
        report.skipped_reason = "client_inactive"
        report.outcomes = [
            ChannelOutcome(
                channel=channel,
                status=DeliveryStatus.SKIPPED,
                error="client inactive",
            )
            for channel, _target in targets
        ]
        return report

    report.outcomes = asyncio.run(_send_all(occurrence, targets))

    for outcome in report.failed:
        logger.warning(
            "Failed to deliver %s for booking %s to %s: %s",
            occurrence.kind.value,
            occurrence.booking_id,
            outcome.channel.value,
            outcome.error,
        )
    logger.info(
        "Dispatched %s for booking %s: %d sent, %d failed",
        occurrence.kind.value,
        occurrence.booking_id,
        len(report.sent),
        len(report.failed),
    )
    return report


def channel_targets(connection: ClientConnection) -> list[tuple[ChannelKind, str]]:
    """Configured (channel, target) pairs in delivery order."""
    targets: list[tuple[ChannelKind, str]] = []
    if connection.discord_webhook_url:
        targets.append((ChannelKind.DISCORD, connection.discord_webhook_url))
    if connection.slack_channel_id:
        targets.append((ChannelKind.SLACK, connection.slack_channel_id))
    return targets


async def _send_all(
    occurrence: NotificationOccurrence,
    targets: list[tuple[ChannelKind, str]],
) -> list[ChannelOutcome]:
    timeout = settings.NOTIFICATION_TIMEOUT_SECONDS
    return list(
        await asyncio.gather(
            *(
                _send_one(occurrence, channel, target, timeout)
                for channel, target in targets
            )
        )
    )


async def _send_one(
    occurrence: NotificationOccurrence,
    channel: ChannelKind,
    target: str,
    timeout: float,
) -> ChannelOutcome:
    adapter = get_adapter(channel)
    try:
        payload = adapter.render(occurrence)
        await _send_bounded(adapter, target, payload, timeout)
    except AdapterError as e:
        return ChannelOutcome(
            channel=channel,
            status=DeliveryStatus.FAILED,
            error=e.message,
            status_code=e.status_code,
        )
    except Exception as e:
        # Unexpected adapter bugs stay inside this channel's boundary
        logger.exception("Unexpected error sending to %s", channel.value)
        return ChannelOutcome(
            channel=channel, status=DeliveryStatus.FAILED, error=str(e)
        )
    finally:
        await adapter.close()

    return ChannelOutcome(channel=channel, status=DeliveryStatus.SENT)


async def _send_bounded(
    adapter: ChannelAdapter,
    target: str,
    payload: dict[str, Any],
    timeout: float,
) -> None:
    try:
        await asyncio.wait_for(adapter.send(target, payload), timeout=timeout)
    except TimeoutError as e:
        raise AdapterError(
            f"{adapter.channel.value} send timed out after {timeout}s",
            provider=adapter.channel.value,
        ) from e
