"""Text helpers shared by channel adapters."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"


def format_event_time(event_time: datetime | None, tz_name: str) -> str:
    """
    Render an event time in the client's timezone.

    Example: 'Mon, Jan 1, 2024 3:00 PM EST'. Unknown zones fall back to UTC.
    """
    if event_time is None:
        return "TBD"

    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", tz_name)
        tz = ZoneInfo("UTC")

    local = event_time.astimezone(tz)
    hour = local.strftime("%I").lstrip("0")
    return f"{local:%a, %b} {local.day}, {local.year} {hour}:{local:%M %p %Z}"


def or_default(value: str | None, default: str = NOT_PROVIDED) -> str:
    return value or default
