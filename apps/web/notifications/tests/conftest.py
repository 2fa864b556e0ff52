"""
Shared occurrences for notification tests.
"""

from datetime import UTC, datetime

import pytest
from outreach_schemas import NotificationOccurrence, OccurrenceKind


@pytest.fixture
def occurrence() -> NotificationOccurrence:
    """A booking_created occurrence with every field filled."""
    return NotificationOccurrence(
        kind=OccurrenceKind.BOOKING_CREATED,
        client_id=1,
        booking_id=42,
        client_name="Acme Dental",
        contact_name="Jane Smith",
        contact_email="jane@example.com",
        contact_phone="555-123-4567",
        event_type_name="Discovery Call",
        event_time=datetime(2024, 1, 1, 20, 0, tzinfo=UTC),
        timezone="America/New_York",
        dashboard_url="https://portal.example.com/dashboard?code=acme",
    )
