"""Notification contracts - occurrences fed to the dispatcher and its report."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class OccurrenceKind(str, Enum):
    """What happened to a booking."""

    BOOKING_CREATED = "booking_created"
    BOOKING_CANCELED = "booking_canceled"
    ARTIFACT_ATTACHED = "artifact_attached"


class ChannelKind(str, Enum):
    """Supported destination chat channels."""

    DISCORD = "discord"
    SLACK = "slack"


class DeliveryStatus(str, Enum):
    """Outcome of one channel send."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class NotificationOccurrence(BaseModel):
    """
    Unit of work for the dispatcher.

    Built from a booking at dispatch time and never persisted.
    """

    kind: OccurrenceKind
    client_id: int
    booking_id: int
    client_name: str
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    event_type_name: str = ""
    event_time: datetime | None = None
    timezone: str = "UTC"
    dashboard_url: str = ""
    artifact_url: str | None = None


class ChannelOutcome(BaseModel):
    """Per-channel result recorded in a dispatch report."""

    channel: ChannelKind
    status: DeliveryStatus
    error: str | None = None
    status_code: int | None = None


class DispatchReport(BaseModel):
    """What happened to each configured channel for one occurrence."""

    kind: OccurrenceKind
    client_id: int
    booking_id: int
    outcomes: list[ChannelOutcome] = Field(default_factory=list)
    skipped_reason: str | None = None

    @property
    def sent(self) -> list[ChannelOutcome]:
        return [o for o in self.outcomes if o.status == DeliveryStatus.SENT]

    @property
    def failed(self) -> list[ChannelOutcome]:
        return [o for o in self.outcomes if o.status == DeliveryStatus.FAILED]

    @property
    def skipped(self) -> list[ChannelOutcome]:
        return [o for o in self.outcomes if o.status == DeliveryStatus.SKIPPED]
