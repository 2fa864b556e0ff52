"""Outreach Schemas - Pydantic models for data contracts."""

from outreach_schemas.bookings import (
    BookingOccurrencePayload,
    BookingOutcomeUpdate,
    BookingStatus,
)
from outreach_schemas.calendly import (
    DEFAULT_EVENTS,
    CalendlyEvent,
    CalendlyEventMembership,
    CalendlyInvitee,
    CalendlyQuestionAnswer,
    CalendlyScheduledEvent,
    CalendlyUser,
    CalendlyWebhookPayload,
    CalendlyWebhookSubscription,
    ScopeTarget,
    SubscriptionScope,
)
from outreach_schemas.notifications import (
    ChannelKind,
    ChannelOutcome,
    DeliveryStatus,
    DispatchReport,
    NotificationOccurrence,
    OccurrenceKind,
)

__all__ = [
    # Bookings
    "BookingOccurrencePayload",
    "BookingOutcomeUpdate",
    "BookingStatus",
    # Calendly
    "DEFAULT_EVENTS",
    "CalendlyEvent",
    "CalendlyEventMembership",
    "CalendlyInvitee",
    "CalendlyQuestionAnswer",
    "CalendlyScheduledEvent",
    "CalendlyUser",
    "CalendlyWebhookPayload",
    "CalendlyWebhookSubscription",
    "ScopeTarget",
    "SubscriptionScope",
    # Notifications
    "ChannelKind",
    "ChannelOutcome",
    "DeliveryStatus",
    "DispatchReport",
    "NotificationOccurrence",
    "OccurrenceKind",
]
