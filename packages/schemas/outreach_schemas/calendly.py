"""Calendly data contracts - webhook payloads and API resources."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# =============================================================================
# Enums
# =============================================================================


class CalendlyEvent(str, Enum):
    """Webhook events we subscribe to."""

    INVITEE_CREATED = "invitee.created"
    INVITEE_CANCELED = "invitee.canceled"


class SubscriptionScope(str, Enum):
    """Provider-side addressing unit of a webhook subscription."""

    USER = "user"
    ORGANIZATION = "organization"


DEFAULT_EVENTS = [CalendlyEvent.INVITEE_CREATED, CalendlyEvent.INVITEE_CANCELED]


# =============================================================================
# Webhook Payloads
# =============================================================================


class CalendlyQuestionAnswer(BaseModel):
    """A custom question answered by the invitee at booking time."""

    question: str
    answer: str | None = None


class CalendlyEventMembership(BaseModel):
    """Host of a scheduled event."""

    model_config = ConfigDict(extra="ignore")

    user: str | None = None
    user_email: str | None = None
    user_name: str | None = None


class CalendlyScheduledEvent(BaseModel):
    """The scheduled event an invitee booked into."""

    model_config = ConfigDict(extra="ignore")

    uri: str | None = None
    name: str | None = None
    event_type: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str | None = None
    event_memberships: list[CalendlyEventMembership] = Field(default_factory=list)

    @property
    def host_user_uri(self) -> str | None:
        """URI of the first host, used to match the owning client."""
        for membership in self.event_memberships:
            if membership.user:
                return membership.user
        return None


class CalendlyInvitee(BaseModel):
    """
    Invitee resource as delivered in invitee.* webhooks.

    Calendly nests the scheduled event inside the invitee payload.
    """

    model_config = ConfigDict(extra="ignore")

    uri: str
    name: str | None = None
    email: EmailStr | None = None
    status: str | None = None
    cancel_url: str | None = None
    reschedule_url: str | None = None
    questions_and_answers: list[CalendlyQuestionAnswer] = Field(default_factory=list)
    scheduled_event: CalendlyScheduledEvent | None = None

    @property
    def phone(self) -> str | None:
        """Phone number from the first question mentioning a phone."""
        for qa in self.questions_and_answers:
            if "phone" in qa.question.lower() and qa.answer:
                return qa.answer
        return None


class CalendlyWebhookPayload(BaseModel):
    """Envelope of a Calendly webhook delivery."""

    model_config = ConfigDict(extra="ignore")

    event: str
    created_at: datetime | None = None
    created_by: str | None = None
    payload: CalendlyInvitee


# =============================================================================
# API Resources
# =============================================================================


class CalendlyUser(BaseModel):
    """Subset of the users/me resource."""

    model_config = ConfigDict(extra="ignore")

    uri: str
    name: str | None = None
    email: EmailStr | None = None
    current_organization: str
    timezone: str | None = None


class ScopeTarget(BaseModel):
    """What a webhook subscription is registered against."""

    scope: SubscriptionScope = SubscriptionScope.USER
    organization_uri: str
    user_uri: str | None = None

    def as_query(self) -> dict[str, str]:
        """Query parameters identifying this scope in list calls."""
        params = {"organization": self.organization_uri, "scope": self.scope.value}
        if self.scope == SubscriptionScope.USER and self.user_uri:
            params["user"] = self.user_uri
        return params


class CalendlyWebhookSubscription(BaseModel):
    """A webhook subscription handle as returned by the provider."""

    model_config = ConfigDict(extra="ignore")

    uri: str
    callback_url: str
    state: str = "active"
    scope: SubscriptionScope
    organization: str | None = None
    user: str | None = None
    events: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
