"""
Pydantic schemas for booking API requests and responses.

These schemas define the API contract for the trigger, artifact and outcome
endpoints.
"""

from datetime import datetime

from outreach_schemas import BookingStatus, DispatchReport
from pydantic import AnyHttpUrl, BaseModel, ConfigDict


class BookingSchema(BaseModel):
    """A booking as shown to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    provider_event_id: str
    contact_name: str
    contact_email: str
    contact_phone: str
    event_type_name: str
    event_time: datetime | None
    status: BookingStatus
    artifact_url: str
    cancel_url: str
    reschedule_url: str
    showed_up: bool | None
    call_outcome: str
    closer_notes: str
    archived: bool
    created_at: datetime


class IngestResponse(BaseModel):
    """Response after recording a booking occurrence."""

    success: bool = True
    booking: BookingSchema
    created: bool
    status_changed: bool
    notification: DispatchReport | None = None


class IgnoredResponse(BaseModel):
    """Response for webhook deliveries that need no action."""

    success: bool = True
    ignored: bool = True


class ArtifactAttachRequest(BaseModel):
    """JSON body for attaching an already-hosted artifact."""

    artifact_url: AnyHttpUrl


class BookingUpdateResponse(BaseModel):
    """Response after recording a call outcome."""

    success: bool = True
    booking: BookingSchema
    status_changed: bool


class ArtifactAttachResponse(BaseModel):
    """Response after attaching an artifact."""

    success: bool = True
    booking: BookingSchema
    notification: DispatchReport
