"""Booking contracts - normalized occurrence payload accepted by ingestion."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator


class BookingStatus(str, Enum):
    """Booking lifecycle state."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELED = "canceled"


class BookingOccurrencePayload(BaseModel):
    """
    A booking as reported by the scheduling provider.

    Provider webhooks are converted into this shape; the credential-based
    trigger endpoint accepts it directly. Providers only ever report a
    booking as scheduled or canceled; completed is derived from the event
    time or from a recorded attendance.
    """

    provider_event_id: str = Field(..., min_length=1, max_length=500)
    scheduled_event_uri: str = Field(default="", max_length=500)
    contact_name: str = Field(default="", max_length=200)
    contact_email: EmailStr | Literal[""] = ""
    contact_phone: str = Field(default="", max_length=50)
    event_type_name: str = Field(default="", max_length=200)
    event_type_uri: str = Field(default="", max_length=500)
    event_time: datetime | None = None
    status: BookingStatus = BookingStatus.SCHEDULED
    cancel_url: str = Field(default="", max_length=500)
    reschedule_url: str = Field(default="", max_length=500)

    @field_validator("status")
    @classmethod
    def status_is_reportable(cls, v: BookingStatus) -> BookingStatus:
        if v == BookingStatus.COMPLETED:
            raise ValueError("status must be scheduled or canceled")
        return v


class BookingOutcomeUpdate(BaseModel):
    """
    Closer-reported outcome of a booking.

    Only fields present in the request are applied.
    """

    showed_up: bool | None = None
    call_outcome: str | None = Field(default=None, max_length=200)
    closer_notes: str | None = Field(default=None, max_length=5000)
    archived: bool | None = None
