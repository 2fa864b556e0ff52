"""
Pydantic schemas for the client dashboard response.
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apps.web.bookings.serializers import BookingSchema


class ConnectionSummary(BaseModel):
    """Who the dashboard belongs to."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_active: bool
    timezone: str
    created_at: dt.datetime


class CampaignStatSchema(BaseModel):
    """One day of campaign numbers."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    messages_sent: int
    replies_received: int
    connections_made: int
    meetings_booked: int
    total_prospects: int
    response_rate: Decimal
    acceptance_rate: Decimal
    campaign_data: dict[str, Any] = Field(default_factory=dict)


class DashboardStats(BaseModel):
    """Latest numbers, recent history and the booking count."""

    latest: CampaignStatSchema | None = None
    history: list[CampaignStatSchema] = Field(default_factory=list)
    active_booking_count: int = 0


class DashboardResponse(BaseModel):
    """Everything the client dashboard renders."""

    success: bool = True
    connection: ConnectionSummary
    stats: DashboardStats
    bookings: list[BookingSchema] = Field(default_factory=list)
