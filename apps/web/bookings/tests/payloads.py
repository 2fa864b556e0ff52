"""
Calendly webhook bodies shaped like real deliveries.
"""

from typing import Any

HOST_URI = "https://api.calendly.com/users/ACMEUSER"
EVENT_TYPE_URI = "https://api.calendly.com/event_types/DISCOVERY"
SCHEDULED_EVENT_URI = "https://api.calendly.com/scheduled_events/EV123"
INVITEE_URI = f"{SCHEDULED_EVENT_URI}/invitees/INV456"


def invitee_webhook(
    event: str = "invitee.created",
    host_uri: str | None = HOST_URI,
    event_type_uri: str = EVENT_TYPE_URI,
    invitee_uri: str = INVITEE_URI,
) -> dict[str, Any]:
    memberships = [{"user": host_uri, "user_name": "Dr. Acme"}] if host_uri else []
    return {
        "event": event,
        "created_at": "2024-01-01T10:00:00.000000Z",
        "created_by": host_uri,
        "payload": {
            "uri": invitee_uri,
            "name": "Jane Smith",
            "email": "jane@example.com",
            "status": "canceled" if event == "invitee.canceled" else "active",
            "cancel_url": "https://calendly.com/cancellations/INV456",
            "reschedule_url": "https://calendly.com/reschedulings/INV456",
            "questions_and_answers": [
                {"question": "Company", "answer": "Smith Co"},
                {"question": "Phone Number", "answer": "555-123-4567"},
            ],
            "scheduled_event": {
                "uri": SCHEDULED_EVENT_URI,
                "name": "Discovery Call",
                "event_type": event_type_uri,
                "start_time": "2024-01-02T20:00:00.000000Z",
                "end_time": "2024-01-02T20:30:00.000000Z",
                "status": "active",
                "event_memberships": memberships,
            },
        },
    }
