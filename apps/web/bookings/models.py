"""
Booking models - meetings booked through a client's scheduling account.
"""

from django.db import models

from apps.web.core.models import ClientScopedModel


class Booking(ClientScopedModel):
    """
    One invitee booking, keyed by the provider's identifier.

    Status only moves forward: scheduled -> completed or scheduled ->
    canceled. Completed and canceled are terminal.
    """

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        COMPLETED = "completed", "Completed"
        CANCELED = "canceled", "Canceled"

    TERMINAL_STATUSES = (Status.COMPLETED, Status.CANCELED)

    provider_event_id = models.CharField(
        max_length=500,
        help_text="Provider invitee URI",
    )
    scheduled_event_uri = models.CharField(max_length=500, blank=True)

    # Contact
    contact_name = models.CharField(max_length=200, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)

    # Event
    event_type_name = models.CharField(max_length=200, blank=True)
    event_type_uri = models.CharField(max_length=500, blank=True)
    event_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED,
    )
    cancel_url = models.URLField(max_length=500, blank=True)
    reschedule_url = models.URLField(max_length=500, blank=True)

    # Attached after the meeting, owned by artifact attach
    artifact_url = models.URLField(max_length=1000, blank=True)

    # Post-call outcome, owned by the client through update_booking_outcome
    showed_up = models.BooleanField(null=True, blank=True)
    call_outcome = models.CharField(max_length=200, blank=True)
    closer_notes = models.TextField(blank=True)
    archived = models.BooleanField(default=False, db_index=True)

    raw_payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = [models.F("event_time").desc(nulls_last=True)]
        constraints = [
            models.UniqueConstraint(
                fields=["client", "provider_event_id"],
                name="unique_booking_per_client_event",
            ),
        ]
        indexes = [
            models.Index(fields=["client", "status"]),
            models.Index(fields=["status", "event_time"]),
        ]

    # Status before the last upsert; not persisted
    previous_status: str | None = None

    def __str__(self) -> str:
        return f"{self.contact_name or self.contact_email} @ {self.event_time}"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES
