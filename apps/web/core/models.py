"""
Core models - Multi-tenancy foundation.

All tenant-scoped models inherit from ClientScopedModel.
"""

from typing import Any
from urllib.parse import urlencode

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .managers import ClientConnectionManager, ClientScopedManager

# Fields a webhook subscription was created against
PROVIDER_IDENTITY_FIELDS = ("calendly_token", "calendly_user_uri", "calendly_org_uri")


class ClientConnection(models.Model):
    """
    Tenant - one onboarded agency client.

    Holds the scheduling provider credentials and the destination channel
    configuration. All bookings, stats and subscriptions are scoped to it.
    """

    name = models.CharField(max_length=200)
    access_token = models.CharField(
        max_length=100,
        unique=True,
        help_text="Client-facing credential for the dashboard and triggers",
    )

    # Scheduling provider (Calendly)
    calendly_token = models.TextField()
    calendly_user_uri = models.CharField(max_length=255, blank=True)
    calendly_org_uri = models.CharField(max_length=255, blank=True)
    watched_event_types = models.JSONField(
        default=list,
        blank=True,
        help_text="Event type URIs to relay; empty means all",
    )

    # Destination channels
    discord_webhook_url = models.URLField(max_length=500, blank=True)
    discord_channel_name = models.CharField(max_length=100, blank=True)
    slack_channel_id = models.CharField(max_length=50, blank=True)
    slack_channel_name = models.CharField(max_length=100, blank=True)

    timezone = models.CharField(max_length=64, default="UTC")

    # Status
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClientConnectionManager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"]),
            models.Index(fields=["calendly_user_uri"]),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        super().clean()
        self._check_provider_identity_unchanged()

    def save(self, *args: Any, **kwargs: Any) -> None:
        self._check_provider_identity_unchanged()
        super().save(*args, **kwargs)

    def _check_provider_identity_unchanged(self) -> None:
        """Changing credentials under a live subscription would orphan it."""
        if self._state.adding or self.pk is None:
            return

        original = (
            type(self)
            .objects.filter(pk=self.pk)
            .values(*PROVIDER_IDENTITY_FIELDS)
            .first()
        )
        if original is None:
            return

        changed = [
            f for f in PROVIDER_IDENTITY_FIELDS if original[f] != getattr(self, f)
        ]
        if changed and self.webhooksubscriptions.filter(is_active=True).exists():
            raise ValidationError(
                f"Cannot change {', '.join(changed)} while a webhook subscription "
                "is active. Unsubscribe first."
            )

    def watches(self, event_type_uri: str | None) -> bool:
        """Whether bookings of this event type should be relayed."""
        if not self.watched_event_types:
            return True
        return event_type_uri in self.watched_event_types

    @property
    def dashboard_url(self) -> str:
        """Deep link back to this client's dashboard."""
        return f"{settings.CLIENT_PORTAL_URL}?{urlencode({'code': self.access_token})}"


class ClientScopedModel(models.Model):
    """
    Abstract base for all tenant-scoped models.

    Provides:
    - Automatic client FK
    - ClientScopedManager for filtered queries
    - Created/updated timestamps
    """

    client = models.ForeignKey(
        ClientConnection,
        on_delete=models.CASCADE,
        related_name="%(class)ss",  # e.g., client.bookings, client.campaignstats
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClientScopedManager()

    class Meta:
        abstract = True
