"""
Integrations models - External service connections.

Caches the webhook subscription handles registered with the scheduling
provider so they can be deleted or recreated later.
"""

from django.db import models

from apps.web.core.models import ClientScopedModel


class WebhookSubscription(ClientScopedModel):
    """
    Local handle of a provider webhook subscription.

    The provider is the source of truth; this row remembers which
    subscription belongs to which client.
    """

    class Scope(models.TextChoices):
        USER = "user", "User"
        ORGANIZATION = "organization", "Organization"

    uri = models.CharField(max_length=500, help_text="Provider-assigned handle")
    callback_url = models.URLField(max_length=500)
    scope = models.CharField(max_length=20, choices=Scope.choices, default=Scope.USER)
    scope_uri = models.CharField(max_length=500, blank=True)
    events = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["client", "scope"],
                condition=models.Q(is_active=True),
                name="unique_active_subscription_per_client_scope",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.scope} subscription for {self.client}"
