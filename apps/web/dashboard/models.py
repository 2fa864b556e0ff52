"""
Dashboard models - daily outreach campaign statistics.

Rows are written by the external campaign-stats sync and only read here.
"""

from django.db import models

from apps.web.core.models import ClientScopedModel


class CampaignStat(ClientScopedModel):
    """One day of aggregate outreach numbers for a client."""

    date = models.DateField()
    messages_sent = models.PositiveIntegerField(default=0)
    replies_received = models.PositiveIntegerField(default=0)
    connections_made = models.PositiveIntegerField(default=0)
    meetings_booked = models.PositiveIntegerField(default=0)
    total_prospects = models.PositiveIntegerField(default=0)
    response_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    acceptance_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    campaign_data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["client", "date"],
                name="unique_campaign_stat_per_client_date",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.client} stats for {self.date}"
