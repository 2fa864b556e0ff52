"""Admin registrations for dashboard models."""

from django.contrib import admin

from .models import CampaignStat


@admin.register(CampaignStat)
class CampaignStatAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = [
        "client",
        "date",
        "messages_sent",
        "replies_received",
        "meetings_booked",
        "response_rate",
    ]
    list_filter = ["client"]
    date_hierarchy = "date"
