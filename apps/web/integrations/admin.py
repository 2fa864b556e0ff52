"""Admin registrations for integration models."""

from django.contrib import admin

from .models import WebhookSubscription


@admin.register(WebhookSubscription)
class WebhookSubscriptionAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["client", "scope", "is_active", "created_at", "deactivated_at"]
    list_filter = ["scope", "is_active"]
    search_fields = ["client__name", "uri", "callback_url"]
    readonly_fields = ["uri", "created_at", "updated_at", "deactivated_at"]
