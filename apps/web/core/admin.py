"""Admin registrations for core models."""

from django.contrib import admin

from .models import ClientConnection


@admin.register(ClientConnection)
class ClientConnectionAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "is_active", "slack_channel_name", "timezone", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name", "calendly_user_uri"]
    readonly_fields = ["created_at", "updated_at"]
    exclude = ["calendly_token"]
