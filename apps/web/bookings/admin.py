"""Admin registrations for bookings."""

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = [
        "contact_name",
        "contact_email",
        "client",
        "event_type_name",
        "event_time",
        "status",
    ]
    list_filter = ["status", "showed_up", "archived", "client"]
    search_fields = ["contact_name", "contact_email", "provider_event_id"]
    readonly_fields = ["provider_event_id", "raw_payload", "created_at", "updated_at"]
    date_hierarchy = "event_time"
