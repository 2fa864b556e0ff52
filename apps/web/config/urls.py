"""
URL configuration for Outreach.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    # Provider webhooks
    path("webhooks/", include("apps.web.bookings.webhook_urls")),
    # Client API endpoints
    path("api/bookings/", include("apps.web.bookings.urls")),
    path("api/dashboard/", include("apps.web.dashboard.urls")),
]
