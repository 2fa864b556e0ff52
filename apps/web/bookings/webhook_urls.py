"""
URL routes for inbound provider webhooks.

All routes are under /webhooks/.
"""

from django.urls import path

from . import views

app_name = "webhooks"

urlpatterns = [
    path("calendly/", views.calendly_webhook, name="calendly"),
]
