"""
URL routes for the booking API.

All routes are under /api/bookings/ and require X-Access-Token.
"""

from django.urls import path

from . import views

app_name = "bookings"

urlpatterns = [
    path("", views.ingest_booking, name="ingest"),
    path("<int:booking_id>/", views.update_booking, name="update"),
    path(
        "<int:booking_id>/artifact/",
        views.attach_booking_artifact,
        name="attach_artifact",
    ),
]
