"""Django app configuration for channel notifications."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Notifications app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.notifications"
    verbose_name = "Notifications"
