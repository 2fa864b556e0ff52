"""Django app configuration for provider integrations."""

from django.apps import AppConfig


class IntegrationsConfig(AppConfig):
    """Integrations app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.integrations"
    verbose_name = "Integrations"
