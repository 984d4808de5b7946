"""App configuration for the core project utilities."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Settings, response envelope, bearer middleware, and exception handling."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
