"""App configuration for the access_control Django application."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    """Capability model, custom roles, and the permission class guarding views."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
    verbose_name = "Access control"

    def ready(self) -> None:
        """Register system checks when the app is loaded."""
        from . import checks  # noqa: F401
