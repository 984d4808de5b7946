"""App configuration for authentication components."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Holds the User model principals are built from and bearer token checks."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
