"""Custom User model carrying role assignments and access overrides.

Note: We intentionally avoid Django's built-in groups/permissions (no
PermissionsMixin); access is decided by ``access_control`` from ``roles``,
``capability_overrides``, and ``custom_roles``.
"""

import uuid
from typing import ClassVar

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from .managers import UserManager


def default_roles() -> list[str]:
    return ["user"]


class User(AbstractBaseUser):
    """User identified by email; the principal access checks are made for."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    # Built-in role names, e.g. ["admin"] or ["manager", "inventory"].
    roles = models.JSONField(default=default_roles, blank=True)
    # Partial map of capability wire name -> bool.
    capability_overrides = models.JSONField(default=dict, blank=True)
    custom_roles = models.ManyToManyField("access_control.CustomRole", blank=True, related_name="users")
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_superuser = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email


__all__ = ["User"]
