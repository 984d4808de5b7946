"""Custom user manager for principals whose credentials live elsewhere."""

import uuid

from django.contrib.auth.base_user import BaseUserManager

from access_control.capabilities import BuiltinRole


class UserManager(BaseUserManager):
    """Create users with built-in role assignments.

    Bearer tokens are issued by an external identity service, so users created
    here get an unusable password unless one is given explicitly.
    """

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email)
        extra_fields.setdefault("roles", [BuiltinRole.USER.value])
        user = self.model(id=uuid.uuid4(), email=email, **extra_fields)
        if password is None:
            user.set_unusable_password()
        else:
            user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        """Create a regular user (role ``user`` unless ``roles`` is given)."""
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):
        """Create a superuser holding the ``admin`` role."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("roles", [BuiltinRole.ADMIN.value])
        if not extra_fields.get("is_staff"):
            raise ValueError("Superuser must have is_staff=True.")
        if not extra_fields.get("is_superuser"):
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


__all__ = ["UserManager"]
