"""Database-backed custom role registry.

Mirrors ``CustomRoleRegistry`` on top of the ``CustomRole`` model. Users point
at custom roles through a many-to-many relation, so deleting a role removes
every user's reference in the same transaction.
"""

import logging
import uuid
from typing import Any, Mapping

from django.db import IntegrityError, transaction

from .capabilities import Capability, build_capability_set, capability_set_to_dict, merge_capability_sets
from .domain import CustomRole as CustomRoleRecord
from .exceptions import DuplicateCustomRole
from .models import CustomRole

logger = logging.getLogger(__name__)


def _normalize_id(role_id: Any) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(role_id))
    except (TypeError, ValueError):
        return None


class DatabaseCustomRoleRegistry:
    """``CustomRoleStore`` implementation backed by the ORM."""

    def get(self, role_id: str) -> CustomRoleRecord | None:
        pk = _normalize_id(role_id)
        if pk is None:
            return None
        role = CustomRole.objects.filter(pk=pk).first()
        return role.to_record() if role else None

    def all(self) -> list[CustomRoleRecord]:
        return [role.to_record() for role in CustomRole.objects.all()]

    def register(self, name: str, description: str, access: Mapping[Any, Any]) -> CustomRoleRecord:
        """Persist a new custom role and return its record."""
        capabilities = build_capability_set(access)
        try:
            with transaction.atomic():
                role = CustomRole.objects.create(
                    name=name,
                    description=description,
                    access=capability_set_to_dict(capabilities),
                )
        except IntegrityError as exc:
            raise DuplicateCustomRole(f"Custom role '{name}' already exists") from exc
        logger.info("Registered custom role %s (%s)", role.pk, role.name)
        return role.to_record()

    def update(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        access: Mapping[Any, Any] | None = None,
    ) -> CustomRoleRecord | None:
        """Merge fields into a stored role under a row lock; None if missing."""
        pk = _normalize_id(role_id)
        if pk is None:
            return None
        try:
            with transaction.atomic():
                role = CustomRole.objects.select_for_update().filter(pk=pk).first()
                if role is None:
                    return None
                if name is not None:
                    role.name = name
                if description is not None:
                    role.description = description
                if access is not None:
                    # Missing capabilities read as not granted; stale keys are dropped.
                    current = role.to_record().access
                    base = {c: current.get(c, False) for c in Capability}
                    role.access = capability_set_to_dict(merge_capability_sets(base, access))
                role.save()
        except IntegrityError as exc:
            raise DuplicateCustomRole(f"Custom role '{name}' already exists") from exc
        logger.info("Updated custom role %s", role.pk)
        return role.to_record()

    def delete(self, role_id: str) -> bool:
        """Delete a role; user references go with it. False if it did not exist."""
        pk = _normalize_id(role_id)
        if pk is None:
            return False
        with transaction.atomic():
            role = CustomRole.objects.select_for_update().filter(pk=pk).first()
            if role is None:
                return False
            referencing = role.users.count()
            role.delete()
        logger.info("Deleted custom role %s (references removed from %d users)", pk, referencing)
        return True


__all__ = ["DatabaseCustomRoleRegistry"]
