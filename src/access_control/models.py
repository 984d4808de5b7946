"""Access control models: administratively created custom roles."""

import logging
import uuid

from django.db import models

from .capabilities import build_capability_set, parse_capability
from .domain import CustomRole as CustomRoleRecord

logger = logging.getLogger(__name__)


class CustomRole(models.Model):
    """A named capability set that users can reference on top of built-in roles."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    # Wire-name keyed capability set, e.g. {"canViewDocuments": true, ...}.
    access = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name

    def to_record(self) -> CustomRoleRecord:
        """Convert to the immutable record the evaluator consumes.

        A capability added after the row was written reads as not granted.
        Keys that are no longer capabilities, or non-boolean values, are
        dropped with a warning so access checks never fail on stale rows.
        """
        access = {}
        for key, value in (self.access or {}).items():
            capability = parse_capability(key)
            if capability is None or not isinstance(value, bool):
                logger.warning("Ignoring invalid capability %r=%r on custom role %s", key, value, self.pk)
                continue
            access[capability] = value

        return CustomRoleRecord(
            id=str(self.pk),
            name=self.name,
            description=self.description,
            access=build_capability_set(access, partial=True),
        )


__all__ = ["CustomRole"]
