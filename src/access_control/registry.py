"""In-memory custom role registry and principal directory.

The registry is an owned object rather than module state: create one per
process (or per test) and hand it to the evaluator and to whatever performs
administration. All mutations take a single lock, and records are immutable
and replaced whole, so concurrent readers see either the old or the new role.
"""

import logging
import threading
import uuid
from dataclasses import replace
from typing import Any, Iterable, Mapping, Protocol

from .capabilities import build_capability_set, merge_capability_sets
from .domain import CustomRole, Principal
from .exceptions import DuplicateCustomRole

logger = logging.getLogger(__name__)


class CustomRoleStore(Protocol):
    """Operations every custom role backend provides."""

    def get(self, role_id: str) -> CustomRole | None:
        ...

    def all(self) -> list[CustomRole]:
        ...

    def register(self, name: str, description: str, access: Mapping[Any, Any]) -> CustomRole:
        ...

    def update(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        access: Mapping[Any, Any] | None = None,
    ) -> CustomRole | None:
        ...

    def delete(self, role_id: str) -> bool:
        ...


class PrincipalDirectory(Protocol):
    """Principals whose custom role references must follow registry deletes."""

    def drop_custom_role(self, role_id: str) -> int:
        ...


class InMemoryPrincipalDirectory:
    """Holds principals by id; used where no user database is attached."""

    def __init__(self, principals: Iterable[Principal] = ()) -> None:
        self._lock = threading.Lock()
        self._principals: dict[Any, Principal] = {}
        for principal in principals:
            self.add(principal)

    def add(self, principal: Principal) -> None:
        with self._lock:
            self._principals[principal.id] = principal

    def get(self, principal_id: Any) -> Principal | None:
        with self._lock:
            return self._principals.get(principal_id)

    def drop_custom_role(self, role_id: str) -> int:
        """Remove ``role_id`` from every principal's override; return how many changed."""
        changed = 0
        with self._lock:
            for principal in self._principals.values():
                override = principal.override
                if override is None or role_id not in override.role_ids:
                    continue
                override.role_ids = [rid for rid in override.role_ids if rid != role_id]
                changed += 1
        return changed


class CustomRoleRegistry:
    """Thread-safe in-memory ``CustomRoleStore``."""

    def __init__(self, principals: PrincipalDirectory | None = None) -> None:
        self._lock = threading.RLock()
        self._roles: dict[str, CustomRole] = {}
        self.principals = principals

    def get(self, role_id: str) -> CustomRole | None:
        with self._lock:
            return self._roles.get(str(role_id))

    def all(self) -> list[CustomRole]:
        with self._lock:
            return list(self._roles.values())

    def register(self, name: str, description: str, access: Mapping[Any, Any]) -> CustomRole:
        """Store a new custom role under a fresh id and return it."""
        capabilities = build_capability_set(access)
        with self._lock:
            self._ensure_unique_name(name)
            role = CustomRole(id=uuid.uuid4().hex, name=name, description=description, access=capabilities)
            self._roles[role.id] = role
        logger.info("Registered custom role %s (%s)", role.id, role.name)
        return role

    def update(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        access: Mapping[Any, Any] | None = None,
    ) -> CustomRole | None:
        """Merge the given fields into an existing role; None if it does not exist."""
        with self._lock:
            current = self._roles.get(str(role_id))
            if current is None:
                return None
            changes: dict[str, Any] = {}
            if name is not None and name != current.name:
                self._ensure_unique_name(name)
                changes["name"] = name
            if description is not None:
                changes["description"] = description
            if access is not None:
                changes["access"] = merge_capability_sets(current.access, access)
            updated = replace(current, **changes)
            self._roles[updated.id] = updated
        logger.info("Updated custom role %s", updated.id)
        return updated

    def delete(self, role_id: str) -> bool:
        """Remove a role and every principal reference to it."""
        role_id = str(role_id)
        with self._lock:
            if self._roles.pop(role_id, None) is None:
                return False
            cleaned = self.principals.drop_custom_role(role_id) if self.principals is not None else 0
        logger.info("Deleted custom role %s (references removed from %d principals)", role_id, cleaned)
        return True

    def _ensure_unique_name(self, name: str) -> None:
        if any(role.name == name for role in self._roles.values()):
            raise DuplicateCustomRole(f"Custom role '{name}' already exists")


__all__ = [
    "CustomRoleStore",
    "PrincipalDirectory",
    "InMemoryPrincipalDirectory",
    "CustomRoleRegistry",
]
