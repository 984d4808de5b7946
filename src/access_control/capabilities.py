"""Capabilities, built-in roles, and the role -> capability table.

This module is the single definition of the capability model. The UI receives
the same table through ``serialize_role_table`` (see ``/access/capabilities/``)
instead of keeping its own copy.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .exceptions import InvalidCapabilitySet


class Capability(str, Enum):
    """Named boolean permission. Values are the wire names used by clients."""

    VIEW_DOCUMENTS = "canViewDocuments"
    CREATE_DOCUMENTS = "canCreateDocuments"
    EDIT_DOCUMENTS = "canEditDocuments"
    VIEW_INVENTORY = "canViewInventory"
    MANAGE_INVENTORY = "canManageInventory"
    ACCESS_ADMIN = "canAccessAdmin"
    MANAGE_USERS = "canManageUsers"
    VIEW_EXTERNAL_SYSTEMS = "canViewExternalSystems"

    def __str__(self) -> str:
        return self.value


class BuiltinRole(str, Enum):
    """Roles that ship with the application."""

    ADMIN = "admin"
    USER = "user"
    MANAGER = "manager"
    INVENTORY = "inventory"

    def __str__(self) -> str:
        return self.value


CapabilitySet = Mapping[Capability, bool]


def parse_capability(value: Any) -> Capability | None:
    """Return the Capability for an enum member or wire name, or None if unknown."""
    if isinstance(value, Capability):
        return value
    try:
        return Capability(value)
    except ValueError:
        return None


def build_capability_set(grants: Mapping[Any, Any], *, partial: bool = False) -> CapabilitySet:
    """Validate ``grants`` and return a read-only capability mapping.

    Keys may be ``Capability`` members or their wire names. Values must be
    real booleans. Unless ``partial`` is set, every capability must be present.
    """
    result: dict[Capability, bool] = {}
    for key, value in grants.items():
        capability = parse_capability(key)
        if capability is None:
            raise InvalidCapabilitySet(f"Unknown capability: {key!r}")
        if not isinstance(value, bool):
            raise InvalidCapabilitySet(f"Capability {capability.value} must be true or false")
        result[capability] = value

    if not partial:
        missing = [c.value for c in Capability if c not in result]
        if missing:
            raise InvalidCapabilitySet(f"Missing capabilities: {', '.join(missing)}")

    # Keep enum declaration order so serialized output is stable.
    ordered = {c: result[c] for c in Capability if c in result}
    return MappingProxyType(ordered)


def merge_capability_sets(base: CapabilitySet, changes: Mapping[Any, Any]) -> CapabilitySet:
    """Return ``base`` with the (partial) ``changes`` applied on top."""
    merged = dict(base)
    merged.update(build_capability_set(changes, partial=True))
    return build_capability_set(merged)


def capability_set_to_dict(capabilities: CapabilitySet) -> dict[str, bool]:
    """Render a capability mapping with wire-name keys."""
    return {capability.value: bool(granted) for capability, granted in capabilities.items()}


def _row(**grants: bool) -> CapabilitySet:
    return build_capability_set({Capability[name.upper()]: value for name, value in grants.items()})


ROLE_CAPABILITIES: Mapping[str, CapabilitySet] = MappingProxyType(
    {
        BuiltinRole.ADMIN.value: _row(
            view_documents=True,
            create_documents=True,
            edit_documents=True,
            view_inventory=True,
            manage_inventory=True,
            access_admin=True,
            manage_users=True,
            view_external_systems=True,
        ),
        BuiltinRole.USER.value: _row(
            view_documents=True,
            create_documents=True,
            edit_documents=False,
            view_inventory=False,
            manage_inventory=False,
            access_admin=False,
            manage_users=False,
            view_external_systems=False,
        ),
        BuiltinRole.MANAGER.value: _row(
            view_documents=True,
            create_documents=True,
            edit_documents=True,
            view_inventory=True,
            manage_inventory=False,
            access_admin=False,
            manage_users=False,
            view_external_systems=True,
        ),
        BuiltinRole.INVENTORY.value: _row(
            view_documents=True,
            create_documents=False,
            edit_documents=False,
            view_inventory=True,
            manage_inventory=True,
            access_admin=False,
            manage_users=False,
            view_external_systems=False,
        ),
    }
)


def serialize_role_table(table: Mapping[str, CapabilitySet] = ROLE_CAPABILITIES) -> dict[str, Any]:
    """Return the capability list and role table in a JSON-ready shape."""
    return {
        "capabilities": [c.value for c in Capability],
        "roles": {role: capability_set_to_dict(row) for role, row in table.items()},
    }


__all__ = [
    "Capability",
    "BuiltinRole",
    "CapabilitySet",
    "ROLE_CAPABILITIES",
    "parse_capability",
    "build_capability_set",
    "merge_capability_sets",
    "capability_set_to_dict",
    "serialize_role_table",
]
