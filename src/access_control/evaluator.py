"""Access decisions: principal + capability -> allow/deny.

Precedence for a single capability:

1. No principal, or a principal with neither roles nor an override: deny.
2. Any built-in role granting the capability: allow. An override cannot revoke
   a capability that a role already grants.
3. An explicit override for the capability: its value is the answer.
4. Any referenced custom role granting the capability: allow.
5. Otherwise deny.

Unknown roles, unknown custom role ids and unknown capability names all count
as "not granted". ``has_access`` never raises.
"""

import logging
from typing import Any, Iterable, Mapping, Protocol

from .capabilities import ROLE_CAPABILITIES, Capability, CapabilitySet, parse_capability
from .domain import CustomRole, Principal

logger = logging.getLogger(__name__)


class CustomRoleLookup(Protocol):
    """Anything that can resolve a custom role id."""

    def get(self, role_id: str) -> CustomRole | None:
        ...


class CustomRoleIndex:
    """Custom role lookup over records that are already loaded."""

    def __init__(self, roles: Iterable[CustomRole] = ()) -> None:
        self._roles = {role.id: role for role in roles}

    def get(self, role_id: str) -> CustomRole | None:
        return self._roles.get(str(role_id))


class AccessEvaluator:
    """Evaluate capabilities against a role table and an optional custom role lookup."""

    def __init__(
        self,
        role_table: Mapping[str, CapabilitySet] = ROLE_CAPABILITIES,
        custom_roles: CustomRoleLookup | None = None,
    ) -> None:
        self.role_table = role_table
        self.custom_roles = custom_roles

    def has_access(self, principal: Principal | None, capability: Any) -> bool:
        """Return True if ``principal`` holds ``capability``."""
        parsed = parse_capability(capability)
        if parsed is None:
            logger.warning("Access check for unknown capability %r denied", capability)
            return False

        if principal is None:
            return False

        override = principal.override
        if not principal.roles and (override is None or override.is_empty()):
            return False

        if self._role_grant(principal.roles, parsed):
            return True

        if override is None:
            return False

        if parsed in override.overrides:
            return override.overrides[parsed] is True

        if override.role_ids:
            granted = self._custom_role_grant(override.role_ids, parsed)
            if not granted:
                logger.debug("Principal %s denied %s", principal.id, parsed.value)
            return granted

        return False

    def effective_capabilities(self, principal: Principal | None) -> dict[str, bool]:
        """Evaluate every capability for ``principal`` (used for UI gating)."""
        return {c.value: self.has_access(principal, c) for c in Capability}

    def _role_grant(self, roles: Iterable[str], capability: Capability) -> bool:
        for role in roles:
            row = self.role_table.get(role)
            if row is None:
                logger.debug("Ignoring unknown role %r", role)
                continue
            if row.get(capability, False):
                return True
        return False

    def _custom_role_grant(self, role_ids: Iterable[str], capability: Capability) -> bool:
        if self.custom_roles is None:
            return False
        for role_id in role_ids:
            role = self.custom_roles.get(role_id)
            if role is not None and role.grants(capability):
                return True
        return False


_default_evaluator = AccessEvaluator()


def has_access(principal: Principal | None, capability: Any, custom_roles: CustomRoleLookup | None = None) -> bool:
    """Evaluate ``capability`` against the built-in role table."""
    if custom_roles is None:
        return _default_evaluator.has_access(principal, capability)
    return AccessEvaluator(custom_roles=custom_roles).has_access(principal, capability)


__all__ = ["AccessEvaluator", "CustomRoleIndex", "CustomRoleLookup", "has_access"]
