"""Plain records the access evaluator works on.

These are deliberately independent of Django so the evaluator can run against
principals built from any source (ORM users, decoded tokens, test fixtures).
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .capabilities import Capability, CapabilitySet


@dataclass
class AccessOverride:
    """Per-principal adjustments on top of built-in roles.

    ``overrides`` holds explicit grants/denials for individual capabilities;
    ``role_ids`` references custom roles whose grants are added on top.
    """

    overrides: dict[Capability, bool] = field(default_factory=dict)
    role_ids: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.overrides and not self.role_ids


@dataclass
class Principal:
    """The caller an access decision is made for."""

    id: Any
    roles: frozenset[str] = frozenset()
    override: AccessOverride | None = None

    def __post_init__(self) -> None:
        # Roles behave as a set: order is irrelevant and duplicates collapse.
        self.roles = frozenset(str(role) for role in self.roles)

    @classmethod
    def build(
        cls,
        id: Any,
        roles: Iterable[Any] = (),
        overrides: Mapping[Capability, bool] | None = None,
        role_ids: Iterable[Any] = (),
    ) -> "Principal":
        """Convenience constructor that only attaches an override when there is one."""
        override = AccessOverride(dict(overrides or {}), [str(r) for r in role_ids])
        return cls(id=id, roles=frozenset(roles), override=None if override.is_empty() else override)


@dataclass(frozen=True)
class CustomRole:
    """Administratively created role referenced from ``AccessOverride.role_ids``."""

    id: str
    name: str
    description: str
    access: CapabilitySet

    def grants(self, capability: Capability) -> bool:
        return bool(self.access.get(capability, False))


__all__ = ["AccessOverride", "Principal", "CustomRole"]
