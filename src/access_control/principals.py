"""Build evaluator principals from authenticated users."""

import logging

from .capabilities import parse_capability
from .domain import Principal

logger = logging.getLogger(__name__)


def principal_from_user(user) -> Principal | None:
    """Return a ``Principal`` for ``user``, or None for anonymous/inactive users.

    Override keys that are not known capabilities are dropped with a warning
    rather than failing the request.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    if not getattr(user, "is_active", True):
        return None

    overrides = {}
    for key, value in (getattr(user, "capability_overrides", None) or {}).items():
        capability = parse_capability(key)
        if capability is None or not isinstance(value, bool):
            logger.warning("Ignoring invalid capability override %r=%r on user %s", key, value, user.pk)
            continue
        overrides[capability] = value

    custom_roles = getattr(user, "custom_roles", None)
    role_ids = [str(role.pk) for role in custom_roles.all()] if custom_roles is not None else []

    return Principal.build(
        id=user.pk,
        roles=getattr(user, "roles", None) or [],
        overrides=overrides,
        role_ids=role_ids,
    )


__all__ = ["principal_from_user"]
