"""DRF permission class gating views on capabilities."""

import logging

from django.conf import settings
from rest_framework import permissions

from .capabilities import Capability
from .evaluator import AccessEvaluator, CustomRoleIndex
from .principals import principal_from_user

logger = logging.getLogger(__name__)


def evaluator_for_user(user) -> AccessEvaluator:
    """Evaluator resolving custom roles from the rows ``user`` already references.

    Reads ``user.custom_roles.all()``, so a prefetched relation costs no queries.
    """
    custom_roles = getattr(user, "custom_roles", None)
    records = [role.to_record() for role in custom_roles.all()] if custom_roles is not None else []
    return AccessEvaluator(custom_roles=CustomRoleIndex(records))


class CapabilityPermission(permissions.BasePermission):
    """Check the view's declared capability for the current request method.

    Views declare ``read_capability`` (GET/HEAD/OPTIONS) and
    ``write_capability`` (everything else). A method without a declared
    capability is denied.

    If ``settings.ALLOW_SUPERUSER_BYPASS`` is True and the authenticated user is
    a superuser, the check is skipped. By default superusers are evaluated like
    everyone else.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            # Returning False for anonymous users lets DRF answer 401 instead of 403.
            return False

        if self._has_superuser_bypass(user):
            return True

        capability = self.required_capability(request, view)
        if capability is None:
            return False

        allowed = evaluator_for_user(user).has_access(principal_from_user(user), capability)
        if not allowed:
            logger.info(
                "Denied %s %s for user %s: missing %s",
                request.method,
                request.path,
                user.pk,
                capability.value,
            )
        return allowed

    @staticmethod
    def required_capability(request, view) -> Capability | None:
        """Return the capability the view requires for this request's method."""
        if request.method in permissions.SAFE_METHODS:
            return getattr(view, "read_capability", None)
        return getattr(view, "write_capability", None)

    @staticmethod
    def _has_superuser_bypass(user) -> bool:
        return getattr(settings, "ALLOW_SUPERUSER_BYPASS", False) and getattr(user, "is_superuser", False)


def require_capability(capability: Capability) -> type[CapabilityPermission]:
    """Build a permission class requiring ``capability`` for every method."""

    class _RequireCapability(CapabilityPermission):
        @staticmethod
        def required_capability(request, view) -> Capability | None:
            return capability

    _RequireCapability.__name__ = f"Require{capability.name.title().replace('_', '')}"
    return _RequireCapability


__all__ = ["CapabilityPermission", "require_capability", "evaluator_for_user"]
