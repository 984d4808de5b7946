"""System checks for access control configuration."""

from django.core.checks import Error, register

from access_control.capabilities import ROLE_CAPABILITIES, Capability
from access_control.permissions import CapabilityPermission


def _declares_capability(view_cls, permission_cls) -> bool:
    # Classes built by require_capability carry their own capability.
    if permission_cls.required_capability is not CapabilityPermission.required_capability:
        return True
    return bool(getattr(view_cls, "read_capability", None) or getattr(view_cls, "write_capability", None))


def check_guarded_views(view_classes) -> list[Error]:
    errors: list[Error] = []
    for view_cls in view_classes:
        for permission_cls in getattr(view_cls, "permission_classes", []):
            if not (isinstance(permission_cls, type) and issubclass(permission_cls, CapabilityPermission)):
                continue
            if not _declares_capability(view_cls, permission_cls):
                errors.append(
                    Error(
                        f"{view_cls.__name__} uses {permission_cls.__name__} but declares "
                        f"neither read_capability nor write_capability.",
                        obj=view_cls,
                        id="access_control.E001",
                    )
                )
    return errors


def check_role_table(table) -> list[Error]:
    errors: list[Error] = []
    for role, row in table.items():
        missing = [c.value for c in Capability if not isinstance(row.get(c), bool)]
        if missing:
            errors.append(
                Error(
                    f"Role '{role}' has no explicit grant for: {', '.join(missing)}.",
                    id="access_control.E002",
                )
            )
    return errors


@register()
def access_control_configuration(app_configs, **kwargs):
    """Ensure guarded views declare capabilities and every role row is total."""

    # Import here to avoid circular imports at module load time.
    from access_control.views import CustomRoleViewSet, UserAccessViewSet
    from authentication.views import MeView

    errors = check_guarded_views([CustomRoleViewSet, UserAccessViewSet, MeView])
    errors.extend(check_role_table(ROLE_CAPABILITIES))
    return errors


__all__ = ["check_guarded_views", "check_role_table"]
