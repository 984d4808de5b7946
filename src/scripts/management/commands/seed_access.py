"""Seed demo users for every built-in role plus a sample custom role."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from access_control.capabilities import BuiltinRole, Capability
from access_control.models import CustomRole
from access_control.store import DatabaseCustomRoleRegistry

DEMO_CUSTOM_ROLE = "Inventory auditor"
DEMO_USERS = {
    BuiltinRole.ADMIN: "admin@example.com",
    BuiltinRole.USER: "user@example.com",
    BuiltinRole.MANAGER: "manager@example.com",
    BuiltinRole.INVENTORY: "inventory@example.com",
}
AUDITOR_EMAIL = "auditor@example.com"


def inventory_auditor_access() -> dict[Capability, bool]:
    """Read-only inventory access on top of document viewing."""
    granted = {Capability.VIEW_DOCUMENTS, Capability.VIEW_INVENTORY}
    return {capability: capability in granted for capability in Capability}


def create_seed_custom_role():
    """Create the demo custom role if missing and return its record."""
    registry = DatabaseCustomRoleRegistry()
    existing = CustomRole.objects.filter(name=DEMO_CUSTOM_ROLE).first()
    if existing is not None:
        return existing.to_record()
    return registry.register(
        DEMO_CUSTOM_ROLE,
        "Can look at inventory without changing it.",
        inventory_auditor_access(),
    )


def create_seed_users(custom_role_id: str) -> dict[str, object]:
    """Create one user per built-in role and an auditor using the custom role."""
    User = get_user_model()
    users = {}
    for role, email in DEMO_USERS.items():
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={
                "first_name": role.value.title(),
                "roles": [role.value],
                "is_staff": role is BuiltinRole.ADMIN,
            },
        )
        users[role.value] = user

    auditor, _ = User.objects.get_or_create(
        email=AUDITOR_EMAIL,
        defaults={"first_name": "Auditor", "roles": [BuiltinRole.USER.value]},
    )
    auditor.custom_roles.add(custom_role_id)
    users["auditor"] = auditor
    return users


class Command(BaseCommand):
    """Management command to seed demo principals and a custom role."""

    help = (
        "Seed demo users for the admin/user/manager/inventory roles and an "
        "'Inventory auditor' custom role. Use --reset to clear them first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete previously seeded demo users and the demo custom role first.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding access control data...")
        role = create_seed_custom_role()
        users = create_seed_users(role.id)
        self.stdout.write(self.style.SUCCESS(f"Seeded {len(users)} users and custom role '{role.name}'."))

    def _reset_seeded_data(self) -> None:
        """Remove the demo users and the demo custom role."""
        self.stdout.write("Resetting previously seeded data...")
        User = get_user_model()
        User.objects.filter(email__in=[*DEMO_USERS.values(), AUDITOR_EMAIL]).delete()

        registry = DatabaseCustomRoleRegistry()
        for role in CustomRole.objects.filter(name=DEMO_CUSTOM_ROLE):
            registry.delete(role.pk)
        self.stdout.write(self.style.WARNING("Seeded data cleared."))
