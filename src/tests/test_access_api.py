"""API tests for custom roles, user access assignment, and the capability table."""

from __future__ import annotations

from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext

from access_control.capabilities import Capability
from access_control.models import CustomRole
from access_control.store import DatabaseCustomRoleRegistry
from tests.utils import auth_client, create_user, full_access


class CustomRoleApiTests(TestCase):
    """CRUD on /custom-roles/ guarded by canAccessAdmin / canManageUsers."""

    @classmethod
    def setUpTestData(cls):
        """An admin, a plain user, and a manager granted admin-area access by override."""
        cls.admin = create_user("admin@test.com", ["admin"], first_name="Admin")
        cls.user = create_user("user@test.com", ["user"], first_name="User")
        cls.viewer = create_user(
            "viewer@test.com",
            ["manager"],
            capability_overrides={"canAccessAdmin": True},
        )

    def setUp(self):
        self.client_admin = auth_client(self.admin)

    def _create(self, name="Inventory lead", access=None, client=None):
        payload = {
            "name": name,
            "description": "Runs the stock room",
            "access": access or full_access({Capability.MANAGE_INVENTORY}),
        }
        return (client or self.client_admin).post("/custom-roles/", payload, format="json")

    def test_admin_can_create_and_list(self):
        response = self._create()
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["errors"], [])
        self.assertEqual(body["data"]["name"], "Inventory lead")
        self.assertIs(body["data"]["access"]["canManageInventory"], True)

        listing = self.client_admin.get("/custom-roles/").json()
        self.assertEqual([r["name"] for r in listing["data"]], ["Inventory lead"])

    def test_create_requires_complete_access_map(self):
        response = self.client_admin.post(
            "/custom-roles/",
            {"name": "Partial", "access": {"canViewDocuments": True}},
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])
        self.assertFalse(CustomRole.objects.filter(name="Partial").exists())

    def test_create_rejects_non_boolean_grants(self):
        access = full_access()
        access["canViewDocuments"] = "yes"
        response = self._create(access=access)
        self.assertEqual(response.status_code, 400)

    def test_duplicate_name_is_rejected(self):
        self._create(name="Twice")
        response = self._create(name="Twice")
        self.assertEqual(response.status_code, 400)
        self.assertIsNone(response.json()["data"])
        self.assertEqual(response.json()["errors"], ["Custom role 'Twice' already exists"])
        self.assertEqual(CustomRole.objects.filter(name="Twice").count(), 1)

    def test_rename_to_taken_name_is_rejected(self):
        self._create(name="Taken")
        role_id = self._create(name="Free").json()["data"]["id"]

        response = self.client_admin.patch(f"/custom-roles/{role_id}/", {"name": "Taken"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(CustomRole.objects.get(pk=role_id).name, "Free")

    def test_renaming_role_to_its_own_name_is_allowed(self):
        role_id = self._create(name="Same").json()["data"]["id"]
        response = self.client_admin.patch(f"/custom-roles/{role_id}/", {"name": "Same"}, format="json")
        self.assertEqual(response.status_code, 200)

    def test_patch_merges_access(self):
        role_id = self._create().json()["data"]["id"]

        response = self.client_admin.patch(
            f"/custom-roles/{role_id}/", {"access": {"canViewInventory": True}}, format="json"
        )
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertIs(data["access"]["canViewInventory"], True)
        self.assertIs(data["access"]["canManageInventory"], True)
        self.assertEqual(data["description"], "Runs the stock room")

    def test_put_replaces_access(self):
        role_id = self._create().json()["data"]["id"]

        response = self.client_admin.put(
            f"/custom-roles/{role_id}/",
            {"name": "Renamed", "description": "", "access": full_access({Capability.VIEW_DOCUMENTS})},
            format="json",
        )
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["name"], "Renamed")
        self.assertIs(data["access"]["canManageInventory"], False)

    def test_unknown_role_is_404(self):
        missing = "00000000-0000-0000-0000-000000000000"
        self.assertEqual(self.client_admin.get(f"/custom-roles/{missing}/").status_code, 404)
        self.assertEqual(
            self.client_admin.patch(f"/custom-roles/{missing}/", {"name": "x"}, format="json").status_code, 404
        )
        response = self.client_admin.delete(f"/custom-roles/{missing}/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["errors"], ["Custom role not found."])

    def test_delete_removes_role_from_users(self):
        role_id = self._create().json()["data"]["id"]
        self.user.custom_roles.add(role_id)

        response = self.client_admin.delete(f"/custom-roles/{role_id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(CustomRole.objects.filter(pk=role_id).exists())
        self.assertEqual(self.user.custom_roles.count(), 0)

    def test_plain_user_is_forbidden(self):
        client = auth_client(self.user)
        self.assertEqual(client.get("/custom-roles/").status_code, 403)
        response = self._create(client=client)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json()["errors"],
            ["You do not have permission to perform this action on this resource."],
        )

    def test_admin_area_access_allows_reading_but_not_writing(self):
        self._create()
        client = auth_client(self.viewer)

        self.assertEqual(client.get("/custom-roles/").status_code, 200)
        self.assertEqual(self._create(name="Other", client=client).status_code, 403)

    def test_anonymous_gets_401(self):
        from rest_framework.test import APIClient

        self.assertEqual(APIClient().get("/custom-roles/").status_code, 401)

    def test_retired_capability_on_custom_role_still_yields_a_decision(self):
        access = full_access({Capability.MANAGE_INVENTORY})
        access["canRetiredCapability"] = True
        role = CustomRole.objects.create(name="Legacy stock", access=access)
        manager = create_user("legacy@test.com", ["manager"])
        manager.custom_roles.add(role)
        client = auth_client(manager)

        with self.assertLogs("access_control.models", level="WARNING"):
            denied = client.get("/custom-roles/")
        with self.assertLogs("access_control.models", level="WARNING"):
            me = client.get("/auth/me/")

        self.assertEqual(denied.status_code, 403)
        self.assertEqual(me.status_code, 200)
        self.assertIs(me.json()["data"]["access"]["canManageInventory"], True)
        self.assertNotIn("canRetiredCapability", me.json()["data"]["access"])


class UserAccessApiTests(TestCase):
    """Role, override, and custom role assignment through /users/."""

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin@test.com", ["admin"])
        cls.manager = create_user("manager@test.com", ["manager"])

    def setUp(self):
        self.role = DatabaseCustomRoleRegistry().register(
            "Stock", "", full_access({Capability.MANAGE_INVENTORY})
        )
        self.client_admin = auth_client(self.admin)

    def test_list_shows_effective_access(self):
        response = self.client_admin.get("/users/")
        users = {u["email"]: u for u in response.json()["data"]}

        self.assertEqual(response.status_code, 200)
        self.assertIs(users["admin@test.com"]["access"]["canManageUsers"], True)
        self.assertIs(users["manager@test.com"]["access"]["canManageInventory"], False)

    def test_assign_custom_role_grants_capability(self):
        response = self.client_admin.patch(
            f"/users/{self.manager.pk}/", {"custom_role_ids": [self.role.id]}, format="json"
        )
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["custom_role_ids"], [self.role.id])
        self.assertIs(data["access"]["canManageInventory"], True)

    def test_override_and_roles_update(self):
        response = self.client_admin.patch(
            f"/users/{self.manager.pk}/",
            {"roles": ["user", "user"], "capability_overrides": {"canAccessAdmin": True}},
            format="json",
        )
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["roles"], ["user"])
        self.assertIs(data["access"]["canAccessAdmin"], True)
        self.assertIs(data["access"]["canEditDocuments"], False)

    def test_unknown_role_name_is_rejected(self):
        response = self.client_admin.patch(
            f"/users/{self.manager.pk}/", {"roles": ["wizard"]}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_unknown_override_capability_is_rejected(self):
        response = self.client_admin.patch(
            f"/users/{self.manager.pk}/", {"capability_overrides": {"canFly": True}}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_malformed_custom_role_id_is_rejected(self):
        response = self.client_admin.patch(
            f"/users/{self.manager.pk}/", {"custom_role_ids": ["not-a-uuid"]}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_override_cannot_revoke_role_grant(self):
        response = self.client_admin.patch(
            f"/users/{self.admin.pk}/", {"capability_overrides": {"canManageUsers": False}}, format="json"
        )
        self.assertIs(response.json()["data"]["access"]["canManageUsers"], True)

    def test_manager_cannot_manage_users(self):
        client = auth_client(self.manager)
        self.assertEqual(client.get("/users/").status_code, 403)
        self.assertEqual(
            client.patch(f"/users/{self.manager.pk}/", {"roles": ["admin"]}, format="json").status_code,
            403,
        )

    def test_list_query_count_does_not_grow_with_users(self):
        def add_users(start, stop):
            for i in range(start, stop):
                create_user(f"stock{i}@test.com", ["user"]).custom_roles.add(self.role.id)

        add_users(0, 2)
        with CaptureQueriesContext(connection) as queries:
            self.assertEqual(self.client_admin.get("/users/").status_code, 200)

        add_users(2, 10)
        with self.assertNumQueries(len(queries.captured_queries)):
            response = self.client_admin.get("/users/")

        users = {u["email"]: u for u in response.json()["data"]}
        self.assertEqual(len(users), 12)
        self.assertIs(users["stock9@test.com"]["access"]["canManageInventory"], True)

    def test_capability_table_is_published(self):
        response = auth_client(self.manager).get("/access/capabilities/")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(data["capabilities"]), len(Capability))
        self.assertEqual(set(data["roles"]), {"admin", "user", "manager", "inventory"})


class DatabaseRegistryTests(TestCase):
    """DatabaseCustomRoleRegistry mirrors the in-memory registry."""

    def setUp(self):
        self.registry = DatabaseCustomRoleRegistry()

    def test_register_get_update_delete(self):
        role = self.registry.register("Docs", "edit docs", full_access({Capability.EDIT_DOCUMENTS}))
        self.assertEqual(self.registry.get(role.id), role)

        updated = self.registry.update(role.id, access={"canViewDocuments": True})
        self.assertTrue(updated.access[Capability.VIEW_DOCUMENTS])
        self.assertTrue(updated.access[Capability.EDIT_DOCUMENTS])

        self.assertTrue(self.registry.delete(role.id))
        self.assertIsNone(self.registry.get(role.id))
        self.assertFalse(self.registry.delete(role.id))

    def test_unknown_and_malformed_ids(self):
        self.assertIsNone(self.registry.get("nope"))
        self.assertIsNone(self.registry.update("00000000-0000-0000-0000-000000000000", name="x"))
        self.assertFalse(self.registry.delete("nope"))

    def test_row_missing_a_capability_reads_as_not_granted(self):
        row = CustomRole.objects.create(name="Old", access={"canViewDocuments": True})
        record = self.registry.get(str(row.pk))
        self.assertTrue(record.grants(Capability.VIEW_DOCUMENTS))
        self.assertFalse(record.grants(Capability.MANAGE_USERS))

        updated = self.registry.update(str(row.pk), access={"canManageUsers": True})
        self.assertEqual(set(updated.access), set(Capability))

    def test_row_with_retired_capability_drops_it(self):
        access = full_access({Capability.VIEW_INVENTORY})
        access["canRetiredCapability"] = True
        access["canManageUsers"] = "yes"
        row = CustomRole.objects.create(name="Stale", access=access)

        with self.assertLogs("access_control.models", level="WARNING") as logs:
            record = self.registry.get(str(row.pk))
        self.assertEqual(len(logs.records), 2)
        self.assertTrue(record.grants(Capability.VIEW_INVENTORY))
        self.assertFalse(record.grants(Capability.MANAGE_USERS))
        self.assertNotIn("canRetiredCapability", {c.value for c in record.access})

        with self.assertLogs("access_control.models", level="WARNING"):
            updated = self.registry.update(str(row.pk), access={"canEditDocuments": True})
        self.assertEqual(set(updated.access), set(Capability))
        row.refresh_from_db()
        self.assertNotIn("canRetiredCapability", row.access)
        self.assertIs(row.access["canManageUsers"], False)
