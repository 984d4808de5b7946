"""Views for access control administration and the capability table."""

from django.contrib.auth import get_user_model
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.response import BaseAPIView, BaseGenericViewSet, api_response
from .capabilities import Capability, serialize_role_table
from .models import CustomRole
from .permissions import CapabilityPermission, require_capability
from .serializers import CustomRoleSerializer, UserAccessSerializer
from .store import DatabaseCustomRoleRegistry

User = get_user_model()


class CapabilityTableView(BaseAPIView):
    """Publish the capability list and built-in role table for UI gating."""

    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        """Return every capability and the grants of each built-in role."""
        return api_response(serialize_role_table())


class CustomRoleViewSet(BaseGenericViewSet):
    """CRUD endpoints for custom roles, backed by a custom role registry.

    Reading requires ``canAccessAdmin``; creating, changing, and deleting
    require ``canManageUsers``.
    """

    serializer_class = CustomRoleSerializer
    # Only describes the resource for schema generation; reads go through the registry.
    queryset = CustomRole.objects.all()
    permission_classes = [CapabilityPermission]
    read_capability = Capability.ACCESS_ADMIN
    write_capability = Capability.MANAGE_USERS
    registry_class = DatabaseCustomRoleRegistry
    lookup_value_regex = "[0-9a-fA-F-]+"

    def get_registry(self):
        return self.registry_class()

    def list(self, request):
        roles = self.get_registry().all()
        return api_response(self.get_serializer(roles, many=True).data)

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = self.get_registry().register(**serializer.validated_data)
        return api_response(self.get_serializer(role).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return api_response(self.get_serializer(self._get_role(pk)).data)

    def update(self, request, pk=None, partial=False):
        """Merge the submitted fields into the role (PATCH accepts a partial access map)."""
        serializer = self.get_serializer(self._get_role(pk), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        role = self.get_registry().update(pk, **serializer.validated_data)
        if role is None:
            raise NotFound("Custom role not found.")
        return api_response(self.get_serializer(role).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        """Delete the role; users referencing it lose the reference."""
        if not self.get_registry().delete(pk):
            raise NotFound("Custom role not found.")
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _get_role(self, pk):
        role = self.get_registry().get(pk)
        if role is None:
            raise NotFound("Custom role not found.")
        return role


class UserAccessViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    BaseGenericViewSet,
):
    """Inspect and assign roles, overrides, and custom roles of users."""

    serializer_class = UserAccessSerializer
    permission_classes = [require_capability(Capability.MANAGE_USERS)]
    queryset = User.objects.prefetch_related("custom_roles").order_by("email")


__all__ = ["CapabilityTableView", "CustomRoleViewSet", "UserAccessViewSet"]
