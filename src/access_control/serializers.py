"""Serializers for access control resources."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .capabilities import BuiltinRole, build_capability_set, capability_set_to_dict
from .domain import CustomRole as CustomRoleRecord
from .exceptions import InvalidCapabilitySet
from .models import CustomRole

User = get_user_model()


class CapabilityMapField(serializers.DictField):
    """Dict of capability wire names to booleans.

    ``partial_map=True`` accepts a subset of capabilities (overrides, partial
    updates); otherwise every capability must be present.
    """

    def __init__(self, *, partial_map: bool = False, **kwargs):
        self.partial_map = partial_map
        super().__init__(child=serializers.BooleanField(), **kwargs)

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            self.fail("not_a_dict", input_type=type(data).__name__)
        # Reject "yes"/1 style values instead of letting BooleanField coerce them.
        for key, value in data.items():
            if not isinstance(value, bool):
                raise serializers.ValidationError(f"Capability {key} must be true or false.")
        try:
            capabilities = build_capability_set(data, partial=self.partial_map)
        except InvalidCapabilitySet as exc:
            raise serializers.ValidationError(str(exc)) from exc
        return capability_set_to_dict(capabilities)


class CustomRoleSerializer(serializers.Serializer):
    """Read/write shape for custom roles.

    Works on the immutable registry records; persistence goes through the
    registry in the view, not through ``save()``.
    """

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    access = CapabilityMapField()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.partial:
            # PATCH merges the given capabilities into the stored set.
            self.fields["access"] = CapabilityMapField(partial_map=True, required=False)

    def to_representation(self, instance: CustomRoleRecord):
        return {
            "id": instance.id,
            "name": instance.name,
            "description": instance.description,
            "access": capability_set_to_dict(instance.access),
        }


class UserAccessSerializer(serializers.ModelSerializer):
    """Role assignment, overrides, and custom role references of a user."""

    roles = serializers.ListField(
        child=serializers.ChoiceField(choices=[role.value for role in BuiltinRole]),
        required=False,
    )
    capability_overrides = CapabilityMapField(partial_map=True, required=False)
    custom_role_ids = serializers.PrimaryKeyRelatedField(
        source="custom_roles",
        many=True,
        queryset=CustomRole.objects.all(),
        pk_field=serializers.UUIDField(),
        required=False,
    )
    access = serializers.SerializerMethodField()

    class Meta:
        """Identity fields are read-only; only access assignments are writable."""

        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "roles",
            "capability_overrides",
            "custom_role_ids",
            "access",
        ]
        read_only_fields = ["id", "email", "first_name", "last_name", "access"]

    def validate_roles(self, value):
        # Roles are a set; keep first-seen order for stable output.
        return list(dict.fromkeys(value))

    def get_access(self, obj) -> dict[str, bool]:
        from .permissions import evaluator_for_user
        from .principals import principal_from_user

        return evaluator_for_user(obj).effective_capabilities(principal_from_user(obj))


__all__ = ["CapabilityMapField", "CustomRoleSerializer", "UserAccessSerializer"]
