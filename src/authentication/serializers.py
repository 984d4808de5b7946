"""Serializers for the current user's profile."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only profile payload, including the effective capabilities.

    ``access`` is what the UI uses to decide which navigation entries to show.
    """

    access = serializers.SerializerMethodField()

    class Meta:
        """Expose identity fields, assigned roles, and evaluated access."""
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "roles",
            "access",
        ]
        read_only_fields = fields

    def get_access(self, obj) -> dict[str, bool]:
        from access_control.permissions import evaluator_for_user
        from access_control.principals import principal_from_user

        return evaluator_for_user(obj).effective_capabilities(principal_from_user(obj))


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Patchable fields for /auth/me updates."""

    class Meta:
        """Allow partial updates of name fields."""
        model = User
        fields = ["first_name", "last_name"]
        extra_kwargs = {field: {"required": False, "allow_blank": True} for field in fields}

    def validate(self, attrs):
        """Reject attempts to change email or access assignments via this endpoint."""
        forbidden = {"email", "roles", "capability_overrides", "custom_role_ids"}
        attempted = sorted(forbidden & set(getattr(self, "initial_data", {})))
        if attempted:
            raise serializers.ValidationError(f"{', '.join(attempted)} cannot be updated via this endpoint")
        return super().validate(attrs)


__all__ = ["UserDetailSerializer", "ProfileUpdateSerializer"]
