"""Current-user endpoint: profile plus evaluated capabilities."""

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated

from core.response import BaseAPIView, api_response
from .serializers import ProfileUpdateSerializer, UserDetailSerializer


class MeView(BaseAPIView):
    """Profile of the authenticated user."""

    permission_classes = [IsAuthenticated]

    # noinspection PyMethodMayBeStatic
    @extend_schema(responses=UserDetailSerializer)
    def get(self, request):
        """Return the current user's profile and effective capabilities."""
        return api_response(UserDetailSerializer(request.user).data)

    # noinspection PyMethodMayBeStatic
    @extend_schema(request=ProfileUpdateSerializer, responses=UserDetailSerializer)
    def patch(self, request):
        """Update name fields for the current user."""
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(UserDetailSerializer(request.user).data)
