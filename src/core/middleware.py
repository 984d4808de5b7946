"""Middleware resolving the request principal from a bearer JWT."""

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.services import TokenService

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Decode the access JWT and attach ``request.user``.

    Requests without a bearer token continue as anonymous; the permission
    classes decide whether that is acceptable.
    """

    def process_request(self, request):  # type: ignore[override]
        """Authenticate request using Bearer access token if present."""
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header or not auth_header.startswith("Bearer "):
            request.user = AnonymousUser()
            return None

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = TokenService.decode_token(token)
        except AuthenticationFailed as exc:
            logger.warning("Rejected bearer token on %s %s: %s", request.method, request.path, exc.detail)
            return _unauthorized()

        user = self._get_user(payload.get("sub"))
        if not user or not user.is_active:
            logger.warning("Bearer token for unknown or inactive user %s on %s", payload.get("sub"), request.path)
            return _unauthorized()

        request.user = user
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]):
        if not user_id:
            return None
        User = get_user_model()
        try:
            return User.objects.prefetch_related("custom_roles").get(id=user_id)
        except (User.DoesNotExist, ValidationError, ValueError):
            # Malformed ids surface as ValidationError from the UUID field.
            return None


def _unauthorized() -> JsonResponse:
    return JsonResponse(
        {
            "data": None,
            "errors": [
                "Authentication credentials were not provided or are invalid, or user is inactive."
            ],
        },
        status=status.HTTP_401_UNAUTHORIZED,
    )


__all__ = ["JWTAuthMiddleware"]
