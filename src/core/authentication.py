"""Bridge between ``JWTAuthMiddleware`` and DRF authentication.

The middleware verifies the bearer token and attaches the user to the Django
request; DRF only needs to pick that user up.
"""

from typing import Any, Optional, Tuple

from drf_spectacular.extensions import OpenApiAuthenticationExtension
from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF.

    Performs no credential parsing. Anonymous users are reported as
    "not authenticated" so DRF answers 401 rather than 403.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        user = getattr(django_request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return user, None

    def authenticate_header(self, request) -> str:
        return 'Bearer realm="api"'


class MiddlewareUserAuthenticationScheme(OpenApiAuthenticationExtension):
    """Describe the middleware authentication as bearer JWT in the schema."""

    target_class = "core.authentication.MiddlewareUserAuthentication"
    name = "bearerAuth"

    def get_security_definition(self, auto_schema):
        return {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}


__all__ = ["MiddlewareUserAuthentication"]
