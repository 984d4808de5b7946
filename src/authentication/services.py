"""Bearer token verification.

Access tokens are minted by the identity service that shares ``SECRET_KEY``
with this application; here they are only decoded and validated.
"""

from typing import Any

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed


class TokenService:
    """Decode and validate access JWTs."""

    ACCESS_TYPE = "access"

    @staticmethod
    def algorithm() -> str:
        return getattr(settings, "JWT_ALGORITHM", "HS256")

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = ACCESS_TYPE) -> dict[str, Any]:
        """Decode and validate a JWT; optionally enforce its ``type`` claim."""

        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[cls.algorithm()],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise AuthenticationFailed("Invalid token type")

        return payload


__all__ = ["TokenService"]
