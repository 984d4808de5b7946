"""Shared helpers for tests (user creation, bearer tokens, authenticated clients)."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from access_control.capabilities import Capability

User = get_user_model()


def create_user(email: str, roles: list[str] | None = None, **extra):
    """Create an active user holding ``roles`` (``["user"]`` by default)."""

    return User.objects.create_user(email=email, roles=roles if roles is not None else ["user"], **extra)


def issue_token(user, *, token_type: str = "access", ttl: timedelta = timedelta(minutes=15), **claims: Any) -> str:
    """Mint a bearer token the way the external identity service does."""

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "jti": str(uuid.uuid4()),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "type": token_type,
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_client(user) -> APIClient:
    """Return an APIClient sending a fresh bearer token for ``user``."""

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")
    return client


def full_access(granted: set[Capability] | frozenset[Capability] = frozenset()) -> dict[str, bool]:
    """Complete wire-name capability map granting only ``granted``."""

    return {capability.value: capability in granted for capability in Capability}
