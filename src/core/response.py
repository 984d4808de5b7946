"""Response envelope helpers shared by every API view.

Successful payloads are returned as ``{"data": ..., "errors": []}``; error
payloads get the same shape from ``core.exceptions.custom_exception_handler``.
"""

from typing import Any

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet


def api_response(data: Any, status: int = 200) -> Response:
    """Return ``data`` wrapped in the standard envelope."""

    return Response({"data": data, "errors": []}, status=status)


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and set(payload) == {"data", "errors"}


class EnvelopeMixin:
    """Wrap successful responses that were not built with ``api_response``."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        status_code = getattr(response, "status_code", None)
        if status_code and status_code < 400 and status_code != 204 and hasattr(response, "data"):
            if not _is_enveloped(response.data):
                response.data = {"data": response.data, "errors": []}
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    """APIView whose successful responses use the envelope."""


class BaseGenericViewSet(EnvelopeMixin, GenericViewSet):
    """GenericViewSet base; combine with DRF mixins for the actions needed."""


__all__ = ["api_response", "EnvelopeMixin", "BaseAPIView", "BaseGenericViewSet"]
