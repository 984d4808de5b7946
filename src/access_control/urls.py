"""Routing for access control endpoints."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CapabilityTableView, CustomRoleViewSet, UserAccessViewSet

router = DefaultRouter()
router.register(r"custom-roles", CustomRoleViewSet, basename="custom-role")
router.register(r"users", UserAccessViewSet, basename="user-access")

urlpatterns = [
    path("access/capabilities/", CapabilityTableView.as_view(), name="access-capabilities"),
    path("", include(router.urls)),
]
