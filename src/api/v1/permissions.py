"""Custom DRF permissions for the offer tracking API."""
from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsAdminRole(BasePermission):
    """Only ADMIN users (or superusers)."""

    message = "Administrator role required."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "is_admin", False))


class IsAdminRoleOrReadOnly(IsAdminRole):
    """Read access for any authenticated user, writes for admins only."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
