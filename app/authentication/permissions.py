"""
DRF permission classes keyed on User.role.
"""

from rest_framework.permissions import BasePermission

from authentication.models import UserRole


class IsSeeker(BasePermission):
    """Allow only authenticated seekers."""

    message = "Only seekers can perform this action"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.SEEKER)


class IsProvider(BasePermission):
    """Allow only authenticated providers."""

    message = "Only providers can perform this action"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.PROVIDER)
