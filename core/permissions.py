"""
Core App Permissions
"""

from rest_framework import permissions

from .models import UserRole


class IsAdminUser(permissions.BasePermission):
    """Permission for active admin users only."""

    message = 'Unauthorized - Please log in'

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and user.is_active
            and user.role == UserRole.ADMIN
        )
