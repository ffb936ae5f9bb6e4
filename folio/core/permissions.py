"""DRF permission classes based on the resolved marketplace role"""
from rest_framework.permissions import BasePermission

from .roles import get_user_role, ROLE_ADMIN, ROLE_DESIGNER, ROLE_VENDOR


class IsAdminRole(BasePermission):
    message = 'Permission denied'

    def has_permission(self, request, view):
        return get_user_role(request.user) == ROLE_ADMIN


class IsDesignerOrAdmin(BasePermission):
    message = 'Permission denied'

    def has_permission(self, request, view):
        return get_user_role(request.user) in (ROLE_DESIGNER, ROLE_ADMIN)


class IsVendorOrAdmin(BasePermission):
    message = 'Permission denied'

    def has_permission(self, request, view):
        return get_user_role(request.user) in (ROLE_VENDOR, ROLE_ADMIN)
