from rest_framework.permissions import BasePermission

from engine.authorization import is_privileged
from user.identity import actor_for_user


class IsPrivilegedRole(BasePermission):
    """
    Director/admin/manager only (the configured privileged roles).

    Used for creating and deactivating tasks. Per-task edits are not checked
    here; they go through the engine's authorization inside apply_change.
    """
    message = 'Only directors, admins and managers may do this.'

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or user.is_anonymous:
            return False
        return is_privileged(actor_for_user(user))
