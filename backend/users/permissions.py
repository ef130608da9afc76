# backend/users/permissions.py
from rest_framework.permissions import BasePermission

from .models import ADMIN_ROLE, RESOURCE_MANAGER_ROLE

TIME_LOGGING_ADMIN = "time_logging.admin"
RESOURCES_MANAGE = "resources.manage"


def role_name(user):
    return getattr(user, "get_active_role_name", lambda: None)() if user and user.is_authenticated else None


def has_admin_capability(user):
    """Staff, the Admin role, or the time_logging.admin permission."""
    if not user or not user.is_authenticated:
        return False
    if user.is_staff or role_name(user) == ADMIN_ROLE:
        return True
    return user.has_custom_permission(TIME_LOGGING_ADMIN)


def has_resource_management(user):
    """May view and log time for any resource (but not unsubmit)."""
    if not user or not user.is_authenticated:
        return False
    if role_name(user) == RESOURCE_MANAGER_ROLE:
        return True
    return user.has_custom_permission(RESOURCES_MANAGE)


def can_access_resource(user, resource_id):
    """Same ownership rule the time logging workflow applies."""
    if not user or not user.is_authenticated:
        return False
    from timelogging.workflow import Actor, can_access_resource as workflow_access

    return workflow_access(Actor.from_user(user), resource_id).allowed


class IsAuthenticatedAndHasRole(BasePermission):
    required_roles = ()  # override per subclass

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        # Staff bypass = treat as admin
        if request.user.is_staff:
            return True
        rn = role_name(request.user)
        return rn in self.required_roles if self.required_roles else True


class IsAdminRole(IsAuthenticatedAndHasRole):
    required_roles = (ADMIN_ROLE,)


class IsTimeLoggingAdmin(BasePermission):
    """Administrative capability: unsubmit weeks, submission reporting."""
    message = "Only administrators can perform this action."

    def has_permission(self, request, view):
        return has_admin_capability(request.user)


class IsResourceManager(BasePermission):
    """Admins and resource managers."""

    def has_permission(self, request, view):
        return has_admin_capability(request.user) or has_resource_management(request.user)


class CanAccessResource(BasePermission):
    """
    The resource named by the `resource_id` URL kwarg must be the caller's
    own, unless the caller is an admin or resource manager.
    """
    message = "You can only access your own time entries."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        resource_id = view.kwargs.get("resource_id")
        if resource_id is None:
            return True
        return can_access_resource(request.user, int(resource_id))

    def has_object_permission(self, request, view, obj):
        resource_id = getattr(obj, "resource_id", None)
        return can_access_resource(request.user, resource_id)
