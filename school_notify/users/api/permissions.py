"""Role based permission classes shared by the API apps."""

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

from school_notify.users.models import User

ROLE_ADMIN = User.Role.ADMIN
ROLE_TEACHER = User.Role.TEACHER
ROLE_STUDENT = User.Role.STUDENT


def _is_authenticated(user) -> bool:
    return bool(user and getattr(user, "is_authenticated", False))


def has_role(user, roles) -> bool:
    if not _is_authenticated(user):
        return False
    if getattr(user, "is_superuser", False):
        return True
    return getattr(user, "role", None) in set(roles)


class _RolePermission(BasePermission):
    """Base helper to gate access by role names."""

    allowed_roles: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:
        return has_role(getattr(request, "user", None), self.allowed_roles)


class IsAdminRole(_RolePermission):
    """Allow access only to admin-role users (and superusers)."""

    allowed_roles = (ROLE_ADMIN,)


class IsAdminOrTeacherCanWrite(BasePermission):
    """Everyone signed in can read; admins and teachers can write."""

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return _is_authenticated(user)
        return has_role(user, (ROLE_ADMIN, ROLE_TEACHER))
