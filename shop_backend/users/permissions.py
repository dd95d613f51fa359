# users/permissions.py

from rest_framework.permissions import BasePermission

from users.models.user import ROLE_ADMIN, ROLE_PRODUCTION, ROLE_SUPPORT, STAFF_ROLES


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    """
    Base permission to check user role safely.
    """

    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "role", None) in self.allowed_roles
        )


# ---------------- ROLE PERMISSIONS ----------------
class IsAdmin(HasRole):
    allowed_roles = {ROLE_ADMIN}


class IsProductionStaff(HasRole):
    allowed_roles = {ROLE_ADMIN, ROLE_PRODUCTION}


class IsSupportStaff(HasRole):
    allowed_roles = {ROLE_ADMIN, ROLE_SUPPORT}


class IsStaff(HasRole):
    """
    Any back-office member:
    - admin
    - production
    - support
    """

    allowed_roles = STAFF_ROLES
