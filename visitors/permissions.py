"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission

from visitors.models import User

ADMIN_ROLES = {User.ROLE_ADMIN, User.ROLE_SUPER_ADMIN}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsNurse(BasePermission):
    """Nurses assigned to a nursing section."""
    message = "Only nurses can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_NURSE and bool(request.user.section_id)


class IsSecurity(BasePermission):
    message = "Only security personnel can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_SECURITY and bool(request.user.hospital_id)


class IsPatientOrBystander(BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in {User.ROLE_PATIENT, User.ROLE_BYSTANDER}


class IsHospitalAdmin(BasePermission):
    """Hospital admins, or super admins acting across hospitals."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ADMIN_ROLES


class IsSuperAdmin(BasePermission):
    """Only super admin."""
    def has_permission(self, request, view) -> bool:
        return _role(request) == User.ROLE_SUPER_ADMIN
