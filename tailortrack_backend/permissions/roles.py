# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_CUSTOMER = "customer"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_STAFF, "Staff"),
    (ROLE_CUSTOMER, "Customer"),
]

STAFF_ROLES = {ROLE_ADMIN, ROLE_STAFF}


# =========================================================
# CAPABILITIES
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_MANAGE = "orders.manage"          # back office create/edit/delete
CAP_ORDERS_STATUS = "orders.status"          # move an order through the workflow
CAP_CUSTOMERS_MANAGE = "customers.manage"
CAP_PAYMENTS_RECORD = "payments.record"      # manual cash/card/upi entries
CAP_NOTIFICATIONS_BROADCAST = "notifications.broadcast"
CAP_ANALYTICS_VIEW = "analytics.view"
CAP_STAFF_MANAGE = "staff.manage"

ALL_CAPABILITIES = {
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_STATUS,
    CAP_CUSTOMERS_MANAGE,
    CAP_PAYMENTS_RECORD,
    CAP_NOTIFICATIONS_BROADCAST,
    CAP_ANALYTICS_VIEW,
    CAP_STAFF_MANAGE,
}

ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {*ALL_CAPABILITIES},
    ROLE_STAFF: {
        CAP_ORDERS_MANAGE,
        CAP_ORDERS_STATUS,
        CAP_CUSTOMERS_MANAGE,
        CAP_PAYMENTS_RECORD,
        CAP_ANALYTICS_VIEW,
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def is_staff_user(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return get_user_role(user) in STAFF_ROLES


def effective_capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permission
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_NOTIFICATIONS_BROADCAST
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in effective_capabilities_for(user)


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES


class IsCustomer(BaseRolePermission):
    allowed_roles = {ROLE_CUSTOMER}


class IsOwnerOrStaff(BasePermission):
    """
    Object-level: staff see everything, customers only objects they own.

    The view decides ownership through `owner_of(obj)` (returns a user or None).
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if is_staff_user(request.user):
            return True
        owner_of = getattr(view, "owner_of", None)
        owner = owner_of(obj) if owner_of else None
        return owner is not None and owner.pk == request.user.pk
