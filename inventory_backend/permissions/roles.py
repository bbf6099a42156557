# permissions/roles.py

"""
ROLES & CAPABILITIES (single authorization surface)

Every view protects either:
- a capability string (preferred), via HasCapability / HasAnyCapability, or
- a role family, via IsAdmin / IsAdminOrManager / IsStaff, or
- ownership, via IsOwnerOrAdminOrManager (object-level).

All of them are computed from one place: `capabilities_for(user)`.
Services never check roles; the API layer checks before calling them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_STAFF = "staff"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_STAFF,
}


# =========================================================
# CAPABILITIES
# =========================================================
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"        # products, categories, supplier links
CAP_INVENTORY_DELETE = "inventory.delete"
CAP_INVENTORY_ADJUST = "inventory.adjust"    # manual ledger adjustments

CAP_SALES_CREATE = "sales.create"
CAP_SALES_DELETE = "sales.delete"            # any sale (owners may delete their own)

CAP_PURCHASES_MANAGE = "purchases.manage"    # create / receive / cancel / edit
CAP_PURCHASES_DELETE = "purchases.delete"

CAP_SUPPLIERS_EDIT = "suppliers.edit"
CAP_SUPPLIERS_DELETE = "suppliers.delete"

CAP_CUSTOMERS_MANAGE = "customers.manage"

CAP_USERS_VIEW = "users.view"
CAP_USERS_MANAGE = "users.manage"

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_ADJUST,
    CAP_SALES_CREATE,
    CAP_SALES_DELETE,
    CAP_PURCHASES_MANAGE,
    CAP_PURCHASES_DELETE,
    CAP_SUPPLIERS_EDIT,
    CAP_SUPPLIERS_DELETE,
    CAP_CUSTOMERS_MANAGE,
    CAP_USERS_VIEW,
    CAP_USERS_MANAGE,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_SALES_CREATE,
        CAP_SALES_DELETE,
        CAP_PURCHASES_MANAGE,
        CAP_SUPPLIERS_EDIT,
        CAP_CUSTOMERS_MANAGE,
        CAP_USERS_VIEW,
        CAP_REPORTS_VIEW,
    },
    ROLE_STAFF: {
        CAP_INVENTORY_VIEW,
        CAP_SALES_CREATE,
        CAP_CUSTOMERS_MANAGE,
        CAP_REPORTS_VIEW,
    },
}


# =========================================================
# Capability interface
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


@dataclass(frozen=True)
class Capabilities:
    """
    What the acting user may do.

    is_staff is true for every authenticated staff role (admin and manager included).
    """

    user_id: Optional[object] = None
    role: Optional[str] = None
    granted: frozenset = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def can(self, capability: str) -> bool:
        return capability in self.granted

    def owns_resource(self, obj) -> bool:
        """
        Ownership by convention:
        - user rows: the user itself
        - sales / purchases: `user_id` (creator)
        - products: `owner_id`
        """
        if self.user_id is None or obj is None:
            return False

        for attr in ("owner_id", "user_id"):
            value = getattr(obj, attr, None)
            if value is not None:
                return str(value) == str(self.user_id)

        if getattr(obj, "_meta", None) is not None and obj._meta.label_lower == "users.user":
            return str(obj.pk) == str(self.user_id)

        return False


ANONYMOUS = Capabilities()


def capabilities_for(user) -> Capabilities:
    if not user or not getattr(user, "is_authenticated", False):
        return ANONYMOUS

    if not getattr(user, "is_active", True):
        return ANONYMOUS

    role = get_user_role(user)
    return Capabilities(
        user_id=user.pk,
        role=role,
        granted=frozenset(ROLE_CAPABILITIES.get(role, set())),
    )


# =========================================================
# Role Permissions
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Subclasses define `allowed_roles`.
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        caps = capabilities_for(request.user)
        if not caps.is_authenticated:
            return False
        return caps.role in self.allowed_roles


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsAdminOrManager(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN, ROLE_MANAGER}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES


class IsOwnerOrAdminOrManager(BasePermission):
    """
    Object-level: admins and managers pass; other staff only for their own rows.
    """

    def has_permission(self, request, view):
        return capabilities_for(request.user).is_staff

    def has_object_permission(self, request, view, obj):
        caps = capabilities_for(request.user)
        if caps.is_admin or caps.is_manager:
            return True
        return caps.owns_resource(obj)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_INVENTORY_EDIT
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False
        return capabilities_for(request.user).can(required)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        required_any_capabilities = {CAP_USERS_VIEW, CAP_USERS_MANAGE}
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False
        caps = capabilities_for(request.user)
        return any(caps.can(cap) for cap in set(required))
