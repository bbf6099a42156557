from decimal import Decimal
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    ANONYMOUS,
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_VIEW,
    CAP_REPORTS_VIEW,
    CAP_SALES_CREATE,
    CAP_USERS_MANAGE,
    CAP_USERS_VIEW,
    HasAnyCapability,
    HasCapability,
    IsAdmin,
    IsAdminOrManager,
    IsOwnerOrAdminOrManager,
    IsStaff,
    capabilities_for,
)
from products.models import Product

User = get_user_model()


class CapabilityTests(TestCase):
    """
    Role -> capability mapping.

    GUARANTEES:
    - admins hold every capability
    - managers cannot delete catalogue rows or manage users
    - staff are limited to reading stock and recording sales
    - inactive and anonymous users hold nothing
    """

    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")

    def test_admin_has_everything(self):
        caps = capabilities_for(self.admin)
        self.assertTrue(caps.is_admin)
        self.assertTrue(caps.can(CAP_USERS_MANAGE))
        self.assertTrue(caps.can(CAP_INVENTORY_DELETE))

    def test_manager_limits(self):
        caps = capabilities_for(self.manager)
        self.assertTrue(caps.can(CAP_USERS_VIEW))
        self.assertFalse(caps.can(CAP_USERS_MANAGE))
        self.assertFalse(caps.can(CAP_INVENTORY_DELETE))

    def test_staff_limits(self):
        caps = capabilities_for(self.staff)
        self.assertTrue(caps.is_staff)
        self.assertTrue(caps.can(CAP_SALES_CREATE))
        self.assertTrue(caps.can(CAP_INVENTORY_VIEW))
        self.assertTrue(caps.can(CAP_REPORTS_VIEW))
        self.assertFalse(caps.can(CAP_USERS_VIEW))

    def test_inactive_and_anonymous(self):
        self.staff.is_active = False
        self.assertIs(capabilities_for(self.staff), ANONYMOUS)
        self.assertIs(capabilities_for(AnonymousUser()), ANONYMOUS)
        self.assertIs(capabilities_for(None), ANONYMOUS)
        self.assertFalse(ANONYMOUS.is_authenticated)

    def test_ownership(self):
        caps = capabilities_for(self.staff)
        product = Product(name="Rice", sku="RC-001", price=Decimal("1.00"), owner=self.staff)

        self.assertTrue(caps.owns_resource(product))
        self.assertTrue(caps.owns_resource(self.staff))
        self.assertFalse(caps.owns_resource(self.manager))
        self.assertTrue(caps.owns_resource(SimpleNamespace(user_id=self.staff.pk)))
        self.assertFalse(caps.owns_resource(None))


class PermissionClassTests(TestCase):
    """
    GUARANTEES:
    - no privilege escalation across roles
    - views without a declared capability deny everyone
    """

    def setUp(self):
        self.factory = APIRequestFactory()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user or AnonymousUser()
        return request

    # --------------------------------------------------
    # ROLE CLASSES
    # --------------------------------------------------

    def test_role_classes(self):
        admin, manager, staff = (self._request_for(u) for u in (self.admin, self.manager, self.staff))

        self.assertTrue(IsAdmin().has_permission(admin, None))
        self.assertFalse(IsAdmin().has_permission(manager, None))

        self.assertTrue(IsAdminOrManager().has_permission(manager, None))
        self.assertFalse(IsAdminOrManager().has_permission(staff, None))

        for request in (admin, manager, staff):
            self.assertTrue(IsStaff().has_permission(request, None))

    def test_anonymous_denied_everywhere(self):
        request = self._request_for()
        view = SimpleNamespace(required_capability=CAP_INVENTORY_VIEW, required_any_capabilities={CAP_INVENTORY_VIEW})

        self.assertFalse(IsAdmin().has_permission(request, view))
        self.assertFalse(IsStaff().has_permission(request, view))
        self.assertFalse(HasCapability().has_permission(request, view))
        self.assertFalse(HasAnyCapability().has_permission(request, view))
        self.assertFalse(IsOwnerOrAdminOrManager().has_permission(request, view))

    # --------------------------------------------------
    # CAPABILITY CLASSES
    # --------------------------------------------------

    def test_capability_classes(self):
        staff = self._request_for(self.staff)

        self.assertTrue(HasCapability().has_permission(staff, SimpleNamespace(required_capability=CAP_SALES_CREATE)))
        self.assertFalse(HasCapability().has_permission(staff, SimpleNamespace(required_capability=CAP_USERS_VIEW)))
        self.assertTrue(
            HasAnyCapability().has_permission(
                staff, SimpleNamespace(required_any_capabilities={CAP_USERS_VIEW, CAP_SALES_CREATE})
            )
        )

    def test_missing_declaration_denies(self):
        admin = self._request_for(self.admin)
        self.assertFalse(HasCapability().has_permission(admin, SimpleNamespace()))
        self.assertFalse(HasAnyCapability().has_permission(admin, SimpleNamespace()))

    def test_owner_object_permission(self):
        product = Product(name="Rice", sku="RC-001", price=Decimal("1.00"), owner=self.staff)
        other = User.objects.create_user(email="other@example.com", password="pass", role="staff")
        perm = IsOwnerOrAdminOrManager()

        self.assertTrue(perm.has_object_permission(self._request_for(self.staff), None, product))
        self.assertFalse(perm.has_object_permission(self._request_for(other), None, product))
        self.assertTrue(perm.has_object_permission(self._request_for(self.manager), None, product))
