# purchases/tests/test_purchases.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product, StockLedgerEntry
from products.services.exceptions import InputValidationError, InvalidStateError, NotFoundError
from purchases.models import Purchase, Supplier
from purchases.services.purchase_service import (
    cancel_purchase,
    create_purchase,
    delete_purchase,
    receive_purchase,
    update_purchase,
)

User = get_user_model()


class PurchaseServiceTests(TestCase):
    """
    Purchase order service.

    GUARANTEES:
    - stock only moves when a purchase is received
    - receiving happens at most once
    - completed purchases are frozen
    """

    def setUp(self):
        self.user = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.supplier = Supplier.objects.create(name="Acme Wholesale")
        self.product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.00"), quantity=2)

    def _purchase(self, **kwargs):
        params = {
            "user": self.user,
            "supplier_id": self.supplier.pk,
            "items": [{"product_id": self.product.pk, "quantity": 10, "unit_cost": "8.00"}],
        }
        params.update(kwargs)
        return create_purchase(**params)

    def test_create_pending_has_no_stock_effect(self):
        purchase = self._purchase(tax=10)

        self.assertEqual(purchase.reference_number, "PO-00001")
        self.assertEqual(purchase.status, Purchase.Status.PENDING)
        self.assertEqual(purchase.subtotal_amount, Decimal("80.00"))
        self.assertEqual(purchase.total_amount, Decimal("88.00"))

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 2)
        self.assertFalse(StockLedgerEntry.objects.exists())

    def test_receive_adds_stock_once(self):
        purchase = self._purchase()
        received = receive_purchase(purchase_id=purchase.pk, user=self.user)

        self.assertEqual(received.status, Purchase.Status.COMPLETED)
        self.assertIsNotNone(received.received_at)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)

        entry = StockLedgerEntry.objects.get()
        self.assertEqual(entry.type, StockLedgerEntry.EntryType.PURCHASE)
        self.assertEqual(entry.reference, "PO-00001")
        self.assertEqual(entry.notes, "Received from Acme Wholesale")

        with self.assertRaises(InvalidStateError):
            receive_purchase(purchase_id=purchase.pk, user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)

    def test_create_completed_receives_immediately(self):
        purchase = self._purchase(status=Purchase.Status.COMPLETED)

        self.assertEqual(purchase.status, Purchase.Status.COMPLETED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 12)

    def test_cancel_then_receive_rejected(self):
        purchase = self._purchase()
        cancel_purchase(purchase_id=purchase.pk, user=self.user)

        with self.assertRaises(InvalidStateError):
            receive_purchase(purchase_id=purchase.pk, user=self.user)
        with self.assertRaises(InvalidStateError):
            cancel_purchase(purchase_id=purchase.pk, user=self.user)

    def test_completed_purchase_frozen(self):
        purchase = self._purchase(status=Purchase.Status.COMPLETED)

        with self.assertRaises(InvalidStateError):
            cancel_purchase(purchase_id=purchase.pk, user=self.user)
        with self.assertRaises(InvalidStateError):
            delete_purchase(purchase_id=purchase.pk, user=self.user)
        with self.assertRaises(InvalidStateError):
            update_purchase(purchase_id=purchase.pk, user=self.user, data={"notes": "x"})

    def test_update_recomputes_totals(self):
        purchase = self._purchase()
        updated = update_purchase(purchase_id=purchase.pk, user=self.user, data={"discount": Decimal("25")})
        self.assertEqual(updated.total_amount, Decimal("60.00"))

    def test_delete_pending(self):
        purchase = self._purchase()
        delete_purchase(purchase_id=purchase.pk, user=self.user)
        self.assertFalse(Purchase.objects.exists())

    def test_invalid_inputs(self):
        with self.assertRaises(NotFoundError):
            self._purchase(supplier_id="00000000-0000-0000-0000-000000000000")
        with self.assertRaises(InputValidationError):
            self._purchase(items=[{"product_id": self.product.pk, "quantity": 1, "unit_cost": "-1"}])
        with self.assertRaises(InputValidationError):
            self._purchase(status=Purchase.Status.CANCELLED)
        self.assertFalse(Purchase.objects.exists())


class PurchaseApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.supplier = Supplier.objects.create(name="Acme Wholesale", email="orders@acme.example")
        self.product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.00"))

    def _payload(self, **extra):
        payload = {
            "supplier_id": str(self.supplier.pk),
            "items": [{"product_id": str(self.product.pk), "quantity": 5, "unit_cost": "8.00"}],
        }
        payload.update(extra)
        return payload

    def test_manager_creates_and_receives(self):
        self.client.force_authenticate(self.manager)

        created = self.client.post("/api/purchases/purchases/", self._payload(), format="json")
        self.assertEqual(created.status_code, 201, created.data)
        self.assertEqual(created.data["status"], "PENDING")

        received = self.client.post(f"/api/purchases/purchases/{created.data['id']}/receive/")
        self.assertEqual(received.status_code, 200, received.data)
        self.assertEqual(received.data["status"], "COMPLETED")

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

    def test_staff_cannot_manage_purchases(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post("/api/purchases/purchases/", self._payload(), format="json")
        self.assertEqual(response.status_code, 403)

    def test_manager_cannot_delete_purchase(self):
        purchase = create_purchase(
            user=self.manager,
            supplier_id=self.supplier.pk,
            items=[{"product_id": self.product.pk, "quantity": 1, "unit_cost": "1.00"}],
        )
        self.client.force_authenticate(self.manager)
        response = self.client.delete(f"/api/purchases/purchases/{purchase.pk}/")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/purchases/purchases/{purchase.pk}/")
        self.assertEqual(response.status_code, 204)

    def test_status_filter(self):
        create_purchase(
            user=self.manager,
            supplier_id=self.supplier.pk,
            items=[{"product_id": self.product.pk, "quantity": 1, "unit_cost": "1.00"}],
            status=Purchase.Status.COMPLETED,
        )
        self.client.force_authenticate(self.manager)

        response = self.client.get("/api/purchases/purchases/", {"status": "pending"})
        self.assertEqual(response.data["pagination"]["total"], 0)

        response = self.client.get("/api/purchases/purchases/", {"status": "completed"})
        self.assertEqual(response.data["pagination"]["total"], 1)


class SupplierApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.00"))

    def test_staff_reads_but_cannot_write(self):
        Supplier.objects.create(name="Acme")
        self.client.force_authenticate(self.staff)

        self.assertEqual(self.client.get("/api/purchases/suppliers/").status_code, 200)
        response = self.client.post("/api/purchases/suppliers/", {"name": "Globex"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_search_and_sort(self):
        Supplier.objects.create(name="Acme", email="sales@acme.example")
        Supplier.objects.create(name="Globex")
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/purchases/suppliers/", {"search": "acme.example"})
        self.assertEqual([s["name"] for s in response.data["results"]], ["Acme"])

        response = self.client.get("/api/purchases/suppliers/", {"sort": "name:desc"})
        self.assertEqual([s["name"] for s in response.data["results"]], ["Globex", "Acme"])

    def test_delete_blocked_by_purchases(self):
        supplier = Supplier.objects.create(name="Acme")
        create_purchase(
            user=self.admin,
            supplier_id=supplier.pk,
            items=[{"product_id": self.product.pk, "quantity": 1, "unit_cost": "1.00"}],
        )
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f"/api/purchases/suppliers/{supplier.pk}/")
        self.assertEqual(response.status_code, 400)

        detail = self.client.get(f"/api/purchases/suppliers/{supplier.pk}/")
        self.assertEqual(detail.data["purchase_count"], 1)
        self.assertEqual(len(detail.data["recent_purchases"]), 1)
