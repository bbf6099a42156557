# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Category, Product, StockLedgerEntry
from purchases.models import ProductSupplier, Supplier

User = get_user_model()


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced (case-insensitive through normalization)
    - quantity can never be stored below zero
    """

    def test_sku_is_upper_cased(self):
        product = Product.objects.create(name="Rice", sku=" rc-001 ", price=Decimal("1.00"))
        self.assertEqual(product.sku, "RC-001")

    def test_sku_must_be_unique(self):
        Product.objects.create(name="Rice", sku="RC-001", price=Decimal("1.00"))
        with self.assertRaises(IntegrityError):
            Product.objects.create(name="Rice again", sku="rc-001", price=Decimal("1.00"))

    def test_negative_quantity_rejected_by_database(self):
        with self.assertRaises(IntegrityError):
            Product.objects.create(name="Bad", sku="BAD-1", price=Decimal("1.00"), quantity=-1)

    def test_low_stock_and_stock_value(self):
        product = Product.objects.create(
            name="Milk",
            sku="ML-001",
            price=Decimal("2.49"),
            cost_price=Decimal("1.50"),
            quantity=4,
            minimum_stock=5,
        )
        self.assertTrue(product.is_low_stock)
        self.assertEqual(product.stock_value, Decimal("6.00"))
        self.assertIn("Milk", str(product))


class ProductApiTests(TestCase):
    """
    Product endpoints.

    GUARANTEES:
    - quantity set through the API is always explained by ledger entries
    - staff can read but not write
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.category = Category.objects.create(name="Groceries")

    def _create_product(self, **overrides):
        payload = {
            "sku": "rc-001",
            "name": "Rice (5kg)",
            "price": "12.99",
            "cost_price": "9.50",
            "quantity": 25,
            "category_id": str(self.category.pk),
        }
        payload.update(overrides)
        return self.client.post("/api/products/products/", payload, format="json")

    def test_create_records_initial_stock(self):
        self.client.force_authenticate(self.manager)
        response = self._create_product()

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["sku"], "RC-001")
        self.assertEqual(response.data["quantity"], 25)
        self.assertEqual(response.data["category_name"], "Groceries")
        self.assertEqual(str(response.data["owner_id"]), str(self.manager.pk))

        entry = StockLedgerEntry.objects.get(product_id=response.data["id"])
        self.assertEqual(entry.quantity, 25)
        self.assertEqual(entry.reference, "INITIAL-STOCK")

    def test_duplicate_sku_rejected(self):
        self.client.force_authenticate(self.admin)
        self._create_product()
        response = self._create_product(sku="RC-001", name="Other")
        self.assertEqual(response.status_code, 400)

    def test_edit_quantity_appends_difference(self):
        self.client.force_authenticate(self.admin)
        product_id = self._create_product().data["id"]

        response = self.client.patch(
            f"/api/products/products/{product_id}/", {"quantity": 10}, format="json"
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["quantity"], 10)
        entries = StockLedgerEntry.objects.filter(product_id=product_id)
        self.assertEqual(sum(e.quantity for e in entries), 10)
        self.assertTrue(entries.filter(reference="PRODUCT-EDIT", quantity=-15).exists())

    def test_staff_can_list_but_not_create(self):
        Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.49"))
        self.client.force_authenticate(self.staff)

        listing = self.client.get("/api/products/products/")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.data["pagination"]["total"], 1)

        self.assertEqual(self._create_product().status_code, 403)

    def test_anonymous_is_rejected(self):
        response = self.client.get("/api/products/products/")
        self.assertIn(response.status_code, (401, 403))

    def test_manager_cannot_delete(self):
        product = Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.49"))
        self.client.force_authenticate(self.manager)
        response = self.client.delete(f"/api/products/products/{product.pk}/")
        self.assertEqual(response.status_code, 403)

    def test_admin_deletes_unreferenced_product(self):
        product = Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.49"))
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/products/products/{product.pk}/")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_product_with_ledger_history_cannot_be_deleted(self):
        self.client.force_authenticate(self.admin)
        product_id = self._create_product().data["id"]

        response = self.client.delete(f"/api/products/products/{product_id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Product.objects.filter(pk=product_id).exists())
        self.assertEqual(StockLedgerEntry.objects.filter(product_id=product_id).count(), 1)

    def test_search_sort_and_low_stock_filters(self):
        Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.99"), quantity=100)
        Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.49"), quantity=3)
        self.client.force_authenticate(self.staff)

        response = self.client.get("/api/products/products/", {"search": "mil"})
        self.assertEqual([p["sku"] for p in response.data["results"]], ["ML-001"])

        response = self.client.get("/api/products/products/", {"sort": "price:desc"})
        self.assertEqual([p["sku"] for p in response.data["results"]], ["RC-001", "ML-001"])

        response = self.client.get("/api/products/products/", {"low_stock": "true"})
        self.assertEqual([p["sku"] for p in response.data["results"]], ["ML-001"])

        alert = self.client.get("/api/products/products/low-stock/")
        self.assertEqual(alert.data["count"], 1)

    def test_pagination_limit(self):
        for i in range(3):
            Product.objects.create(name=f"P{i}", sku=f"P-{i}", price=Decimal("1.00"))
        self.client.force_authenticate(self.staff)

        response = self.client.get("/api/products/products/", {"limit": 2, "page": 2})
        self.assertEqual(len(response.data["results"]), 1)
        self.assertEqual(response.data["pagination"]["total_pages"], 2)
        self.assertEqual(response.data["pagination"]["page"], 2)


class ProductSupplierLinkTests(TestCase):
    """
    GUARANTEES:
    - at most one preferred supplier per product
    - a supplier is linked to a product at most once
    """

    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.99"))
        self.s1 = Supplier.objects.create(name="Acme")
        self.s2 = Supplier.objects.create(name="Globex")
        self.url = f"/api/products/products/{self.product.pk}/suppliers/"

    def test_preferred_flag_moves(self):
        self.client.force_authenticate(self.manager)

        first = self.client.post(self.url, {"supplier_id": str(self.s1.pk), "is_preferred": True}, format="json")
        self.assertEqual(first.status_code, 201, first.data)
        second = self.client.post(self.url, {"supplier_id": str(self.s2.pk), "is_preferred": True}, format="json")
        self.assertEqual(second.status_code, 201, second.data)

        preferred = ProductSupplier.objects.filter(product=self.product, is_preferred=True)
        self.assertEqual([link.supplier_id for link in preferred], [self.s2.pk])

        listing = self.client.get(self.url)
        self.assertEqual(len(listing.data), 2)

    def test_duplicate_link_rejected(self):
        self.client.force_authenticate(self.manager)
        self.client.post(self.url, {"supplier_id": str(self.s1.pk)}, format="json")
        response = self.client.post(self.url, {"supplier_id": str(self.s1.pk)}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_unlink_requires_delete_capability(self):
        ProductSupplier.objects.create(product=self.product, supplier=self.s1)

        self.client.force_authenticate(self.manager)
        denied = self.client.delete(f"{self.url}?supplier_id={self.s1.pk}")
        self.assertEqual(denied.status_code, 403)

        self.client.force_authenticate(self.admin)
        removed = self.client.delete(f"{self.url}?supplier_id={self.s1.pk}")
        self.assertEqual(removed.status_code, 204)

        missing = self.client.delete(f"{self.url}?supplier_id={self.s1.pk}")
        self.assertEqual(missing.status_code, 404)


class InventoryApiTests(TestCase):
    """
    Ledger history and manual adjustments.
    """

    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("12.99"), quantity=5)

    def test_manager_adjusts_stock(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            "/api/products/inventory/adjust/",
            {"product_id": str(self.product.pk), "quantity": -2, "type": "ADJUSTMENT", "notes": "Damaged"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["quantity"], 3)

        history = self.client.get("/api/products/inventory/", {"product_id": str(self.product.pk)})
        self.assertEqual(history.status_code, 200)
        self.assertEqual(history.data["results"][0]["quantity"], -2)

    def test_adjustment_below_zero_rejected(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            "/api/products/inventory/adjust/",
            {"product_id": str(self.product.pk), "quantity": -6, "type": "ADJUSTMENT"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("Insufficient stock", response.data["detail"])
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

    def test_staff_cannot_adjust(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post(
            "/api/products/inventory/adjust/",
            {"product_id": str(self.product.pk), "quantity": 1, "type": "ADJUSTMENT"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)


class CategoryApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.client.force_authenticate(self.admin)

    def test_create_and_list_with_product_count(self):
        created = self.client.post("/api/products/categories/", {"name": "Dairy"}, format="json")
        self.assertEqual(created.status_code, 201, created.data)
        Product.objects.create(
            name="Milk", sku="ML-001", price=Decimal("2.49"), category_id=created.data["id"]
        )

        listing = self.client.get("/api/products/categories/")
        self.assertEqual(listing.data[0]["product_count"], 1)

    def test_duplicate_name_case_insensitive(self):
        self.client.post("/api/products/categories/", {"name": "Dairy"}, format="json")
        response = self.client.post("/api/products/categories/", {"name": "dairy"}, format="json")
        self.assertEqual(response.status_code, 400)
