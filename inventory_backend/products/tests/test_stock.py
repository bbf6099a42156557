# products/tests/test_stock.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import ProtectedError
from django.test import TestCase

from products.models import Product, StockLedgerEntry
from products.services.adjustments import (
    INITIAL_STOCK_REFERENCE,
    adjust_stock,
    set_stock_level,
)
from products.services.exceptions import (
    InputValidationError,
    InsufficientStockError,
    NotFoundError,
)
from products.services.stock_mutator import apply_delta
from products.services.transactions import with_transaction

User = get_user_model()


class StockMutatorTests(TestCase):
    """
    Stock Mutator tests.

    GUARANTEES:
    - quantity never goes below zero
    - every successful change appends exactly one ledger entry
    - a rejected change leaves quantity and ledger untouched
    """

    def setUp(self):
        self.user = User.objects.create_user(
            email="stock_admin@example.com",
            password="password123",
            role="admin",
        )
        self.product = Product.objects.create(
            name="Rice (5kg)",
            sku="RC-001",
            price=Decimal("12.99"),
            quantity=10,
        )

    def test_positive_delta_increases_quantity_and_records_entry(self):
        product = apply_delta(
            product_id=self.product.pk,
            delta=5,
            entry_type=StockLedgerEntry.EntryType.PURCHASE,
            reference="PO-00001",
            user=self.user,
        )

        self.assertEqual(product.quantity, 15)
        entry = StockLedgerEntry.objects.get(product=self.product)
        self.assertEqual(entry.quantity, 5)
        self.assertEqual(entry.type, StockLedgerEntry.EntryType.PURCHASE)
        self.assertEqual(entry.reference, "PO-00001")
        self.assertEqual(entry.performed_by, self.user)

    def test_delta_to_exactly_zero_is_allowed(self):
        product = apply_delta(
            product_id=self.product.pk,
            delta=-10,
            entry_type=StockLedgerEntry.EntryType.SALE,
            reference="INV-00001",
        )
        self.assertEqual(product.quantity, 0)

    def test_insufficient_stock_changes_nothing(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            apply_delta(
                product_id=self.product.pk,
                delta=-11,
                entry_type=StockLedgerEntry.EntryType.SALE,
                reference="INV-00001",
            )

        self.assertEqual(ctx.exception.available, 10)
        self.assertEqual(ctx.exception.requested, 11)
        self.assertIn("Available: 10, requested: 11", ctx.exception.message)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        self.assertFalse(StockLedgerEntry.objects.exists())

    def test_zero_and_bool_deltas_are_rejected(self):
        for bad in (0, True, "abc", None, 1.5):
            with self.assertRaises(InputValidationError):
                apply_delta(
                    product_id=self.product.pk,
                    delta=bad,
                    entry_type=StockLedgerEntry.EntryType.ADJUSTMENT,
                    reference="X",
                )

    def test_unknown_entry_type_is_rejected(self):
        with self.assertRaises(InputValidationError):
            apply_delta(
                product_id=self.product.pk,
                delta=1,
                entry_type="GIFT",
                reference="X",
            )

    def test_unknown_product_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            apply_delta(
                product_id="00000000-0000-0000-0000-000000000000",
                delta=1,
                entry_type=StockLedgerEntry.EntryType.ADJUSTMENT,
                reference="X",
            )


class LedgerImmutabilityTests(TestCase):
    """
    GUARANTEES:
    - ledger entries cannot be edited or deleted once written
    - a product with ledger history cannot be deleted out from under it
    """

    def setUp(self):
        self.product = Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.49"))
        apply_delta(
            product_id=self.product.pk,
            delta=3,
            entry_type=StockLedgerEntry.EntryType.ADJUSTMENT,
            reference="COUNT",
        )
        self.entry = StockLedgerEntry.objects.get(product=self.product)

    def test_entry_cannot_be_updated(self):
        self.entry.quantity = 99
        with self.assertRaises(ValidationError):
            self.entry.save()

    def test_entry_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.entry.delete()
        self.assertTrue(StockLedgerEntry.objects.filter(pk=self.entry.pk).exists())

    def test_product_delete_keeps_history(self):
        with self.assertRaises(ProtectedError):
            self.product.delete()

        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())
        self.assertEqual(StockLedgerEntry.objects.filter(product=self.product).count(), 1)

    def test_zero_quantity_entry_is_invalid(self):
        with self.assertRaises(ValidationError):
            StockLedgerEntry.objects.create(
                product=self.product,
                quantity=0,
                type=StockLedgerEntry.EntryType.ADJUSTMENT,
            )


class TransactionBoundaryTests(TestCase):
    """
    GUARANTEES:
    - a failure inside the boundary rolls back every earlier write
    - the original exception reaches the caller unchanged
    """

    def setUp(self):
        self.a = Product.objects.create(name="A", sku="A-1", price=Decimal("1.00"), quantity=5)
        self.b = Product.objects.create(name="B", sku="B-1", price=Decimal("1.00"), quantity=1)

    def test_rollback_on_second_failure(self):
        def _work():
            apply_delta(product_id=self.a.pk, delta=-2, entry_type="SALE", reference="T")
            apply_delta(product_id=self.b.pk, delta=-2, entry_type="SALE", reference="T")

        with self.assertRaises(InsufficientStockError):
            with_transaction(_work)

        self.a.refresh_from_db()
        self.b.refresh_from_db()
        self.assertEqual(self.a.quantity, 5)
        self.assertEqual(self.b.quantity, 1)
        self.assertEqual(StockLedgerEntry.objects.count(), 0)

    def test_returns_result_on_success(self):
        result = with_transaction(lambda x: x * 2, 21)
        self.assertEqual(result, 42)


class AdjustmentServiceTests(TestCase):
    """
    Manual adjustments and absolute stock levels.

    GUARANTEES:
    - only ADJUSTMENT / RETURN entries can be written manually
    - set_stock_level keeps ledger sum == quantity
    """

    def setUp(self):
        self.product = Product.objects.create(name="Coffee", sku="CF-001", price=Decimal("6.99"))

    def test_adjust_defaults_reference(self):
        adjust_stock(product_id=self.product.pk, delta=4)
        entry = StockLedgerEntry.objects.get(product=self.product)
        self.assertEqual(entry.reference, "MANUAL")
        self.assertEqual(entry.type, StockLedgerEntry.EntryType.ADJUSTMENT)

    def test_return_entry_allowed(self):
        product = adjust_stock(
            product_id=self.product.pk,
            delta=2,
            entry_type=StockLedgerEntry.EntryType.RETURN,
            reference="RMA-7",
        )
        self.assertEqual(product.quantity, 2)

    def test_sale_entry_rejected(self):
        with self.assertRaises(InputValidationError):
            adjust_stock(
                product_id=self.product.pk,
                delta=-1,
                entry_type=StockLedgerEntry.EntryType.SALE,
            )

    def test_set_stock_level_appends_difference(self):
        set_stock_level(product_id=self.product.pk, quantity=20, reference=INITIAL_STOCK_REFERENCE)
        product = set_stock_level(product_id=self.product.pk, quantity=12, reference="COUNT")

        self.assertEqual(product.quantity, 12)
        deltas = list(
            StockLedgerEntry.objects.filter(product=self.product)
            .order_by("created_at", "id")
            .values_list("quantity", flat=True)
        )
        self.assertEqual(sorted(deltas), [-8, 20])
        self.assertEqual(sum(deltas), product.quantity)

    def test_set_stock_level_noop_when_unchanged(self):
        set_stock_level(product_id=self.product.pk, quantity=0, reference="COUNT")
        self.assertFalse(StockLedgerEntry.objects.exists())
