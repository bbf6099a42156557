# products/tests/test_order_lines.py

from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from customers.models import Customer
from products.models import Product, StockLedgerEntry
from products.services.exceptions import InputValidationError, InvalidStateError
from products.services.numbering import next_document_number
from products.services.order_lines import (
    CANCEL,
    CREATE,
    DELETE,
    RECEIVE,
    compute_totals,
    plan_stock_deltas,
    process_order_lines,
)
from purchases.models import Purchase, PurchaseItem, Supplier
from sales.models import Sale, SaleItem


class ComputeTotalsTests(SimpleTestCase):
    def test_discount_then_tax(self):
        totals = compute_totals(
            [(2, Decimal("10.00")), (1, Decimal("5.50"))],
            discount=10,
            tax=5,
        )
        # 25.50 - 2.55 = 22.95; tax 1.1475 -> 1.15
        self.assertEqual(totals.subtotal, Decimal("25.50"))
        self.assertEqual(totals.discount_amount, Decimal("2.55"))
        self.assertEqual(totals.tax_amount, Decimal("1.15"))
        self.assertEqual(totals.total, Decimal("24.10"))

    def test_empty_lines_total_zero(self):
        totals = compute_totals([])
        self.assertEqual(totals.total, Decimal("0.00"))

    def test_percentages_out_of_range_rejected(self):
        with self.assertRaises(InputValidationError):
            compute_totals([], discount=101)
        with self.assertRaises(InputValidationError):
            compute_totals([], tax=-1)
        with self.assertRaises(InputValidationError):
            compute_totals([], tax="lots")


class OrderLinePlanningTests(TestCase):
    """
    Order Line Processor planning.

    GUARANTEES:
    - one delta per line, in line creation order
    - completed orders are refused before any stock moves; a completed sale
      cancels with no deltas
    - cancelled sales never restore stock twice
    """

    def setUp(self):
        self.p1 = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("10.00"), quantity=50)
        self.p2 = Product.objects.create(name="Milk", sku="ML-001", price=Decimal("2.00"), quantity=50)
        self.customer = Customer.objects.create(name="Jane Doe")

        self.sale = Sale.objects.create(
            invoice_number="INV-00001",
            customer=self.customer,
            date=timezone.now(),
        )
        SaleItem.objects.create(sale=self.sale, product=self.p2, quantity=3, price=Decimal("2.00"))
        SaleItem.objects.create(sale=self.sale, product=self.p1, quantity=4, price=Decimal("10.00"))

        self.supplier = Supplier.objects.create(name="Acme Wholesale")
        self.purchase = Purchase.objects.create(
            reference_number="PO-00001",
            supplier=self.supplier,
            date=timezone.now(),
        )
        PurchaseItem.objects.create(
            purchase=self.purchase, product=self.p1, quantity=7, unit_cost=Decimal("8.00")
        )

    # =====================================================
    # SALES
    # =====================================================

    def test_sale_create_deducts_in_line_order(self):
        deltas = plan_stock_deltas(self.sale, CREATE)

        self.assertEqual([d.product_id for d in deltas], [self.p2.pk, self.p1.pk])
        self.assertEqual([d.delta for d in deltas], [-3, -4])
        self.assertTrue(all(d.entry_type == StockLedgerEntry.EntryType.SALE for d in deltas))
        self.assertTrue(all(d.reference == "INV-00001" for d in deltas))
        self.assertEqual(deltas[0].notes, "Sale to Jane Doe")

    def test_sale_cancel_restores_as_adjustment(self):
        deltas = plan_stock_deltas(self.sale, CANCEL)

        self.assertEqual([d.delta for d in deltas], [3, 4])
        self.assertEqual(deltas[0].entry_type, StockLedgerEntry.EntryType.ADJUSTMENT)
        self.assertEqual(deltas[0].reference, "CANCEL-INV-00001")

    def test_sale_delete_reference(self):
        deltas = plan_stock_deltas(self.sale, DELETE)
        self.assertEqual(deltas[0].reference, "DELETE-INV-00001")

    def test_cancelled_sale_yields_nothing(self):
        self.sale.status = Sale.Status.CANCELLED
        self.assertEqual(plan_stock_deltas(self.sale, CANCEL), [])
        self.assertEqual(plan_stock_deltas(self.sale, DELETE), [])

    def test_completed_sale_refuses_delete(self):
        self.sale.status = Sale.Status.COMPLETED
        with self.assertRaises(InvalidStateError):
            plan_stock_deltas(self.sale, DELETE)

    def test_completed_sale_cancel_keeps_stock(self):
        self.sale.status = Sale.Status.COMPLETED
        self.assertEqual(plan_stock_deltas(self.sale, CANCEL), [])

    def test_sale_cannot_be_received(self):
        with self.assertRaises(InputValidationError):
            plan_stock_deltas(self.sale, RECEIVE)

    def test_unknown_transition(self):
        with self.assertRaises(InputValidationError):
            plan_stock_deltas(self.sale, "REFUND")

    def test_unsupported_order_kind(self):
        with self.assertRaises(InputValidationError):
            plan_stock_deltas(self.customer, CREATE)

    # =====================================================
    # PURCHASES
    # =====================================================

    def test_purchase_create_cancel_delete_have_no_stock_effect(self):
        for transition in (CREATE, CANCEL, DELETE):
            self.assertEqual(plan_stock_deltas(self.purchase, transition), [])

    def test_purchase_receive_adds_stock(self):
        deltas = plan_stock_deltas(self.purchase, RECEIVE)

        self.assertEqual(len(deltas), 1)
        self.assertEqual(deltas[0].delta, 7)
        self.assertEqual(deltas[0].entry_type, StockLedgerEntry.EntryType.PURCHASE)
        self.assertEqual(deltas[0].reference, "PO-00001")
        self.assertEqual(deltas[0].notes, "Received from Acme Wholesale")

    def test_completed_purchase_cannot_be_received_again(self):
        self.purchase.status = Purchase.Status.COMPLETED
        with self.assertRaises(InvalidStateError):
            plan_stock_deltas(self.purchase, RECEIVE)

    # =====================================================
    # EXECUTION
    # =====================================================

    def test_process_applies_every_line(self):
        process_order_lines(self.sale, CREATE)

        self.p1.refresh_from_db()
        self.p2.refresh_from_db()
        self.assertEqual(self.p1.quantity, 46)
        self.assertEqual(self.p2.quantity, 47)
        self.assertEqual(StockLedgerEntry.objects.filter(reference="INV-00001").count(), 2)


class DocumentNumberTests(TestCase):
    """
    GUARANTEES:
    - numbers continue from the highest existing one, not the row count
    - numbers that do not match the prefix format are ignored
    """

    def _sale(self, number):
        return Sale.objects.create(invoice_number=number, date=timezone.now())

    def test_first_number(self):
        self.assertEqual(next_document_number(Sale, "invoice_number", "INV-"), "INV-00001")

    def test_continues_from_highest(self):
        self._sale("INV-00002")
        self._sale("INV-00009")
        self._sale("INV-100000")
        self.assertEqual(next_document_number(Sale, "invoice_number", "INV-"), "INV-100001")

    def test_ignores_foreign_formats(self):
        self._sale("INV-LEGACY")
        self._sale("INV-00003")
        self.assertEqual(next_document_number(Sale, "invoice_number", "INV-"), "INV-00004")
