# sales/services/sale_service.py

"""
CORE SALES DOMAIN SERVICE

SINGLE SOURCE OF TRUTH for:
- Sale + SaleItem creation
- stock deduction / restoration (through the Order Line Processor)
- totals calculation
- status changes, cancellation and deletion

GUARANTEES:
- every operation is one Transaction Boundary: all-or-nothing
- the Stock Mutator is the ONLY stock authority; no pre-validation outside it
- COMPLETED / CANCELLED sales are never modified (InvalidStateError)
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.utils import timezone

from customers.models import Customer
from products.models import Product
from products.services.exceptions import (
    InputValidationError,
    InvalidStateError,
    NotFoundError,
)
from products.services.numbering import next_document_number
from products.services.order_lines import (
    CANCEL,
    CREATE,
    DELETE,
    compute_totals,
    process_order_lines,
)
from products.services.transactions import run_order_mutation, with_transaction
from sales.models import Sale, SaleItem
from sales.services.sale_lifecycle import INITIAL_STATES, validate_transition

logger = logging.getLogger("inventory.sales")

INVOICE_PREFIX = "INV-"

EDITABLE_FIELDS = {
    "customer_id",
    "date",
    "payment_method",
    "discount",
    "tax",
    "notes",
    "status",
}


# ============================================================
# INPUT NORMALIZATION
# ============================================================
def _normalize_items(items) -> list[dict]:
    if not items:
        raise InputValidationError("At least one item is required")

    normalized = []
    for idx, raw in enumerate(items, start=1):
        product_id = raw.get("product_id")
        if not product_id:
            raise InputValidationError(f"Item {idx}: product_id is required")

        quantity = raw.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InputValidationError(f"Item {idx}: quantity must be a positive integer")

        price = raw.get("price")
        if price is not None:
            try:
                price = Decimal(str(price))
            except (InvalidOperation, ValueError):
                raise InputValidationError(f"Item {idx}: price must be a number")
            if price < 0:
                raise InputValidationError(f"Item {idx}: price cannot be negative")

        normalized.append({"product_id": product_id, "quantity": quantity, "price": price})
    return normalized


def _validate_payment_method(value) -> str:
    value = (value or Sale.PaymentMethod.CASH).strip().upper()
    if value not in Sale.PaymentMethod.values:
        raise InputValidationError(f"Unknown payment method: {value}")
    return value


def _get_customer(customer_id) -> Customer:
    try:
        return Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError("Customer not found")


def _get_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"Product not found: {product_id}")


def _create_walk_in_customer(data: dict) -> Customer:
    name = (data.get("name") or "").strip()
    if not name:
        raise InputValidationError("New customer name is required")

    email = (data.get("email") or "").strip().lower()
    if email and Customer.objects.filter(email__iexact=email).exists():
        raise InputValidationError("A customer with this email already exists")

    customer = Customer(
        name=name,
        email=email,
        phone=(data.get("phone") or "").strip(),
        address=(data.get("address") or "").strip(),
    )
    customer.full_clean()
    customer.save()
    return customer


def _apply_totals(sale: Sale) -> Sale:
    totals = compute_totals(
        ((it.quantity, it.price) for it in sale.items.all()),
        discount=sale.discount,
        tax=sale.tax,
    )
    sale.subtotal_amount = totals.subtotal
    sale.total_amount = totals.total
    return sale


# ============================================================
# CREATE
# ============================================================
def create_sale(
    *,
    user,
    items,
    customer_id=None,
    new_customer: dict | None = None,
    date=None,
    payment_method: str = Sale.PaymentMethod.CASH,
    status: str = Sale.Status.PENDING,
    discount=0,
    tax=0,
    notes: str = "",
) -> Sale:
    status = (status or Sale.Status.PENDING).upper()
    if status not in INITIAL_STATES:
        raise InputValidationError("A sale can only be created as PENDING or COMPLETED")

    lines = _normalize_items(items)
    payment_method = _validate_payment_method(payment_method)
    compute_totals([], discount=discount, tax=tax)  # validates percentages early

    def _create():
        customer = None
        if customer_id:
            customer = _get_customer(customer_id)
        elif new_customer:
            customer = _create_walk_in_customer(new_customer)

        sale = Sale.objects.create(
            invoice_number=next_document_number(Sale, "invoice_number", INVOICE_PREFIX),
            customer=customer,
            user=user,
            date=date or timezone.now(),
            payment_method=payment_method,
            status=status,
            discount=Decimal(str(discount or 0)),
            tax=Decimal(str(tax or 0)),
            notes=notes or "",
        )

        for line in lines:
            product = _get_product(line["product_id"])
            SaleItem.objects.create(
                sale=sale,
                product=product,
                quantity=line["quantity"],
                # price snapshot; defaults to the current selling price
                price=line["price"] if line["price"] is not None else product.price,
            )

        _apply_totals(sale)
        sale.save(update_fields=["subtotal_amount", "total_amount", "updated_at"])

        # single stock exit point
        process_order_lines(sale, CREATE, user=user)
        return sale

    sale = with_transaction(_create)
    logger.info(
        "Sale created",
        extra={
            "sale_id": str(sale.pk),
            "invoice": sale.invoice_number,
            "status": sale.status,
            "total": str(sale.total_amount),
        },
    )
    return sale


# ============================================================
# UPDATE / CANCEL
# ============================================================
def _cancel_locked(sale: Sale, user) -> Sale:
    validate_transition(sale=sale, target_status=Sale.Status.CANCELLED)
    process_order_lines(sale, CANCEL, user=user)
    sale.status = Sale.Status.CANCELLED
    return sale


def update_sale(*, sale_id, user, data: dict) -> Sale:
    """
    Edit a PENDING sale.

    Line items are fixed at creation; totals are recomputed on every update.
    A COMPLETED sale accepts one change only: status -> CANCELLED, with no
    other fields and no stock effect.
    """
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise InputValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    def _update(sale: Sale):
        target = (data.get("status") or sale.status).upper()

        if sale.status == Sale.Status.COMPLETED and target == Sale.Status.CANCELLED:
            if set(data) - {"status"}:
                raise InvalidStateError("Completed sales can only be cancelled")
            _cancel_locked(sale, user)
            sale.save(update_fields=["status", "updated_at"])
            return sale

        if sale.is_frozen:
            raise InvalidStateError(f"{sale.get_status_display()} sales cannot be modified")

        if "customer_id" in data:
            sale.customer = _get_customer(data["customer_id"]) if data["customer_id"] else None
        if data.get("date"):
            sale.date = data["date"]
        if "payment_method" in data:
            sale.payment_method = _validate_payment_method(data["payment_method"])
        if "notes" in data:
            sale.notes = data["notes"] or ""

        discount = data.get("discount", sale.discount)
        tax = data.get("tax", sale.tax)
        compute_totals([], discount=discount, tax=tax)
        sale.discount = Decimal(str(discount or 0))
        sale.tax = Decimal(str(tax or 0))

        if target != sale.status:
            if target == Sale.Status.CANCELLED:
                _cancel_locked(sale, user)
            else:
                validate_transition(sale=sale, target_status=target)
                sale.status = target

        _apply_totals(sale)
        sale.save()
        return sale

    sale = run_order_mutation(Sale, sale_id, _update)
    logger.info(
        "Sale updated",
        extra={"sale_id": str(sale.pk), "invoice": sale.invoice_number, "status": sale.status},
    )
    return sale


def cancel_sale(*, sale_id, user) -> Sale:
    def _cancel(sale: Sale):
        _cancel_locked(sale, user)
        sale.save(update_fields=["status", "updated_at"])
        return sale

    sale = run_order_mutation(Sale, sale_id, _cancel)
    logger.info("Sale cancelled", extra={"sale_id": str(sale.pk), "invoice": sale.invoice_number})
    return sale


# ============================================================
# DELETE
# ============================================================
def delete_sale(*, sale_id, user) -> None:
    """
    PENDING   -> stock restored, then deleted
    CANCELLED -> deleted (stock settled at cancellation)
    COMPLETED -> InvalidStateError
    """

    def _delete(sale: Sale):
        process_order_lines(sale, DELETE, user=user)
        invoice = sale.invoice_number
        sale.delete()
        return invoice

    invoice = run_order_mutation(Sale, sale_id, _delete)
    logger.info("Sale deleted", extra={"invoice": invoice, "by": str(getattr(user, "pk", ""))})
