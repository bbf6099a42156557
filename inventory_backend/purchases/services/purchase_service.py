# purchases/services/purchase_service.py

"""
======================================================
PATH: purchases/services/purchase_service.py
======================================================
PURCHASE ORDER SERVICE

Lifecycle:
    PENDING --receive--> COMPLETED   (stock += qty per line, PURCHASE entries)
    PENDING --cancel---> CANCELLED   (no stock effect)

Rules:
- every mutation runs inside one Transaction Boundary
- COMPLETED purchases cannot be edited, cancelled or deleted
- creating with status=COMPLETED receives the stock immediately
- totals are always recomputed from the line items
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.utils import timezone

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
    RECEIVE,
    compute_totals,
    process_order_lines,
)
from products.services.transactions import run_order_mutation, with_transaction
from purchases.models import Purchase, PurchaseItem, Supplier

logger = logging.getLogger("inventory.purchases")

REFERENCE_PREFIX = "PO-"

EDITABLE_FIELDS = {"supplier_id", "date", "discount", "tax", "notes"}


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

        try:
            unit_cost = Decimal(str(raw.get("unit_cost")))
        except (InvalidOperation, ValueError):
            raise InputValidationError(f"Item {idx}: unit_cost must be a number")
        if unit_cost < 0:
            raise InputValidationError(f"Item {idx}: unit_cost cannot be negative")

        normalized.append({"product_id": product_id, "quantity": quantity, "unit_cost": unit_cost})
    return normalized


def _get_supplier(supplier_id) -> Supplier:
    try:
        return Supplier.objects.get(pk=supplier_id)
    except (Supplier.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError("Supplier not found")


def _get_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"Product not found: {product_id}")


def _recompute_totals(purchase: Purchase) -> Purchase:
    totals = compute_totals(
        ((it.quantity, it.unit_cost) for it in purchase.items.all()),
        discount=purchase.discount,
        tax=purchase.tax,
    )
    purchase.subtotal_amount = totals.subtotal
    purchase.total_amount = totals.total
    return purchase


def _mark_received(purchase: Purchase, user) -> Purchase:
    # RECEIVE is planned while the purchase is still PENDING
    process_order_lines(purchase, RECEIVE, user=user)
    purchase.status = Purchase.Status.COMPLETED
    purchase.received_at = timezone.now()
    purchase.full_clean()
    purchase.save()
    return purchase


# ============================================================
# OPERATIONS
# ============================================================
def create_purchase(
    *,
    user,
    supplier_id,
    items,
    date=None,
    status: str = Purchase.Status.PENDING,
    discount=0,
    tax=0,
    notes: str = "",
) -> Purchase:
    if status not in {Purchase.Status.PENDING, Purchase.Status.COMPLETED}:
        raise InputValidationError("A purchase can only be created as PENDING or COMPLETED")

    lines = _normalize_items(items)
    compute_totals([], discount=discount, tax=tax)  # validates percentages early

    def _create():
        supplier = _get_supplier(supplier_id)

        purchase = Purchase.objects.create(
            reference_number=next_document_number(Purchase, "reference_number", REFERENCE_PREFIX),
            supplier=supplier,
            user=user,
            date=date or timezone.now(),
            status=Purchase.Status.PENDING,
            discount=Decimal(str(discount or 0)),
            tax=Decimal(str(tax or 0)),
            notes=notes or "",
        )

        for line in lines:
            PurchaseItem.objects.create(
                purchase=purchase,
                product=_get_product(line["product_id"]),
                quantity=line["quantity"],
                unit_cost=line["unit_cost"],
            )

        _recompute_totals(purchase)
        purchase.save(update_fields=["subtotal_amount", "total_amount", "updated_at"])

        process_order_lines(purchase, CREATE, user=user)

        if status == Purchase.Status.COMPLETED:
            _mark_received(purchase, user)

        return purchase

    purchase = with_transaction(_create)
    logger.info(
        "Purchase created",
        extra={
            "purchase_id": str(purchase.pk),
            "reference": purchase.reference_number,
            "status": purchase.status,
        },
    )
    return purchase


def receive_purchase(*, purchase_id, user) -> Purchase:
    def _receive(purchase: Purchase):
        if purchase.status != Purchase.Status.PENDING:
            raise InvalidStateError(f"Cannot receive a purchase in {purchase.status} state")
        return _mark_received(purchase, user)

    purchase = run_order_mutation(Purchase, purchase_id, _receive)
    logger.info(
        "Purchase received",
        extra={"purchase_id": str(purchase.pk), "reference": purchase.reference_number},
    )
    return purchase


def cancel_purchase(*, purchase_id, user) -> Purchase:
    def _cancel(purchase: Purchase):
        if purchase.status == Purchase.Status.CANCELLED:
            raise InvalidStateError("Purchase is already cancelled")

        process_order_lines(purchase, CANCEL, user=user)
        purchase.status = Purchase.Status.CANCELLED
        purchase.save(update_fields=["status", "updated_at"])
        return purchase

    return run_order_mutation(Purchase, purchase_id, _cancel)


def update_purchase(*, purchase_id, user, data: dict) -> Purchase:
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise InputValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    def _update(purchase: Purchase):
        if purchase.status != Purchase.Status.PENDING:
            raise InvalidStateError(f"{purchase.status.capitalize()} purchases cannot be modified")

        if "supplier_id" in data:
            purchase.supplier = _get_supplier(data["supplier_id"])
        if "date" in data and data["date"]:
            purchase.date = data["date"]
        if "notes" in data:
            purchase.notes = data["notes"] or ""

        discount = data.get("discount", purchase.discount)
        tax = data.get("tax", purchase.tax)
        compute_totals([], discount=discount, tax=tax)
        purchase.discount = Decimal(str(discount or 0))
        purchase.tax = Decimal(str(tax or 0))

        _recompute_totals(purchase)
        purchase.save()
        return purchase

    return run_order_mutation(Purchase, purchase_id, _update)


def delete_purchase(*, purchase_id, user) -> None:
    def _delete(purchase: Purchase):
        process_order_lines(purchase, DELETE, user=user)
        reference = purchase.reference_number
        purchase.delete()
        return reference

    reference = run_order_mutation(Purchase, purchase_id, _delete)
    logger.info("Purchase deleted", extra={"reference": reference, "by": str(getattr(user, "pk", ""))})
