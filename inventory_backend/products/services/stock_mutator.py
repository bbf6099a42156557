# products/services/stock_mutator.py

"""
STOCK MUTATOR

The ONLY sanctioned path for changing Product.quantity.

Rules:
- delta must be a non-zero integer (bool rejected)
- entry_type must be a known ledger type
- the product row is locked (select_for_update) before reading quantity
- a result below zero raises InsufficientStockError and changes nothing
- exactly one StockLedgerEntry is appended per successful call

Runs under transaction.atomic, so it joins the caller's transaction
(Transaction Boundary) and rolls back with it.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from products.models import Product, StockLedgerEntry
from products.services.exceptions import (
    InputValidationError,
    InsufficientStockError,
    NotFoundError,
)

logger = logging.getLogger("inventory.stock")


def _to_int_delta(value) -> int:
    if value is None or value == "":
        raise InputValidationError("delta is required")

    if isinstance(value, bool):
        # bool is an int subclass in Python
        raise InputValidationError("delta must be an integer")

    if isinstance(value, int):
        delta = value
    elif isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        delta = int(value.strip())
    else:
        raise InputValidationError("delta must be an integer")

    if delta == 0:
        raise InputValidationError("delta cannot be 0")

    return delta


def _validate_entry_type(entry_type) -> str:
    if entry_type not in StockLedgerEntry.EntryType.values:
        raise InputValidationError(f"Unknown stock entry type: {entry_type}")
    return entry_type


@transaction.atomic
def apply_delta(
    *,
    product_id,
    delta,
    entry_type: str,
    reference: str,
    notes: str = "",
    user=None,
) -> Product:
    """
    Apply a signed quantity change to one product and record it.

    Returns the updated (locked, saved) Product.
    """
    delta = _to_int_delta(delta)
    entry_type = _validate_entry_type(entry_type)

    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"Product not found: {product_id}")

    current = int(product.quantity or 0)
    new_quantity = current + delta

    if new_quantity < 0:
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}. Available: {current}, requested: {abs(delta)}",
            product_id=product.pk,
            available=current,
            requested=abs(delta),
        )

    product.quantity = new_quantity
    product.save(update_fields=["quantity", "updated_at"])

    StockLedgerEntry.objects.create(
        product=product,
        quantity=delta,
        type=entry_type,
        reference=reference or "",
        notes=notes or "",
        performed_by=user if getattr(user, "is_authenticated", False) else None,
    )

    logger.info(
        "Stock updated",
        extra={
            "product_id": str(product.pk),
            "delta": delta,
            "entry_type": entry_type,
            "reference": reference,
            "quantity": new_quantity,
        },
    )

    return product
