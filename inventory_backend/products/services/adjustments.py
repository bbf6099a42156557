# products/services/adjustments.py

"""
MANUAL STOCK ADJUSTMENTS

Purpose:
- Controlled, audited quantity changes outside of orders
  (stock counts, damages, customer returns, initial stock, admin edits).

Rules:
- only ADJUSTMENT and RETURN entry types (SALE / PURCHASE belong to orders)
- goes through the Stock Mutator inside its own Transaction Boundary
"""

from __future__ import annotations

from products.models import Product, StockLedgerEntry
from products.services.exceptions import InputValidationError
from products.services.stock_mutator import apply_delta
from products.services.transactions import with_transaction

MANUAL_ENTRY_TYPES = {
    StockLedgerEntry.EntryType.ADJUSTMENT,
    StockLedgerEntry.EntryType.RETURN,
}

INITIAL_STOCK_REFERENCE = "INITIAL-STOCK"
PRODUCT_EDIT_REFERENCE = "PRODUCT-EDIT"


def adjust_stock(
    *,
    product_id,
    delta,
    entry_type: str = StockLedgerEntry.EntryType.ADJUSTMENT,
    reference: str = "",
    notes: str = "",
    user=None,
) -> Product:
    if entry_type not in MANUAL_ENTRY_TYPES:
        raise InputValidationError("Manual adjustments must be of type ADJUSTMENT or RETURN")

    return with_transaction(
        apply_delta,
        product_id=product_id,
        delta=delta,
        entry_type=entry_type,
        reference=reference or "MANUAL",
        notes=notes,
        user=user,
    )


def set_stock_level(*, product_id, quantity: int, reference: str, notes: str = "", user=None):
    """
    Move a product to an absolute quantity by appending the difference.

    Used for initial stock on create and admin quantity edits so the ledger
    always sums to the current quantity. No-op when already at `quantity`.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InputValidationError("quantity must be a non-negative integer")

    def _set():
        current = Product.objects.select_for_update().values_list("quantity", flat=True).get(pk=product_id)
        delta = quantity - int(current or 0)
        if delta == 0:
            return Product.objects.get(pk=product_id)
        return apply_delta(
            product_id=product_id,
            delta=delta,
            entry_type=StockLedgerEntry.EntryType.ADJUSTMENT,
            reference=reference,
            notes=notes,
            user=user,
        )

    return with_transaction(_set)
