# products/services/order_lines.py

"""
ORDER LINE PROCESSOR

Turns an order lifecycle transition into the ordered list of Stock Mutator
calls, then executes them.

Transitions:
- CREATE   sale: -qty per line (SALE)          purchase: nothing
- CANCEL   sale: +qty per line (ADJUSTMENT)    purchase: nothing
- DELETE   sale: +qty per line (ADJUSTMENT)    purchase: nothing
- RECEIVE  sale: not allowed                   purchase: +qty per line (PURCHASE)

State rules:
- COMPLETED orders reject every transition (InvalidStateError) before any
  stock is touched. Creating a sale directly as COMPLETED is the one CREATE
  exception: the deduction happens at creation. Cancelling a COMPLETED sale
  is allowed as a status change only and yields nothing.
- CANCELLED sales yield nothing on CANCEL/DELETE: stock was either restored
  at cancellation or kept because the sale had completed.
- RECEIVE requires a PENDING purchase.

Lines are processed in stored order (line id ascending).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from products.models import StockLedgerEntry
from products.services.exceptions import InputValidationError, InvalidStateError
from products.services.stock_mutator import apply_delta

logger = logging.getLogger("inventory.orders")

CREATE = "CREATE"
CANCEL = "CANCEL"
DELETE = "DELETE"
RECEIVE = "RECEIVE"

TRANSITIONS = {CREATE, CANCEL, DELETE, RECEIVE}

ORDER_SALE = "sale"
ORDER_PURCHASE = "purchase"

STATUS_PENDING = "PENDING"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"

WALK_IN_CUSTOMER = "Walk-in customer"

MONEY = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class StockDelta:
    product_id: object
    delta: int
    entry_type: str
    reference: str
    notes: str = ""


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal


# ============================================================
# PLANNING (pure)
# ============================================================
def _order_kind(order) -> str:
    kind = getattr(order, "ORDER_KIND", None)
    if kind not in {ORDER_SALE, ORDER_PURCHASE}:
        raise InputValidationError(f"Unsupported order type: {order.__class__.__name__}")
    return kind


def _lines(order):
    return list(order.items.all().order_by("id"))


def _sale_deltas(sale, transition) -> list[StockDelta]:
    status = sale.status
    invoice = sale.invoice_number

    if transition == RECEIVE:
        raise InputValidationError("Only purchases can be received")

    if transition == CREATE:
        if status == STATUS_CANCELLED:
            raise InvalidStateError("Cannot create a sale in CANCELLED state")
        customer = getattr(sale, "customer", None)
        notes = f"Sale to {customer.name if customer else WALK_IN_CUSTOMER}"
        return [
            StockDelta(
                product_id=line.product_id,
                delta=-int(line.quantity),
                entry_type=StockLedgerEntry.EntryType.SALE,
                reference=invoice,
                notes=notes,
            )
            for line in _lines(sale)
        ]

    if status == STATUS_COMPLETED:
        if transition == CANCEL:
            # stock effects of a completed sale are final
            return []
        raise InvalidStateError("Completed sales cannot be modified")

    if status == STATUS_CANCELLED:
        # settled at cancellation
        return []

    if transition == CANCEL:
        reference, notes = f"CANCEL-{invoice}", "Restored due to sale cancellation"
    else:
        reference, notes = f"DELETE-{invoice}", "Restored due to sale deletion"

    return [
        StockDelta(
            product_id=line.product_id,
            delta=int(line.quantity),
            entry_type=StockLedgerEntry.EntryType.ADJUSTMENT,
            reference=reference,
            notes=notes,
        )
        for line in _lines(sale)
    ]


def _purchase_deltas(purchase, transition) -> list[StockDelta]:
    status = purchase.status

    if transition == CREATE:
        return []

    if status == STATUS_COMPLETED:
        raise InvalidStateError("Completed purchases cannot be modified")

    if transition in {CANCEL, DELETE}:
        # nothing was received, nothing to reverse
        return []

    if status != STATUS_PENDING:
        raise InvalidStateError(f"Cannot receive a purchase in {status} state")

    supplier = getattr(purchase, "supplier", None)
    notes = f"Received from {supplier.name}" if supplier else "Received"
    return [
        StockDelta(
            product_id=line.product_id,
            delta=int(line.quantity),
            entry_type=StockLedgerEntry.EntryType.PURCHASE,
            reference=purchase.reference_number,
            notes=notes,
        )
        for line in _lines(purchase)
    ]


def plan_stock_deltas(order, transition: str) -> list[StockDelta]:
    """
    Ordered Stock Mutator calls for `transition` on `order`.

    Raises InvalidStateError / InputValidationError; never writes.
    """
    if transition not in TRANSITIONS:
        raise InputValidationError(f"Unknown order transition: {transition}")

    if _order_kind(order) == ORDER_SALE:
        return _sale_deltas(order, transition)
    return _purchase_deltas(order, transition)


# ============================================================
# EXECUTION
# ============================================================
def process_order_lines(order, transition: str, user=None) -> list:
    """
    Execute the planned deltas through the Stock Mutator.

    Must run inside a Transaction Boundary: a failure on line N leaves
    lines 1..N-1 applied until the enclosing transaction rolls back.
    """
    deltas = plan_stock_deltas(order, transition)

    updated = [
        apply_delta(
            product_id=d.product_id,
            delta=d.delta,
            entry_type=d.entry_type,
            reference=d.reference,
            notes=d.notes,
            user=user,
        )
        for d in deltas
    ]

    if deltas:
        logger.info(
            "Order lines processed",
            extra={
                "order_id": str(order.pk),
                "order_kind": _order_kind(order),
                "transition": transition,
                "lines": len(deltas),
            },
        )

    return updated


# ============================================================
# TOTALS
# ============================================================
def _to_percent(value, field: str) -> Decimal:
    try:
        pct = Decimal(str(value if value not in (None, "") else 0))
    except (InvalidOperation, ValueError):
        raise InputValidationError(f"{field} must be a number")

    if pct < 0 or pct > HUNDRED:
        raise InputValidationError(f"{field} must be between 0 and 100")
    return pct


def compute_totals(lines: Iterable, discount=0, tax=0) -> OrderTotals:
    """
    lines: iterable of (quantity, unit_price) pairs.

    discount and tax are percentages; tax applies to the discounted subtotal.
    """
    discount_pct = _to_percent(discount, "discount")
    tax_pct = _to_percent(tax, "tax")

    subtotal = Decimal("0.00")
    for quantity, unit_price in lines:
        subtotal += Decimal(int(quantity)) * Decimal(str(unit_price))
    subtotal = subtotal.quantize(MONEY, rounding=ROUND_HALF_UP)

    discount_amount = (subtotal * discount_pct / HUNDRED).quantize(MONEY, rounding=ROUND_HALF_UP)
    taxable = subtotal - discount_amount
    tax_amount = (taxable * tax_pct / HUNDRED).quantize(MONEY, rounding=ROUND_HALF_UP)

    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=(taxable + tax_amount).quantize(MONEY, rounding=ROUND_HALF_UP),
    )
