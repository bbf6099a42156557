"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions
for Sale entities.

    PENDING -> COMPLETED   (no stock effect)
    PENDING -> CANCELLED   (stock restored)
    COMPLETED -> CANCELLED (status only, stock untouched)

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
"""

from products.services.exceptions import InvalidStateError
from sales.models import Sale

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.Status.CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Sale.Status.PENDING: {
        Sale.Status.COMPLETED,
        Sale.Status.CANCELLED,
    },
    Sale.Status.COMPLETED: {
        Sale.Status.CANCELLED,
    },
}

INITIAL_STATES = {
    Sale.Status.PENDING,
    Sale.Status.COMPLETED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if sale.status in TERMINAL_STATES:
        raise InvalidStateError(
            f"{sale.get_status_display()} sales cannot be modified"
        )

    if not can_transition(from_status=sale.status, to_status=target_status):
        raise InvalidStateError(
            f"Sale {sale.invoice_number} cannot transition from "
            f"'{sale.status}' to '{target_status}'"
        )
