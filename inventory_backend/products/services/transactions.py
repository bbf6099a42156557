# products/services/transactions.py

"""
TRANSACTION BOUNDARY

All-or-nothing scope around one stock-affecting order mutation.

- with_transaction(fn, ...): commit when fn returns, roll back and re-raise
  the original exception unchanged when it raises.
- run_order_mutation(model, order_id, operation): one transaction that loads
  and row-locks the order aggregate, then hands it to `operation`.

No retries. Concurrent writers are serialized by the database row locks
taken here and in the Stock Mutator.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from django.core.exceptions import ValidationError
from django.db import transaction

from products.services.exceptions import InventoryServiceError, NotFoundError

logger = logging.getLogger("inventory.transactions")

T = TypeVar("T")


def with_transaction(fn: Callable[..., T], *args, using: Optional[str] = None, **kwargs) -> T:
    try:
        with transaction.atomic(using=using):
            return fn(*args, **kwargs)
    except (InventoryServiceError, ValidationError) as exc:
        logger.warning(
            "Transaction rolled back",
            extra={
                "operation": getattr(fn, "__name__", repr(fn)),
                "error": exc.__class__.__name__,
                "detail": str(exc),
            },
        )
        raise
    except Exception:
        logger.exception(
            "Transaction rolled back after unexpected error",
            extra={"operation": getattr(fn, "__name__", repr(fn))},
        )
        raise


def _load_locked(model, order_id, using):
    manager = model._default_manager.db_manager(using) if using else model._default_manager
    try:
        return manager.select_for_update().get(pk=order_id)
    except (model.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"{model._meta.verbose_name.capitalize()} not found")


def run_order_mutation(
    model,
    order_id,
    operation: Callable[[Any], T],
    *,
    using: Optional[str] = None,
) -> T:
    """
    Load + lock the order, run `operation(order)`, commit.

    `operation` mutates the aggregate and calls the Order Line Processor;
    any exception it raises rolls back every write made in this scope.
    """

    def _mutate():
        order = _load_locked(model, order_id, using)
        return operation(order)

    _mutate.__name__ = f"{model.__name__.lower()}_mutation"
    return with_transaction(_mutate, using=using)
