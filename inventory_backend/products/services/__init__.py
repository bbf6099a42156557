from .adjustments import adjust_stock, set_stock_level
from .order_lines import compute_totals, plan_stock_deltas, process_order_lines
from .stock_mutator import apply_delta
from .transactions import run_order_mutation, with_transaction

__all__ = [
    "apply_delta",
    "adjust_stock",
    "set_stock_level",
    "plan_stock_deltas",
    "process_order_lines",
    "compute_totals",
    "with_transaction",
    "run_order_mutation",
]
