from .category import CategorySerializer
from .product import ProductSerializer, ProductSupplierLinkSerializer
from .stock_ledger import StockAdjustmentSerializer, StockLedgerEntrySerializer

__all__ = [
    "CategorySerializer",
    "ProductSerializer",
    "ProductSupplierLinkSerializer",
    "StockLedgerEntrySerializer",
    "StockAdjustmentSerializer",
]
