from .sale import SaleCreateSerializer, SaleSerializer, SaleUpdateSerializer
from .sale_item import SaleItemInputSerializer, SaleItemSerializer

__all__ = [
    "SaleSerializer",
    "SaleCreateSerializer",
    "SaleUpdateSerializer",
    "SaleItemSerializer",
    "SaleItemInputSerializer",
]
