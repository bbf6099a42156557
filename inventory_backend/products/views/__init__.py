# products/views/__init__.py

"""
Products views package exports (router imports).
"""

from .category import CategoryViewSet
from .inventory import InventoryViewSet
from .product import ProductViewSet

__all__ = [
    "CategoryViewSet",
    "InventoryViewSet",
    "ProductViewSet",
]
