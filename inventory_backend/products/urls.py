# products/urls.py

"""
PRODUCTS URLS

Registers product domain routes under /api/products/:
    categories/
    products/                     (+ low-stock/, <id>/suppliers/)
    inventory/                    (+ adjust/)
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import CategoryViewSet, InventoryViewSet, ProductViewSet

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"inventory", InventoryViewSet, basename="inventory")

urlpatterns = [
    path("", include(router.urls)),
]
