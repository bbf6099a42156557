# sales/api/urls.py

"""
SALES API URLS

    /api/sales/                 list + create
    /api/sales/<uuid>/          retrieve / update / delete
    /api/sales/<uuid>/cancel/   cancel a PENDING sale
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
