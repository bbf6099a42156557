# backend/urls.py
"""
PROJECT URLS

Everything the frontend talks to lives under /api/:
    auth/        session login/logout, current user, JWT pair
    users/       user management
    products/    categories, products, stock ledger
    customers/   customer directory
    purchases/   suppliers and purchase orders
    sales/       sales
    reports/     dashboard summary

/api/health/ checks database connectivity. The Django admin mounts at
ADMIN_PATH (env configurable, trailing slash enforced).
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from users.urls import auth_urlpatterns

# (url prefix, urlconf) for each business module
MODULES = (
    ("users", "users.urls"),
    ("products", "products.urls"),
    ("customers", "customers.urls"),
    ("purchases", "purchases.api.urls"),
    ("sales", "sales.api.urls"),
    ("reports", "sales.api.report_urls"),
)

AUTH_ENDPOINTS = ("login", "logout", "me", "jwt/create", "jwt/refresh")


@extend_schema(responses={200: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Inventory Management API is running",
            "auth": {name.replace("/", "_"): f"/api/auth/{name}/" for name in AUTH_ENDPOINTS},
            "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
            "modules": {prefix: f"/api/{prefix}/" for prefix, _ in MODULES},
        }
    )


@extend_schema(responses={200: dict, 503: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness plus a round trip to the default database."""
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except OperationalError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)
    return Response({"status": "ok", "db": "ok"})


ADMIN_PATH = settings.ADMIN_PATH if settings.ADMIN_PATH.endswith("/") else f"{settings.ADMIN_PATH}/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/", include(auth_urlpatterns)),
    *[path(f"{prefix}/", include(urlconf)) for prefix, urlconf in MODULES],
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
