# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Staff product management endpoints (CRUD + low-stock alert)
- Product <-> supplier links (/products/products/<id>/suppliers/)

Key rules:
- quantity changes made here are written through the Stock Mutator
  (see ProductSerializer), never saved directly.
- products referenced by sale / purchase lines cannot be deleted (PROTECT -> 400).
"""

import logging

from django.db import transaction
from django.db.models import F
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasAnyCapability,
)
from products.filters import ProductFilter
from products.models import Product
from products.serializers.product import ProductSerializer, ProductSupplierLinkSerializer
from products.services.exceptions import InputValidationError, NotFoundError
from purchases.api.serializers import ProductSupplierSerializer
from purchases.models import ProductSupplier, Supplier

logger = logging.getLogger("inventory.products")

SORTABLE_FIELDS = {"name", "sku", "price", "cost_price", "quantity", "created_at", "updated_at"}


def parse_sort(raw: str, default: str = "-created_at") -> str:
    """
    `field:asc|desc` -> ORM ordering string. Unknown fields fall back to default.
    """
    raw = (raw or "").strip()
    if not raw:
        return default

    field, _, direction = raw.partition(":")
    field = field.strip()
    if field not in SORTABLE_FIELDS:
        return default

    return f"-{field}" if direction.strip().lower() == "desc" else field


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - list:      ?category_id=&search=&low_stock=true&sort=name:asc&page=&limit=
    - low-stock: active products at or below minimum_stock
    - suppliers: GET / POST / DELETE ?supplier_id=
    """

    serializer_class = ProductSerializer
    filterset_class = ProductFilter

    def get_queryset(self):
        sort = parse_sort(self.request.query_params.get("sort"))
        return Product.objects.select_related("category").order_by(sort, "id")

    def get_permissions(self):
        method = self.request.method.upper() if self.request else "GET"

        if self.action == "destroy" or (self.action == "suppliers" and method == "DELETE"):
            self.required_any_capabilities = {CAP_INVENTORY_DELETE}
        elif self.action in {"create", "update", "partial_update"} or (
            self.action == "suppliers" and method == "POST"
        ):
            self.required_any_capabilities = {CAP_INVENTORY_EDIT}
        else:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW}

        return [IsAuthenticated(), HasAnyCapability()]

    def perform_destroy(self, instance):
        product_id = str(instance.pk)
        instance.delete()
        logger.info("Product deleted", extra={"product_id": product_id, "by": str(self.request.user.pk)})

    # -----------------------------
    # Alerts: Low stock
    # -----------------------------
    @extend_schema(responses={200: ProductSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        """
        GET /products/products/low-stock/
        """
        qs = (
            Product.objects.select_related("category")
            .filter(is_active=True, quantity__lte=F("minimum_stock"))
            .order_by("quantity", "name")
        )
        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})

    # -----------------------------
    # Supplier links
    # -----------------------------
    @extend_schema(
        methods=["GET"],
        responses={200: ProductSupplierSerializer(many=True)},
        description="Suppliers linked to this product (preferred first).",
    )
    @extend_schema(
        methods=["POST"],
        request=ProductSupplierLinkSerializer,
        responses={201: ProductSupplierSerializer},
        description="Link a supplier; marking it preferred clears any other preferred link.",
    )
    @extend_schema(
        methods=["DELETE"],
        parameters=[
            OpenApiParameter("supplier_id", str, OpenApiParameter.QUERY, required=True),
        ],
        responses={204: OpenApiResponse(description="Link removed")},
    )
    @action(detail=True, methods=["get", "post", "delete"], url_path="suppliers")
    def suppliers(self, request, pk=None):
        product = self.get_object()

        if request.method == "GET":
            links = ProductSupplier.objects.filter(product=product).select_related("supplier")
            return Response(ProductSupplierSerializer(links, many=True).data)

        if request.method == "DELETE":
            supplier_id = (request.query_params.get("supplier_id") or "").strip()
            if not supplier_id:
                raise InputValidationError("supplier_id is required")

            deleted, _ = ProductSupplier.objects.filter(
                product=product, supplier_id=supplier_id
            ).delete()
            if not deleted:
                raise NotFoundError("Supplier is not linked to this product")
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = ProductSupplierLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        supplier = Supplier.objects.filter(pk=data["supplier_id"]).first()
        if supplier is None:
            raise NotFoundError("Supplier not found")

        if ProductSupplier.objects.filter(product=product, supplier=supplier).exists():
            raise InputValidationError("Supplier is already linked to this product")

        with transaction.atomic():
            if data.get("is_preferred"):
                ProductSupplier.objects.filter(product=product, is_preferred=True).update(is_preferred=False)

            link = ProductSupplier.objects.create(
                product=product,
                supplier=supplier,
                is_preferred=data.get("is_preferred", False),
                unit_price=data.get("unit_price"),
                notes=data.get("notes", ""),
            )

        return Response(ProductSupplierSerializer(link).data, status=status.HTTP_201_CREATED)
