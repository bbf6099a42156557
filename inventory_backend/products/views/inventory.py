# products/views/inventory.py

"""
INVENTORY LEDGER ENDPOINTS

- GET  /products/inventory/          ledger history (?product_id=&type=&reference=&limit=)
- POST /products/inventory/adjust/   manual ADJUSTMENT / RETURN (admin / manager)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import CAP_INVENTORY_ADJUST, CAP_INVENTORY_VIEW, HasAnyCapability
from products.filters import StockLedgerFilter
from products.models import StockLedgerEntry
from products.serializers.product import ProductSerializer
from products.serializers.stock_ledger import StockAdjustmentSerializer, StockLedgerEntrySerializer
from products.services.adjustments import adjust_stock


class InventoryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = StockLedgerEntrySerializer
    filterset_class = StockLedgerFilter

    def get_queryset(self):
        return StockLedgerEntry.objects.select_related("product", "performed_by").order_by(
            "-created_at"
        )

    def get_permissions(self):
        if self.action == "adjust":
            self.required_any_capabilities = {CAP_INVENTORY_ADJUST}
        else:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW}
        return [IsAuthenticated(), HasAnyCapability()]

    @extend_schema(
        request=StockAdjustmentSerializer,
        responses={201: ProductSerializer},
        description="Apply a manual stock adjustment. Negative quantities remove stock.",
    )
    @action(detail=False, methods=["post"], url_path="adjust")
    def adjust(self, request):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = adjust_stock(
            product_id=data["product_id"],
            delta=data["quantity"],
            entry_type=data["type"],
            reference=data.get("reference", ""),
            notes=data.get("notes", ""),
            user=request.user,
        )

        return Response(
            ProductSerializer(product, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )
