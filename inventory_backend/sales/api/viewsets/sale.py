# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Sales history (list + retrieve) with filters and page/limit pagination
- Create / update / cancel / delete sales through the sale service

Security:
- list / retrieve / create / update / cancel: any staff role (sales.create)
- delete: admin, manager, or the staff member who recorded the sale

State rules (enforced by the service, surfaced as 400):
- COMPLETED and CANCELLED sales cannot be modified
- COMPLETED sales cannot be deleted
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_SALES_CREATE,
    HasAnyCapability,
    IsOwnerOrAdminOrManager,
)
from sales.filters import SaleFilter
from sales.models import Sale
from sales.serializers.sale import SaleCreateSerializer, SaleSerializer, SaleUpdateSerializer
from sales.services.sale_service import cancel_sale, create_sale, delete_sale, update_sale


class SaleViewSet(viewsets.ModelViewSet):
    serializer_class = SaleSerializer
    filterset_class = SaleFilter

    def _base_queryset(self):
        return Sale.objects.select_related("customer", "user").prefetch_related(
            "items", "items__product"
        )

    def get_queryset(self):
        return self._base_queryset().order_by("-date", "-created_at")

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAuthenticated(), IsOwnerOrAdminOrManager()]

        self.required_any_capabilities = {CAP_SALES_CREATE}
        return [IsAuthenticated(), HasAnyCapability()]

    def _respond(self, sale, status_code=status.HTTP_200_OK):
        sale = self._base_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale).data, status=status_code)

    @extend_schema(
        parameters=[
            OpenApiParameter("query", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date", str, OpenApiParameter.QUERY, required=False, description="YYYY-MM-DD"),
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=SaleCreateSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        s = SaleCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        new_customer = data.get("new_customer")
        sale = create_sale(
            user=request.user,
            items=[dict(item) for item in data["items"]],
            customer_id=data.get("customer_id"),
            new_customer=dict(new_customer) if new_customer else None,
            date=data.get("date"),
            payment_method=data["payment_method"],
            status=data["status"],
            discount=data["discount"],
            tax=data["tax"],
            notes=data.get("notes", ""),
        )
        return self._respond(sale, status.HTTP_201_CREATED)

    @extend_schema(request=SaleUpdateSerializer, responses={200: SaleSerializer})
    def update(self, request, *args, **kwargs):
        kwargs.pop("partial", None)
        s = SaleUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        sale = update_sale(sale_id=kwargs["pk"], user=request.user, data=dict(s.validated_data))
        return self._respond(sale)

    def destroy(self, request, *args, **kwargs):
        # object-level permission (owner / admin / manager) runs in get_object
        sale = self.get_object()
        delete_sale(sale_id=sale.pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: SaleSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        return self._respond(cancel_sale(sale_id=pk, user=request.user))
