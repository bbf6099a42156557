# purchases/api/views.py

"""
SUPPLIER + PURCHASE ENDPOINTS

Permissions:
- suppliers: read any staff, write admin / manager, delete admin
  (blocked while purchases reference the supplier)
- purchases: admin / manager; delete admin
"""

from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_PURCHASES_DELETE,
    CAP_PURCHASES_MANAGE,
    CAP_SUPPLIERS_DELETE,
    CAP_SUPPLIERS_EDIT,
    HasAnyCapability,
)
from products.services.exceptions import InvalidStateError
from purchases.api.serializers import (
    PurchaseCreateSerializer,
    PurchaseSerializer,
    PurchaseUpdateSerializer,
    SupplierDetailSerializer,
    SupplierSerializer,
)
from purchases.models import Purchase, Supplier
from purchases.services.purchase_service import (
    cancel_purchase,
    create_purchase,
    delete_purchase,
    receive_purchase,
    update_purchase,
)

SUPPLIER_SORT_FIELDS = {"name", "created_at", "purchase_count"}


class SupplierViewSet(viewsets.ModelViewSet):
    """
    - list: ?search=&sort=name:asc|desc&page=&limit=
    - retrieve: includes the last 10 purchases
    """

    serializer_class = SupplierSerializer

    def get_queryset(self):
        qs = Supplier.objects.annotate(
            purchase_count=Count("purchases", distinct=True),
            product_count=Count("product_links", distinct=True),
        )

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(email__icontains=search))

        field, _, direction = (self.request.query_params.get("sort") or "name:asc").partition(":")
        field = field.strip() if field.strip() in SUPPLIER_SORT_FIELDS else "name"
        ordering = f"-{field}" if direction.strip().lower() == "desc" else field
        return qs.order_by(ordering, "id")

    def get_serializer_class(self):
        if self.action == "retrieve":
            return SupplierDetailSerializer
        return SupplierSerializer

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            self.required_any_capabilities = {CAP_INVENTORY_VIEW}
        elif self.action == "destroy":
            self.required_any_capabilities = {CAP_SUPPLIERS_DELETE}
        else:
            self.required_any_capabilities = {CAP_SUPPLIERS_EDIT}
        return [IsAuthenticated(), HasAnyCapability()]

    def destroy(self, request, *args, **kwargs):
        supplier = self.get_object()
        if supplier.purchases.exists():
            raise InvalidStateError("Cannot delete a supplier with existing purchases")
        supplier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class PurchaseViewSet(viewsets.ModelViewSet):
    serializer_class = PurchaseSerializer
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def _base_queryset(self):
        return Purchase.objects.select_related("supplier", "user").prefetch_related("items", "items__product")

    def get_queryset(self):
        qs = self._base_queryset()

        status_param = (self.request.query_params.get("status") or "").strip().upper()
        if status_param:
            qs = qs.filter(status=status_param)

        supplier_id = (self.request.query_params.get("supplier_id") or "").strip()
        if supplier_id:
            qs = qs.filter(supplier_id=supplier_id)

        return qs.order_by("-date", "-created_at")

    def get_permissions(self):
        if self.action == "destroy":
            self.required_any_capabilities = {CAP_PURCHASES_DELETE}
        else:
            self.required_any_capabilities = {CAP_PURCHASES_MANAGE}
        return [IsAuthenticated(), HasAnyCapability()]

    def _respond(self, purchase, status_code=status.HTTP_200_OK):
        purchase = self._base_queryset().get(pk=purchase.pk)
        return Response(PurchaseSerializer(purchase).data, status=status_code)

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("supplier_id", str, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=PurchaseCreateSerializer, responses={201: PurchaseSerializer})
    def create(self, request, *args, **kwargs):
        s = PurchaseCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        purchase = create_purchase(
            user=request.user,
            supplier_id=data["supplier_id"],
            items=[dict(item) for item in data["items"]],
            date=data.get("date"),
            status=data["status"],
            discount=data["discount"],
            tax=data["tax"],
            notes=data.get("notes", ""),
        )
        return self._respond(purchase, status.HTTP_201_CREATED)

    @extend_schema(request=PurchaseUpdateSerializer, responses={200: PurchaseSerializer})
    def update(self, request, *args, **kwargs):
        kwargs.pop("partial", None)
        s = PurchaseUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        purchase = update_purchase(
            purchase_id=kwargs["pk"],
            user=request.user,
            data=dict(s.validated_data),
        )
        return self._respond(purchase)

    def destroy(self, request, *args, **kwargs):
        delete_purchase(purchase_id=kwargs["pk"], user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: PurchaseSerializer})
    @action(detail=True, methods=["post"], url_path="receive")
    def receive(self, request, pk=None):
        return self._respond(receive_purchase(purchase_id=pk, user=request.user))

    @extend_schema(request=None, responses={200: PurchaseSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        return self._respond(cancel_purchase(purchase_id=pk, user=request.user))
