# customers/views.py

"""
CUSTOMER ENDPOINTS

- any staff role may list / create / update / delete
- list: ?query=<name|email|phone>&page=&limit=
- retrieve: includes sales history (newest first)
- delete: blocked while sales reference the customer
"""

import logging

from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from customers.models import Customer
from customers.serializers import CustomerDetailSerializer, CustomerSerializer
from permissions.roles import CAP_CUSTOMERS_MANAGE, HasAnyCapability
from products.services.exceptions import InvalidStateError

logger = logging.getLogger("inventory.customers")


class CustomerViewSet(viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    required_any_capabilities = {CAP_CUSTOMERS_MANAGE}
    permission_classes = [IsAuthenticated, HasAnyCapability]

    def get_queryset(self):
        qs = Customer.objects.annotate(sale_count=Count("sales"))

        query = (self.request.query_params.get("query") or "").strip()
        if query:
            qs = qs.filter(
                Q(name__icontains=query) | Q(email__icontains=query) | Q(phone__icontains=query)
            )
        return qs.order_by("name", "id")

    def get_serializer_class(self):
        if self.action == "retrieve":
            return CustomerDetailSerializer
        return CustomerSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("query", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        if customer.sales.exists():
            raise InvalidStateError("Cannot delete a customer with existing sales")

        customer_id = str(customer.pk)
        customer.delete()
        logger.info("Customer deleted", extra={"customer_id": customer_id, "by": str(request.user.pk)})
        return Response(status=status.HTTP_204_NO_CONTENT)
