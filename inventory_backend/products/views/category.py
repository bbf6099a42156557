# products/views/category.py

from django.db.models import Count
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_INVENTORY_DELETE, CAP_INVENTORY_EDIT, HasAnyCapability, IsStaff
from products.models import Category
from products.serializers.category import CategorySerializer


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Category API

    Policy:
    - Any authenticated user can READ categories (needed for product forms)
    - admin / manager can CREATE / UPDATE
    - only admin can DELETE (products keep their row; category is set to NULL)
    """

    serializer_class = CategorySerializer
    pagination_class = None

    def get_queryset(self):
        return Category.objects.annotate(product_count=Count("products")).order_by("name")

    def get_permissions(self):
        # every staff role reads categories (product form dropdown)
        if self.action in {"list", "retrieve"}:
            return [IsAuthenticated(), IsStaff()]

        if self.action == "destroy":
            self.required_any_capabilities = {CAP_INVENTORY_DELETE}
        else:
            self.required_any_capabilities = {CAP_INVENTORY_EDIT}
        return [IsAuthenticated(), HasAnyCapability()]
