# products/serializers/product.py

"""
PRODUCT SERIALIZER

- `quantity` is accepted on write but never saved directly: create/update
  route it through set_stock_level so a ledger entry explains every change
  (INITIAL-STOCK on create, PRODUCT-EDIT on update).
- `is_low_stock` is derived (quantity <= minimum_stock).
"""

from django.db import transaction
from rest_framework import serializers

from products.models import Category, Product
from products.services.adjustments import (
    INITIAL_STOCK_REFERENCE,
    PRODUCT_EDIT_REFERENCE,
    set_stock_level,
)


class ProductSerializer(serializers.ModelSerializer):
    category_id = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    owner_id = serializers.UUIDField(read_only=True)

    quantity = serializers.IntegerField(required=False, min_value=0)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "price",
            "cost_price",
            "quantity",
            "minimum_stock",
            "is_low_stock",
            "category_id",
            "category_name",
            "owner_id",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "category_name",
            "owner_id",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")

        qs = Product.objects.filter(sku__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A product with this SKU already exists")
        return value

    def validate_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Price must be non-negative")
        return value

    def validate_cost_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Cost price must be non-negative")
        return value

    def _acting_user(self):
        request = self.context.get("request")
        return getattr(request, "user", None)

    @transaction.atomic
    def create(self, validated_data):
        quantity = validated_data.pop("quantity", 0) or 0
        user = self._acting_user()
        if getattr(user, "is_authenticated", False):
            validated_data.setdefault("owner", user)

        product = Product.objects.create(quantity=0, **validated_data)

        if quantity:
            product = set_stock_level(
                product_id=product.pk,
                quantity=quantity,
                reference=INITIAL_STOCK_REFERENCE,
                notes="Initial stock on product creation",
                user=user,
            )
        return product

    @transaction.atomic
    def update(self, instance, validated_data):
        quantity = validated_data.pop("quantity", None)

        # never write back a stale quantity
        locked = Product.objects.select_for_update().get(pk=instance.pk)
        instance.quantity = locked.quantity
        instance = super().update(instance, validated_data)

        if quantity is not None and quantity != instance.quantity:
            instance = set_stock_level(
                product_id=instance.pk,
                quantity=quantity,
                reference=PRODUCT_EDIT_REFERENCE,
                notes="Quantity edited on product",
                user=self._acting_user(),
            )
        return instance


class ProductSupplierLinkSerializer(serializers.Serializer):
    """Input for POST /products/products/<id>/suppliers/."""

    supplier_id = serializers.UUIDField()
    is_preferred = serializers.BooleanField(required=False, default=False)
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
        min_value=0,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
