# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import ProductSupplier, Purchase, PurchaseItem, Supplier


# ---------------- SUPPLIERS ----------------
class SupplierSerializer(serializers.ModelSerializer):
    purchase_count = serializers.IntegerField(read_only=True, default=0)
    product_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "is_active",
            "purchase_count",
            "product_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "purchase_count", "product_count", "created_at", "updated_at")

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name cannot be blank")
        return value


class PurchaseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Purchase
        fields = ["id", "reference_number", "date", "status", "total_amount"]
        read_only_fields = fields


class SupplierDetailSerializer(SupplierSerializer):
    recent_purchases = serializers.SerializerMethodField()

    class Meta(SupplierSerializer.Meta):
        fields = SupplierSerializer.Meta.fields + ["recent_purchases"]

    def get_recent_purchases(self, obj):
        qs = obj.purchases.order_by("-date", "-created_at")[:10]
        return PurchaseSummarySerializer(qs, many=True).data


class ProductSupplierSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    supplier_id = serializers.UUIDField(read_only=True)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    supplier_email = serializers.CharField(source="supplier.email", read_only=True)
    supplier_phone = serializers.CharField(source="supplier.phone", read_only=True)

    class Meta:
        model = ProductSupplier
        fields = [
            "id",
            "product_id",
            "supplier_id",
            "supplier_name",
            "supplier_email",
            "supplier_phone",
            "is_preferred",
            "unit_price",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


# ---------------- PURCHASES (INPUT) ----------------
class PurchaseItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class PurchaseCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    date = serializers.DateTimeField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=[Purchase.Status.PENDING, Purchase.Status.COMPLETED],
        default=Purchase.Status.PENDING,
    )
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    tax = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseItemInputSerializer(many=True, allow_empty=False)


class PurchaseUpdateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField(required=False)
    date = serializers.DateTimeField(required=False)
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    tax = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


# ---------------- PURCHASES (OUTPUT) ----------------
class PurchaseItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = PurchaseItem
        fields = ["id", "product_id", "product_name", "product_sku", "quantity", "unit_cost", "total_cost"]
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    supplier_id = serializers.UUIDField(read_only=True)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)
    items = PurchaseItemSerializer(many=True, read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "reference_number",
            "supplier_id",
            "supplier_name",
            "user_email",
            "date",
            "status",
            "discount",
            "tax",
            "subtotal_amount",
            "total_amount",
            "received_at",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
