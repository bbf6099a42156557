# products/serializers/stock_ledger.py

from rest_framework import serializers

from products.models import StockLedgerEntry


class StockLedgerEntrySerializer(serializers.ModelSerializer):
    """Read-only ledger row."""

    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    performed_by_email = serializers.EmailField(source="performed_by.email", read_only=True, default=None)

    class Meta:
        model = StockLedgerEntry
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "quantity",
            "type",
            "reference",
            "notes",
            "performed_by_email",
            "created_at",
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    """Input for POST /products/inventory/adjust/."""

    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    type = serializers.ChoiceField(
        choices=[
            StockLedgerEntry.EntryType.ADJUSTMENT,
            StockLedgerEntry.EntryType.RETURN,
        ],
        default=StockLedgerEntry.EntryType.ADJUSTMENT,
    )
    reference = serializers.CharField(required=False, allow_blank=True, max_length=100, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity cannot be 0")
        return value
