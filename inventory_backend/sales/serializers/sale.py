# sales/serializers/sale.py

"""
SALE SERIALIZERS

Read:   SaleSerializer (header + items + computed amounts)
Write:  SaleCreateSerializer / SaleUpdateSerializer (input only; the
        service layer performs every write)
"""

from rest_framework import serializers

from sales.models import Sale
from sales.serializers.sale_item import SaleItemInputSerializer, SaleItemSerializer


class SaleSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)
    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)
    items = SaleItemSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_number",
            "customer_id",
            "customer_name",
            "user_id",
            "user_email",
            "date",
            "payment_method",
            "status",
            "discount",
            "tax",
            "subtotal_amount",
            "total_amount",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class NewCustomerSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=50)
    address = serializers.CharField(required=False, allow_blank=True)


class SaleCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    new_customer = NewCustomerSerializer(required=False, allow_null=True)
    date = serializers.DateTimeField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(
        choices=Sale.PaymentMethod.choices,
        default=Sale.PaymentMethod.CASH,
    )
    status = serializers.ChoiceField(
        choices=[Sale.Status.PENDING, Sale.Status.COMPLETED],
        default=Sale.Status.PENDING,
    )
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    tax = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = SaleItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs.get("customer_id") and attrs.get("new_customer"):
            raise serializers.ValidationError("Provide either customer_id or new_customer, not both")
        return attrs


class SaleUpdateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    date = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(choices=Sale.PaymentMethod.choices, required=False)
    status = serializers.ChoiceField(choices=Sale.Status.choices, required=False)
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    tax = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
