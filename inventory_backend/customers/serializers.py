# customers/serializers.py

from rest_framework import serializers

from customers.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    sale_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "house_number",
            "road",
            "city",
            "state",
            "postal_code",
            "country",
            "notes",
            "sale_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "sale_count", "created_at", "updated_at"]
        # uniqueness is checked in validate_email (case-insensitive, blank allowed)
        validators = []

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name cannot be blank")
        return value

    def validate_email(self, value):
        value = (value or "").strip().lower()
        if not value:
            return ""

        qs = Customer.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A customer with this email already exists")
        return value


class CustomerSaleSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    invoice_number = serializers.CharField()
    date = serializers.DateTimeField()
    status = serializers.CharField()
    payment_method = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class CustomerDetailSerializer(CustomerSerializer):
    sales = serializers.SerializerMethodField()

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + ["sales"]

    def get_sales(self, obj):
        qs = obj.sales.order_by("-date")
        return CustomerSaleSerializer(qs, many=True).data
