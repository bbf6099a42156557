# purchases/models.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models import Product

User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master.

    Deletion is blocked while purchases reference the supplier (PROTECT).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="purchases_supplier_name_idx"),
            models.Index(fields=["is_active"], name="purchases_supplier_active_idx"),
        ]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "Supplier name is required"})

    def __str__(self):
        return self.name


class ProductSupplier(models.Model):
    """
    Product <-> supplier link.

    Rules:
    - one row per (product, supplier)
    - at most one preferred supplier per product
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="supplier_links",
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.CASCADE,
        related_name="product_links",
    )

    is_preferred = models.BooleanField(default=False)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_preferred", "supplier__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "supplier"],
                name="uniq_product_supplier",
            ),
            models.UniqueConstraint(
                fields=["product"],
                condition=models.Q(is_preferred=True),
                name="uniq_preferred_supplier_per_product",
            ),
        ]

    def __str__(self):
        return f"{self.product_id} <- {self.supplier_id}"


class Purchase(models.Model):
    """
    Purchase order header.

    Stock is added ONLY when the purchase is received (PENDING -> COMPLETED),
    through the Order Line Processor (RECEIVE).
    """

    ORDER_KIND = "purchase"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    reference_number = models.CharField(max_length=32, unique=True)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases",
    )

    date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    # percentages
    discount = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))

    subtotal_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    received_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="purchase_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "date"], name="purchase_status_date_idx"),
        ]

    def clean(self):
        if self.status == self.Status.COMPLETED and not self.received_at:
            raise ValidationError({"received_at": "received_at is required when status is COMPLETED"})

        if self.status == self.Status.CANCELLED and self.received_at:
            raise ValidationError({"received_at": "received_at must be empty when status is CANCELLED"})

    def __str__(self):
        return f"{self.reference_number} ({self.supplier.name})"


class PurchaseItem(models.Model):
    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_items",
    )

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="purchase_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        self.total_cost = (Decimal(self.unit_cost or 0) * int(self.quantity or 0)).quantize(Decimal("0.01"))
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} x {self.quantity}"
