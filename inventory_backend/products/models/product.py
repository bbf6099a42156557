# products/models/product.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .category import Category


class Product(models.Model):
    """
    Represents a stocked, sellable product.

    STOCK MODEL (IMPORTANT):
    - `quantity` is the current on-hand stock and is never negative
      (DB check constraint + Stock Mutator guard).
    - `quantity` is changed ONLY by products.services.stock_mutator.apply_delta,
      which appends a StockLedgerEntry for every change.
    - Ledger history therefore always explains the current quantity.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    # Selling price
    price = models.DecimalField(max_digits=12, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    quantity = models.IntegerField(default=0)
    minimum_stock = models.PositiveIntegerField(default=10)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="products_product_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="product_quantity_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.sku:
            self.sku = self.sku.strip().upper()

        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError({"price": "Price cannot be negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError({"cost_price": "Cost price cannot be negative"})

        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": "Quantity cannot be negative"})

    def save(self, *args, **kwargs):
        if self.sku:
            self.sku = self.sku.strip().upper()
        return super().save(*args, **kwargs)

    @property
    def is_low_stock(self) -> bool:
        return int(self.quantity or 0) <= int(self.minimum_stock or 0)

    @property
    def stock_value(self) -> Decimal:
        return Decimal(self.cost_price or 0) * int(self.quantity or 0)
