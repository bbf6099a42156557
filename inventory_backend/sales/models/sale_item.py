# sales/models/sale_item.py

"""
SALE ITEM

Price snapshot of one sold line. Lines are written once, at sale creation.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    # PROTECT: products with sales history cannot be deleted
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    price = models.DecimalField(max_digits=12, decimal_places=2)

    total_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        editable=False,
        default=Decimal("0.00"),
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="sale_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        self.total_price = (Decimal(self.price or 0) * int(self.quantity or 0)).quantize(Decimal("0.01"))
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} x {self.quantity} @ {self.price}"
