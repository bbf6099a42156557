# products/models/stock_ledger.py

"""
STOCK LEDGER

Immutable record of one stock quantity change.

GUARANTEES:
- Append-only (no updates, no deletes)
- A product with ledger history cannot be deleted (PROTECT); retire it
  through is_active instead
- quantity is a signed, non-zero delta
- Written ONLY by the Stock Mutator, in the same transaction as the
  Product.quantity change it explains
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockLedgerEntry(models.Model):
    class EntryType(models.TextChoices):
        SALE = "SALE", "Sale"
        PURCHASE = "PURCHASE", "Purchase"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"
        RETURN = "RETURN", "Return"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )

    # signed delta: negative removes stock, positive adds it
    quantity = models.IntegerField()
    type = models.CharField(max_length=20, choices=EntryType.choices)
    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "stock ledger entries"
        indexes = [
            models.Index(fields=["product", "created_at"], name="ledger_product_created_idx"),
            models.Index(fields=["type"], name="ledger_type_idx"),
            models.Index(fields=["reference"], name="ledger_reference_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError({"quantity": "quantity must be a non-zero integer"})

        if self.type not in self.EntryType.values:
            raise ValidationError({"type": f"Unknown ledger entry type: {self.type}"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Stock ledger entries are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Stock ledger entries are immutable and cannot be deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.type} | {self.quantity:+d}"
