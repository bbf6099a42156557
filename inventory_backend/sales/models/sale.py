# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Sale order header.

    GUARANTEES:
    - Stock is mutated ONLY through the Order Line Processor
      (CREATE deducts, CANCEL / DELETE of a PENDING sale restore)
    - COMPLETED and CANCELLED sales are frozen: the service layer rejects
      every modification (InvalidStateError); the one exception is
      COMPLETED -> CANCELLED, a status-only change with no stock effect
    - subtotal_amount / total_amount are always recomputed from the items
    """

    ORDER_KIND = "sale"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    class PaymentMethod(models.TextChoices):
        CASH = "CASH", "Cash"
        CARD = "CARD", "Card"
        BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
        MOBILE = "MOBILE", "Mobile payment"
        OTHER = "OTHER", "Other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_number = models.CharField(
        max_length=32,
        unique=True,
        help_text="System-generated sequential invoice number (INV-00001)",
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales",
        help_text="Staff member who recorded the sale",
    )

    date = models.DateTimeField(default=timezone.now)

    payment_method = models.CharField(
        max_length=32,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )

    # percentages
    discount = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))

    subtotal_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="sale_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "date"], name="sale_status_date_idx"),
            models.Index(fields=["date"], name="sale_date_idx"),
        ]

    @property
    def is_frozen(self) -> bool:
        return self.status in {self.Status.COMPLETED, self.Status.CANCELLED}

    def __str__(self):
        return f"{self.invoice_number} | {self.total_amount}"
