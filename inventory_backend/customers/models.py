# customers/models.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Customer(models.Model):
    """
    Buyer record referenced by sales.

    - email is optional but unique when present (stored lower-cased)
    - structured address fields are optional; `address` holds a free-text form
    - customers with sales cannot be deleted (PROTECT on Sale.customer)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")

    address = models.TextField(blank=True, default="")
    house_number = models.CharField(max_length=50, blank=True, default="")
    road = models.CharField(max_length=200, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    postal_code = models.CharField(max_length=20, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["email"],
                condition=~models.Q(email=""),
                name="uniq_customer_email_when_present",
            ),
        ]
        indexes = [
            models.Index(fields=["name"], name="customers_customer_name_idx"),
        ]

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Customer name is required"})
        self.email = (self.email or "").strip().lower()

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name
