# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- Product.quantity is read-only here; stock changes go through the
  inventory adjust endpoint so every change has a ledger entry.
- StockLedgerEntry rows are immutable: view-only, no add / change / delete.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product, StockLedgerEntry


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# LEDGER INLINE (READ-ONLY)
# =====================================================

class StockLedgerEntryInline(admin.TabularInline):
    model = StockLedgerEntry
    extra = 0
    can_delete = False
    show_change_link = False
    ordering = ("-created_at",)

    fields = ("created_at", "type", "quantity", "reference", "notes", "performed_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "price",
        "quantity",
        "minimum_stock",
        "is_low_stock",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "category", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    readonly_fields = ("quantity", "created_at", "updated_at")

    inlines = [StockLedgerEntryInline]

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock


# =====================================================
# STOCK LEDGER (VIEW-ONLY LIST)
# =====================================================

@admin.register(StockLedgerEntry)
class StockLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ("created_at", "product", "type", "quantity", "reference", "performed_by")
    list_filter = ("type", "created_at")
    search_fields = ("reference", "product__name", "product__sku")
    ordering = ("-created_at",)

    readonly_fields = (
        "product",
        "quantity",
        "type",
        "reference",
        "notes",
        "performed_by",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
