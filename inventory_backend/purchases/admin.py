# purchases/admin.py

from django.contrib import admin

from purchases.models import ProductSupplier, Purchase, PurchaseItem, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "email", "phone")


@admin.register(ProductSupplier)
class ProductSupplierAdmin(admin.ModelAdmin):
    list_display = ("product", "supplier", "is_preferred", "unit_price")
    list_filter = ("is_preferred",)
    search_fields = ("product__name", "product__sku", "supplier__name")


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity", "unit_cost", "total_cost")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Read-only: receiving / cancelling must go through the API so stock
    and ledger stay consistent.
    """

    list_display = ("reference_number", "supplier", "status", "total_amount", "date", "received_at")
    list_filter = ("status", "date")
    search_fields = ("reference_number", "supplier__name")
    inlines = [PurchaseItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
