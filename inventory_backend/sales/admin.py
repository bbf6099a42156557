# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity", "price", "total_price")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    """
    Read-only: sales change stock, so every write goes through the API.
    """

    list_display = ("invoice_number", "customer", "user", "status", "payment_method", "total_amount", "date")
    list_filter = ("status", "payment_method", "date")
    search_fields = ("invoice_number", "customer__name")
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
