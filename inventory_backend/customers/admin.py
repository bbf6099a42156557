# customers/admin.py

from django.contrib import admin

from customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "city", "country", "created_at")
    search_fields = ("name", "email", "phone")
    list_filter = ("country",)
