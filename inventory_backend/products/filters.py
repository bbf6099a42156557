# products/filters.py

"""
Query-string filters for product and ledger lists (django-filter).
"""

import django_filters
from django.db.models import F, Q

from products.models import Product, StockLedgerEntry


class ProductFilter(django_filters.FilterSet):
    category_id = django_filters.UUIDFilter(field_name="category_id")
    search = django_filters.CharFilter(method="filter_search")
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")
    is_active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Product
        fields = ["category_id", "search", "low_stock", "is_active"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(sku__icontains=value) | Q(description__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(quantity__lte=F("minimum_stock"))
        return queryset.filter(quantity__gt=F("minimum_stock"))


class StockLedgerFilter(django_filters.FilterSet):
    product_id = django_filters.UUIDFilter(field_name="product_id")
    type = django_filters.ChoiceFilter(choices=StockLedgerEntry.EntryType.choices)
    reference = django_filters.CharFilter(lookup_expr="icontains")

    class Meta:
        model = StockLedgerEntry
        fields = ["product_id", "type", "reference"]
