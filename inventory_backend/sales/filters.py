# sales/filters.py

import django_filters
from django.db.models import Q

from sales.models import Sale


class SaleFilter(django_filters.FilterSet):
    """
    ?query=<invoice number | customer name>&status=PENDING&date=YYYY-MM-DD
    """

    query = django_filters.CharFilter(method="filter_query")
    status = django_filters.ChoiceFilter(choices=Sale.Status.choices)
    date = django_filters.DateFilter(field_name="date", lookup_expr="date")
    customer_id = django_filters.UUIDFilter(field_name="customer_id")

    class Meta:
        model = Sale
        fields = ["query", "status", "date", "customer_id"]

    def filter_query(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(invoice_number__icontains=value) | Q(customer__name__icontains=value)
        )
