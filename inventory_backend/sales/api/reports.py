# sales/api/reports.py

"""
DASHBOARD SUMMARY REPORT

GET /api/reports/summary/?date=YYYY-MM-DD

- date is optional, defaults to today (server timezone); a malformed date is a 400
- revenue counts PENDING + COMPLETED sales of the day; CANCELLED are excluded
- stock value is valued at cost (cost_price * quantity)

Security:
- any staff role (reports.view)
"""

from __future__ import annotations

from datetime import date as date_cls
from decimal import Decimal

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from products.models import Product, StockLedgerEntry
from products.serializers.stock_ledger import StockLedgerEntrySerializer
from products.services.exceptions import InputValidationError
from sales.models import Sale

RECENT_LIMIT = 10


def _parse_date(date_str: str | None) -> date_cls:
    if date_str:
        try:
            return date_cls.fromisoformat(str(date_str).strip())
        except ValueError:
            raise InputValidationError("date must be YYYY-MM-DD") from None
    return timezone.localdate()


class SummaryReportView(APIView):
    required_capability = CAP_REPORTS_VIEW
    permission_classes = [IsAuthenticated, HasCapability]

    @extend_schema(
        parameters=[OpenApiParameter("date", str, OpenApiParameter.QUERY, required=False)],
        responses={200: dict},
        description="Dashboard figures for one day plus current stock position.",
    )
    def get(self, request):
        day = _parse_date(request.query_params.get("date"))

        products = Product.objects.filter(is_active=True)
        stock_value = products.aggregate(
            total=Coalesce(
                Sum(
                    ExpressionWrapper(
                        F("cost_price") * F("quantity"),
                        output_field=DecimalField(max_digits=18, decimal_places=2),
                    )
                ),
                Decimal("0.00"),
                output_field=DecimalField(max_digits=18, decimal_places=2),
            )
        )["total"]

        day_sales = Sale.objects.filter(date__date=day).exclude(status=Sale.Status.CANCELLED)
        day_totals = day_sales.aggregate(
            count=Count("id"),
            revenue=Coalesce(
                Sum("total_amount"),
                Decimal("0.00"),
                output_field=DecimalField(max_digits=18, decimal_places=2),
            ),
        )

        recent_entries = StockLedgerEntry.objects.select_related("product", "performed_by").order_by(
            "-created_at"
        )[:RECENT_LIMIT]

        return Response(
            {
                "date": day.isoformat(),
                "products": {
                    "active_count": products.count(),
                    "low_stock_count": products.filter(quantity__lte=F("minimum_stock")).count(),
                    "out_of_stock_count": products.filter(quantity=0).count(),
                    "stock_value": str(Decimal(stock_value).quantize(Decimal("0.01"))),
                },
                "sales": {
                    "count": day_totals["count"],
                    "revenue": str(Decimal(day_totals["revenue"]).quantize(Decimal("0.01"))),
                    "pending_count": Sale.objects.filter(status=Sale.Status.PENDING).count(),
                },
                "recent_stock_activity": StockLedgerEntrySerializer(recent_entries, many=True).data,
            }
        )
