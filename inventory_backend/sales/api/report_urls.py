# sales/api/report_urls.py

from django.urls import path

from sales.api.reports import SummaryReportView

urlpatterns = [
    path("summary/", SummaryReportView.as_view(), name="reports-summary"),
]
