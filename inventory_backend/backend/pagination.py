# backend/pagination.py

"""
PAGE / LIMIT PAGINATION

Query params: ?page=<n>&limit=<n>

Response shape:
    {
        "results": [...],
        "pagination": {"total": 42, "page": 1, "limit": 10, "total_pages": 5}
    }
"""

from __future__ import annotations

import math

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageLimitPagination(PageNumberPagination):
    page_query_param = "page"
    page_size_query_param = "limit"

    def __init__(self):
        rf = getattr(settings, "REST_FRAMEWORK", {})
        self.page_size = int(rf.get("PAGE_SIZE") or 10)
        self.max_page_size = int(rf.get("MAX_PAGE_SIZE") or 100)

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.get_page_size(self.request) or self.page_size
        return Response(
            {
                "results": data,
                "pagination": {
                    "total": total,
                    "page": self.page.number,
                    "limit": limit,
                    "total_pages": math.ceil(total / limit) if limit else 0,
                },
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                    },
                },
            },
        }
