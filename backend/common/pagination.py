# backend/common/pagination.py
from __future__ import annotations

import math

from django.conf import settings
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _positive_int(raw, default: int, cap: int | None = None) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < 1:
        return default
    return min(value, cap) if cap else value


def page_meta(*, page: int, limit: int, total: int) -> dict:
    return {
        "currentPage": page,
        "totalPages": math.ceil(total / limit) if limit else 0,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page * limit < total,
        "hasPreviousPage": page > 1,
    }


class PageLimitPagination(BasePagination):
    """
    ?page=&limit= paging that answers {"data": [...], "meta": {...}}.
    Pages past the end come back empty instead of 404.
    """
    page_query_param = "page"
    limit_query_param = "limit"

    def paginate_queryset(self, queryset, request, view=None):
        self.page = _positive_int(request.query_params.get(self.page_query_param), 1)
        self.limit = _positive_int(
            request.query_params.get(self.limit_query_param),
            settings.DEFAULT_PAGE_SIZE,
            settings.MAX_PAGE_SIZE,
        )
        self.total = queryset.count()
        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response({
            "data": data,
            "meta": page_meta(page=self.page, limit=self.limit, total=self.total),
        })

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "data": schema,
                "meta": {
                    "type": "object",
                    "properties": {
                        "currentPage": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                        "totalItems": {"type": "integer"},
                        "itemsPerPage": {"type": "integer"},
                        "hasNextPage": {"type": "boolean"},
                        "hasPreviousPage": {"type": "boolean"},
                    },
                },
            },
        }
