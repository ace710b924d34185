"""
Page/limit pagination shared by list endpoints.
"""

import math

from django.db.models import QuerySet


def paginate(queryset: QuerySet, page: int, limit: int) -> tuple[list, dict]:
    """Slice a queryset and build the pagination block the frontend expects."""
    page = max(page, 1)
    limit = max(limit, 1)

    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset : offset + limit])

    return items, {
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "totalItems": total,
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }
