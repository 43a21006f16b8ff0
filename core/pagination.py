"""
Pagination for admin list endpoints.

Query parameters: ?page=1&limit=20 (limit capped at 100). Invalid values
fall back to the defaults; a page past the end returns an empty list.
"""

import math
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


class StandardPagination(BasePagination):
    """Slice a queryset and return the {success, data, pagination} envelope."""

    page_query_param = 'page'
    limit_query_param = 'limit'
    default_limit = 20
    max_limit = 100

    def _parse(self, value, default, maximum=None):
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        if number < 1:
            return default
        if maximum is not None and number > maximum:
            return default
        return number

    def paginate_queryset(self, queryset, request, view=None):
        self.page = self._parse(request.query_params.get(self.page_query_param), 1)
        self.limit = self._parse(
            request.query_params.get(self.limit_query_param),
            self.default_limit,
            self.max_limit,
        )
        self.total = queryset.count()
        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'data': data,
            'pagination': {
                'total': self.total,
                'page': self.page,
                'limit': self.limit,
                'total_pages': math.ceil(self.total / self.limit) if self.limit else 0,
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'data': schema,
                'pagination': {
                    'type': 'object',
                    'properties': {
                        'total': {'type': 'integer'},
                        'page': {'type': 'integer'},
                        'limit': {'type': 'integer'},
                        'total_pages': {'type': 'integer'},
                    },
                },
            },
        }
