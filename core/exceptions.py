"""
API error handling.

Every error leaves the API in the same envelope as successful responses:
    {"success": false, "error": "<first message>", "details": {...}}
"""

import logging
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by service layers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


def _first_message(detail):
    """Walk a DRF error detail structure and return the first message."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if message is None:
                continue
            if key in ('non_field_errors', 'detail'):
                return message
            return f"{key}: {message}"
        return None
    if isinstance(detail, (list, tuple)):
        for item in detail:
            message = _first_message(item)
            if message is not None:
                return message
        return None
    return str(detail)


def api_exception_handler(exc, context):
    """DRF exception handler producing the response envelope."""
    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error(f"[API] {exc.__class__.__name__}: {exc.message}")
        return Response({'success': False, 'error': exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    payload = {'success': False, 'error': _first_message(response.data) or 'Request failed'}
    if isinstance(exc, ValidationError):
        payload['details'] = response.data
    response.data = payload
    return response
