"""
Courier Express Security Middleware
===================================

Provides:
1. Rate Limiting (per IP and route category) using the Django cache
2. Security Headers (HSTS, X-Content-Type, frame and referrer policy)
"""

import time
import logging
from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from .audit import get_client_ip

logger = logging.getLogger('courier.security')


class RateLimitMiddleware(MiddlewareMixin):
    """
    Fixed-window rate limiting backed by the cache (Redis in production).

    Each API path belongs to a category with its own budget, configured in
    settings.RATE_LIMITS as (max_requests, window_seconds):
    - tracking: public tracking lookups
    - quotes: public quote requests
    - mapbox: geocoding proxy
    - admin: authenticated dashboard API
    - default: every other /api/ path
    """

    # Path prefix -> category, first match wins
    PATH_CATEGORIES = (
        ('/api/tracking/', 'tracking'),
        ('/api/quotes/', 'quotes'),
        ('/api/mapbox/', 'mapbox'),
        ('/api/admin/', 'admin'),
    )

    DEFAULT_LIMITS = {
        'tracking': (30, 60),
        'quotes': (10, 60),
        'mapbox': (60, 60),
        'admin': (200, 60),
        'default': (100, 60),
    }

    def _get_category(self, path):
        """Get the rate limit category for the given path."""
        for prefix, category in self.PATH_CATEGORIES:
            if path.startswith(prefix):
                return category

        if path.startswith('/api/'):
            return 'default'

        return None  # No rate limiting for non-API paths

    def _get_limits(self, category):
        limits = getattr(settings, 'RATE_LIMITS', {})
        return limits.get(category, self.DEFAULT_LIMITS[category])

    def process_request(self, request):
        """Check rate limits before processing the request."""
        if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
            return None

        category = self._get_category(request.path)
        if category is None:
            return None

        max_requests, window = self._get_limits(category)
        client_ip = get_client_ip(request)
        now = time.time()

        cache_key = f"rl:{category}:{client_ip}"
        reset_key = f"{cache_key}:reset"

        # Start a new window if none is open
        if cache.add(cache_key, 0, window):
            cache.set(reset_key, now + window, window)
        reset_at = cache.get(reset_key) or (now + window)

        request_count = cache.get(cache_key, 0)

        if request_count >= max_requests:
            retry_after = max(1, int(round(reset_at - now)))
            logger.warning(
                f"Rate limit exceeded: IP={client_ip} category={category} path={request.path} "
                f"count={request_count}/{max_requests} window={window}s"
            )
            return JsonResponse({
                'success': False,
                'error': 'Too many requests. Please try again later.',
            }, status=429, headers={
                'Retry-After': str(retry_after),
                'X-RateLimit-Limit': str(max_requests),
                'X-RateLimit-Remaining': '0',
                'X-RateLimit-Reset': str(int(reset_at)),
            })

        # Increment counter
        try:
            new_count = cache.incr(cache_key)
        except ValueError:
            cache.set(cache_key, 1, window)
            new_count = 1

        # Store remaining for response headers
        request._rate_limit_limit = max_requests
        request._rate_limit_remaining = max(0, max_requests - new_count)
        request._rate_limit_reset = int(reset_at)

        return None

    def process_response(self, request, response):
        """Add rate limit headers to response."""
        if hasattr(request, '_rate_limit_limit'):
            response['X-RateLimit-Limit'] = str(request._rate_limit_limit)
            response['X-RateLimit-Remaining'] = str(request._rate_limit_remaining)
            response['X-RateLimit-Reset'] = str(request._rate_limit_reset)
        return response


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Add security headers to all responses.

    Protects against:
    - MIME type sniffing (X-Content-Type-Options)
    - Clickjacking (X-Frame-Options)
    - Referrer leakage (Referrer-Policy)
    """

    def process_response(self, request, response):
        response['X-Content-Type-Options'] = 'nosniff'

        # Django admin sets its own frame options
        if not request.path.startswith('/admin/'):
            response['X-Frame-Options'] = 'DENY'

        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        if 'Server' in response:
            del response['Server']

        # HSTS (only in production)
        if not settings.DEBUG:
            response['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response
