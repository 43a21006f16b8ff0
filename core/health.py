"""
Health endpoints for load balancers and container probes.

/health/        liveness, no dependency touched
/health/ready/  readiness: database and cache, 503 when either is down
"""

import time
import logging
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

logger = logging.getLogger('courier.monitoring')

SERVICE_NAME = 'courier-express'
CACHE_PROBE_KEY = 'health:probe'


def _ping_database():
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {'engine': connection.vendor}


def _ping_cache():
    token = str(time.monotonic())
    cache.set(CACHE_PROBE_KEY, token, 10)
    if cache.get(CACHE_PROBE_KEY) != token:
        raise RuntimeError("Cache returned a stale or missing value")
    return {}


def _run_check(name, probe):
    """Time one probe. Failures are reported, never raised."""
    started = time.monotonic()
    try:
        details = probe()
    except Exception as e:
        logger.error(f"[HEALTH] {name} unhealthy: {e}")
        return {'status': 'unhealthy', 'error': str(e)}
    elapsed_ms = round((time.monotonic() - started) * 1000, 2)
    return {'status': 'healthy', 'response_time_ms': elapsed_ms, **details}


@csrf_exempt
@require_GET
def health_check(request):
    return JsonResponse({
        'status': 'ok',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    checks = {
        'database': _run_check('database', _ping_database),
        'cache': _run_check('cache', _ping_cache),
    }
    healthy = all(check['status'] == 'healthy' for check in checks.values())

    return JsonResponse({
        'status': 'healthy' if healthy else 'unhealthy',
        'service': SERVICE_NAME,
        'timestamp': timezone.now().isoformat(),
        'checks': checks,
    }, status=200 if healthy else 503)
