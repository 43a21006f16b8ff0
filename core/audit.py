"""
Audit trail helpers.

Audit logging is fire-and-forget: a failure to write an entry is logged
and swallowed so it never breaks the request that triggered it.
"""

import logging
from typing import Optional
from django.db import transaction

logger = logging.getLogger(__name__)


def get_client_ip(request) -> str:
    """Extract real client IP, considering proxy headers."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    x_real_ip = request.META.get('HTTP_X_REAL_IP')
    if x_real_ip:
        return x_real_ip.strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def log_audit(
    action: str,
    entity_type: str,
    entity_id=None,
    user=None,
    user_email: str = '',
    ip_address: str = '',
    user_agent: str = '',
    previous_data: Optional[dict] = None,
    new_data: Optional[dict] = None,
    metadata: Optional[dict] = None,
):
    """
    Create an audit log entry.

    Returns the AuditLog instance, or None if it could not be written.
    """
    from core.models import AuditLog

    if user is not None and not getattr(user, 'is_authenticated', False):
        user = None

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id)[:64] if entity_id else '',
                user=user,
                user_email=user_email or (user.email if user else ''),
                ip_address=ip_address or '',
                user_agent=(user_agent or '')[:500],
                previous_data=previous_data,
                new_data=new_data,
                metadata=metadata,
            )
    except Exception as e:
        logger.error(f"[AUDIT] Failed to write {action} for {entity_type}:{entity_id}: {e}")
        return None


def log_request_audit(request, action: str, entity_type: str, entity_id=None, **kwargs):
    """log_audit with user, IP and user agent taken from the request."""
    user = getattr(request, 'user', None)
    return log_audit(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user=user,
        ip_address=get_client_ip(request),
        user_agent=request.META.get('HTTP_USER_AGENT', ''),
        **kwargs,
    )
