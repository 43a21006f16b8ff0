"""
COMMUNICATIONS App - Celery Tasks for email notifications

Queued with transaction.on_commit by the shipment and quote services. IDs are
passed as strings so the payloads stay JSON-serializable.
"""

import logging
from celery import shared_task

logger = logging.getLogger(__name__)


def _get_user(user_id):
    if not user_id:
        return None
    from core.models import User
    return User.objects.filter(pk=user_id).first()


@shared_task(name='communications.send_shipment_created_email')
def send_shipment_created_email_task(shipment_id: str, sent_by_id: str = None):
    """
    Email the receiver that the shipment was created.

    Returns True when the email was accepted by the provider.
    """
    from shipments.models import Shipment
    from .services import EmailService

    shipment = Shipment.objects.filter(pk=shipment_id).first()
    if shipment is None:
        logger.warning(f"[TASK] Shipment {shipment_id} not found, creation email skipped")
        return False

    result = EmailService.send_shipment_created_email(shipment, sent_by=_get_user(sent_by_id))
    if not result.success:
        logger.warning(f"[TASK] Creation email for {shipment.tracking_code} failed: {result.error}")
    return result.success


@shared_task(name='communications.send_status_update_email')
def send_status_update_email_task(
    shipment_id: str,
    status: str,
    location: str,
    description: str = '',
    sent_by_id: str = None
):
    """Email the receiver about a status change."""
    from shipments.models import Shipment
    from .services import EmailService

    shipment = Shipment.objects.filter(pk=shipment_id).first()
    if shipment is None:
        logger.warning(f"[TASK] Shipment {shipment_id} not found, status email skipped")
        return False

    result = EmailService.send_status_update_email(
        shipment, status, location, description, sent_by=_get_user(sent_by_id)
    )
    if not result.success:
        logger.warning(f"[TASK] Status email for {shipment.tracking_code} failed: {result.error}")
    return result.success


@shared_task(name='communications.send_quote_response_email')
def send_quote_response_email_task(quote_id: str, sent_by_id: str = None):
    from quotes.models import Quote
    from .services import EmailService

    quote = Quote.objects.filter(pk=quote_id).first()
    if quote is None:
        logger.warning(f"[TASK] Quote {quote_id} not found, response email skipped")
        return False

    result = EmailService.send_quote_response_email(quote, sent_by=_get_user(sent_by_id))
    if not result.success:
        logger.warning(f"[TASK] Quote response email for {quote_id} failed: {result.error}")
    return result.success
