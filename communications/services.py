"""
Email Service for Courier Express

Every send attempt is written to EmailLog. Sending never raises: callers get
an EmailResult and decide what to do with a failure.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union
from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone

from core.audit import log_audit
from core.models import AuditAction, CompanySettings
from shipments.constants import (
    ShipmentStatus, get_email_status_color, get_email_status_emoji,
    humanize_status, format_currency
)
from .models import EmailLog, EmailStatus
from .resend import ResendClient, EmailDeliveryError

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    log: Optional[EmailLog] = None


def _base_context():
    company = CompanySettings.get_settings()
    return {
        'company_name': company.company_name or settings.COMPANY_NAME,
        'company': company,
        'year': timezone.now().year,
    }


def tracking_page_url(tracking_code: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/track?code={tracking_code}"


class EmailService:
    """Transactional email through Resend."""

    @staticmethod
    def send_email(
        to: Union[str, List[str]],
        subject: str,
        html: str,
        sent_by=None,
        related_shipment=None,
        client: Optional[ResendClient] = None
    ) -> EmailResult:
        recipients = [to] if isinstance(to, str) else list(to)
        client = client or ResendClient()

        if sent_by is not None and not getattr(sent_by, 'is_authenticated', False):
            sent_by = None

        try:
            message_id = client.send(recipients, subject, html)
            email_status, error = EmailStatus.SENT, ''
        except EmailDeliveryError as e:
            message_id, email_status, error = None, EmailStatus.FAILED, e.message
            logger.error(f"[EMAIL] Send failed to {', '.join(recipients)}: {error}")

        log = EmailLog.objects.create(
            to=', '.join(recipients),
            subject=subject[:200],
            html_content=html,
            related_shipment=related_shipment,
            sent_by=sent_by,
            status=email_status,
            error_message=error,
            provider_message_id=message_id or '',
        )

        log_audit(
            AuditAction.EMAIL_SENT if email_status == EmailStatus.SENT else AuditAction.EMAIL_FAILED,
            'EmailLog',
            entity_id=log.pk,
            user=sent_by,
            new_data={'to': log.to, 'subject': log.subject},
            metadata={'error': error} if error else None,
        )

        return EmailResult(
            success=email_status == EmailStatus.SENT,
            message_id=message_id,
            error=error or None,
            log=log,
        )

    # ===========================================
    # TEMPLATE EMAILS
    # ===========================================

    @classmethod
    def send_shipment_created_email(cls, shipment, sent_by=None) -> EmailResult:
        """Tell the receiver that a shipment was created."""
        context = _base_context()
        context.update({
            'recipient_name': shipment.receiver_name,
            'tracking_code': shipment.tracking_code,
            'origin': shipment.origin,
            'destination': shipment.destination,
            'tracking_url': tracking_page_url(shipment.tracking_code),
        })
        subject = f"Your Shipment {shipment.tracking_code} Has Been Created - {context['company_name']}"
        html = render_to_string('emails/shipment_created.html', context)
        return cls.send_email(shipment.receiver_email, subject, html, sent_by=sent_by, related_shipment=shipment)

    @classmethod
    def send_status_update_email(cls, shipment, status, location, description='', sent_by=None) -> EmailResult:
        """Tell the receiver about a status change."""
        context = _base_context()
        status_text = humanize_status(status)
        emoji = get_email_status_emoji(status)
        context.update({
            'recipient_name': shipment.receiver_name,
            'tracking_code': shipment.tracking_code,
            'status_text': status_text,
            'status_color': get_email_status_color(status),
            'status_emoji': emoji,
            'location': location,
            'description': description,
            'is_delivered': status == ShipmentStatus.DELIVERED,
            'tracking_url': tracking_page_url(shipment.tracking_code),
        })
        subject = f"{emoji} Shipment {shipment.tracking_code} Update: {status_text} - {context['company_name']}"
        html = render_to_string('emails/status_update.html', context)
        return cls.send_email(shipment.receiver_email, subject, html, sent_by=sent_by, related_shipment=shipment)

    @classmethod
    def send_quote_response_email(cls, quote, sent_by=None) -> EmailResult:
        """Send the admin's price and message to the customer."""
        context = _base_context()
        context.update({
            'recipient_name': quote.name,
            'origin': quote.origin,
            'destination': quote.destination,
            'estimated_price': format_currency(quote.estimated_price or 0, quote.package_currency),
            'currency': quote.package_currency,
            'admin_response': quote.admin_response,
        })
        subject = f"Your Quote Response: {quote.origin} → {quote.destination} - {context['company_name']}"
        html = render_to_string('emails/quote_response.html', context)
        return cls.send_email(quote.email, subject, html, sent_by=sent_by)
