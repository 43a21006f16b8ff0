"""
Resend API client for Courier Express

API Documentation: https://resend.com/docs/api-reference/emails/send-email
"""

import logging
import requests
from typing import List, Union
from django.conf import settings
from rest_framework import status

from core.exceptions import ServiceError

logger = logging.getLogger(__name__)


class EmailDeliveryError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Failed to send email'


class ResendClient:
    """
    Minimal Resend client.

    send() returns the provider message ID, or raises EmailDeliveryError when
    the API key is missing or the provider refuses the message.
    """

    TIMEOUT = 15

    def __init__(self, api_key=None, from_email=None, base_url=None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.from_email = from_email or settings.RESEND_FROM_EMAIL
        self.base_url = (base_url or settings.RESEND_API_URL).rstrip('/')

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> str:
        if not self.is_configured:
            raise EmailDeliveryError("RESEND_API_KEY environment variable is not set")

        recipients = [to] if isinstance(to, str) else list(to)

        try:
            response = requests.post(
                f"{self.base_url}/emails",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self.from_email,
                    "to": recipients,
                    "subject": subject,
                    "html": html,
                },
                timeout=self.TIMEOUT
            )
        except requests.RequestException as e:
            logger.error(f"[EMAIL] Resend request failed: {e}")
            raise EmailDeliveryError(str(e))

        if response.status_code >= 400:
            try:
                message = response.json().get('message') or response.text
            except ValueError:
                message = response.text
            logger.error(f"[EMAIL] Resend API error {response.status_code}: {message}")
            raise EmailDeliveryError(message or f"Resend API error {response.status_code}")

        try:
            message_id = response.json().get('id', '')
        except ValueError:
            # Accepted, but the body carried no id
            message_id = ''
        logger.info(f"[EMAIL] Sent to {', '.join(recipients)}: {message_id}")
        return message_id
