"""
COMMUNICATIONS App - Email log
"""

import uuid
from django.conf import settings
from django.db import models


class EmailStatus(models.TextChoices):
    SENT = 'SENT', 'Sent'
    FAILED = 'FAILED', 'Failed'


class EmailLog(models.Model):
    """
    One row per email the platform attempted to send, successful or not.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    to = models.CharField(max_length=500, verbose_name="Recipient(s)")
    subject = models.CharField(max_length=200, verbose_name="Subject")
    html_content = models.TextField(verbose_name="HTML content")

    related_shipment = models.ForeignKey(
        'shipments.Shipment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='emails',
        verbose_name="Related shipment"
    )
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_emails',
        verbose_name="Sent by"
    )

    status = models.CharField(max_length=10, choices=EmailStatus.choices, verbose_name="Status")
    error_message = models.TextField(blank=True, default='', verbose_name="Error message")
    provider_message_id = models.CharField(max_length=100, blank=True, default='', verbose_name="Provider message ID")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Email log"
        verbose_name_plural = "Email logs"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='email_status_idx'),
            models.Index(fields=['-created_at'], name='email_created_idx'),
        ]

    def __str__(self):
        return f"[{self.status}] {self.subject} → {self.to}"
