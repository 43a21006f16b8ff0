"""
QUOTES App - Customer quote requests for Courier Express
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models

from shipments.constants import ServiceType, Currency


class QuoteStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    RESPONDED = 'RESPONDED', 'Responded'
    CONVERTED = 'CONVERTED', 'Converted'


class Quote(models.Model):
    """
    A price estimate request submitted from the public site.

    estimated_price starts as the automatic estimate and is replaced by the
    admin's price when the quote is answered.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Contact
    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)], verbose_name="Name")
    email = models.EmailField(verbose_name="Email")
    phone = models.CharField(max_length=20, validators=[MinLengthValidator(5)], verbose_name="Phone")

    # Route
    origin = models.CharField(max_length=200, verbose_name="Origin")
    destination = models.CharField(max_length=200, verbose_name="Destination")

    # Package
    package_weight = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Weight (kg)")
    package_length = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Length (cm)")
    package_width = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Width (cm)")
    package_height = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Height (cm)")
    package_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="Declared value"
    )
    package_currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.USD,
        verbose_name="Currency"
    )
    package_description = models.CharField(max_length=500, verbose_name="Description")

    service_type = models.CharField(
        max_length=20,
        choices=ServiceType.choices,
        default=ServiceType.STANDARD,
        verbose_name="Service type"
    )
    estimated_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="Estimated price"
    )

    # Handling
    status = models.CharField(
        max_length=20,
        choices=QuoteStatus.choices,
        default=QuoteStatus.PENDING,
        db_index=True,
        verbose_name="Status"
    )
    admin_response = models.TextField(max_length=1000, blank=True, default='', verbose_name="Admin response")
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='responded_quotes',
        verbose_name="Responded by"
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Quote"
        verbose_name_plural = "Quotes"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='quote_created_idx'),
            models.Index(fields=['email'], name='quote_email_idx'),
        ]

    def __str__(self):
        return f"{self.name}: {self.origin} → {self.destination} ({self.status})"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def dimensions(self):
        return (self.package_length, self.package_width, self.package_height)
