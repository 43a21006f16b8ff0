"""
SHIPMENTS App - Shipments, tracking history and carriers for Courier Express

Handles: Carrier, Shipment, FreightCharges, PackageImage, TrackingEvent
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models

from .constants import (
    ShipmentStatus, ServiceType, ShipmentType, ShipmentMode, ConsignmentType,
    Currency, PaymentMethod, PaymentStatus, get_default_event_description
)

MAX_PACKAGE_IMAGES = 5
TRACKING_CODE_PLACEHOLDER = '{trackingCode}'


class Carrier(models.Model):
    """
    Third-party shipping partner a shipment can be handed over to.

    tracking_url_template holds a {trackingCode} placeholder replaced by the
    carrier's own tracking number.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=100,
        validators=[MinLengthValidator(2)],
        verbose_name="Carrier name"
    )
    code = models.CharField(
        max_length=20,
        unique=True,
        validators=[MinLengthValidator(2)],
        verbose_name="Carrier code"
    )
    contact_email = models.EmailField(blank=True, default='', verbose_name="Contact email")
    contact_phone = models.CharField(max_length=30, blank=True, default='', verbose_name="Contact phone")
    website = models.URLField(blank=True, default='', verbose_name="Website")
    tracking_url_template = models.CharField(
        max_length=500,
        blank=True,
        default='',
        verbose_name="Tracking URL template",
        help_text="Use {trackingCode} where the carrier tracking number goes"
    )
    is_active = models.BooleanField(default=True, verbose_name="Active")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_carriers',
        verbose_name="Created by"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Carrier"
        verbose_name_plural = "Carriers"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    def get_tracking_url(self, tracking_code):
        """Carrier tracking page for a tracking number, or None without template."""
        if not self.tracking_url_template:
            return None
        return self.tracking_url_template.replace(TRACKING_CODE_PLACEHOLDER, str(tracking_code))


class Shipment(models.Model):
    """
    Core shipment model.

    Contact, package and location groups are stored flat (sender_*, receiver_*,
    package_*, origin_*, destination_*) and exposed as nested objects by the
    API serializers.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_code = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="Tracking code"
    )

    # Classification
    consignment_type = models.CharField(
        max_length=20,
        choices=ConsignmentType.choices,
        default=ConsignmentType.SHIPMENT,
        verbose_name="Consignment type"
    )
    shipment_type = models.CharField(
        max_length=20,
        choices=ShipmentType.choices,
        default=ShipmentType.DOMESTIC,
        verbose_name="Shipment type"
    )
    shipment_mode = models.CharField(
        max_length=20,
        choices=ShipmentMode.choices,
        default=ShipmentMode.ROAD,
        verbose_name="Shipment mode"
    )
    service_type = models.CharField(
        max_length=20,
        choices=ServiceType.choices,
        default=ServiceType.STANDARD,
        verbose_name="Service type"
    )

    # Sender
    sender_name = models.CharField(max_length=100, verbose_name="Sender name")
    sender_phone = models.CharField(max_length=20, verbose_name="Sender phone")
    sender_email = models.EmailField(verbose_name="Sender email")
    sender_address = models.CharField(max_length=500, verbose_name="Sender address")
    sender_latitude = models.FloatField(null=True, blank=True)
    sender_longitude = models.FloatField(null=True, blank=True)

    # Receiver
    receiver_name = models.CharField(max_length=100, verbose_name="Receiver name")
    receiver_phone = models.CharField(max_length=20, verbose_name="Receiver phone")
    receiver_email = models.EmailField(verbose_name="Receiver email")
    receiver_address = models.CharField(max_length=500, verbose_name="Receiver address")
    receiver_latitude = models.FloatField(null=True, blank=True)
    receiver_longitude = models.FloatField(null=True, blank=True)

    # Package
    package_weight = models.FloatField(
        validators=[MinValueValidator(0)],
        verbose_name="Weight (kg)"
    )
    package_length = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Length (cm)")
    package_width = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Width (cm)")
    package_height = models.FloatField(validators=[MinValueValidator(0)], verbose_name="Height (cm)")
    package_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name="Declared value"
    )
    package_currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.USD,
        verbose_name="Currency"
    )
    package_description = models.CharField(max_length=500, blank=True, default='', verbose_name="Description")

    # Route
    origin = models.CharField(max_length=200, verbose_name="Origin")
    destination = models.CharField(max_length=200, verbose_name="Destination")

    origin_city = models.CharField(max_length=100, blank=True, default='')
    origin_state = models.CharField(max_length=100, blank=True, default='')
    origin_country = models.CharField(max_length=100, blank=True, default='')
    origin_latitude = models.FloatField(null=True, blank=True)
    origin_longitude = models.FloatField(null=True, blank=True)

    destination_city = models.CharField(max_length=100, blank=True, default='')
    destination_state = models.CharField(max_length=100, blank=True, default='')
    destination_country = models.CharField(max_length=100, blank=True, default='')
    destination_latitude = models.FloatField(null=True, blank=True)
    destination_longitude = models.FloatField(null=True, blank=True)

    # Status
    status = models.CharField(
        max_length=30,
        choices=ShipmentStatus.choices,
        default=ShipmentStatus.CREATED,
        verbose_name="Status"
    )
    current_location = models.CharField(max_length=200, blank=True, default='', verbose_name="Current location")
    estimated_delivery_date = models.DateField(null=True, blank=True, verbose_name="Estimated delivery date")

    # Carrier hand-over
    carrier = models.ForeignKey(
        Carrier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='shipments',
        verbose_name="Carrier"
    )
    carrier_tracking_code = models.CharField(max_length=100, blank=True, default='', verbose_name="Carrier tracking code")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_shipments',
        verbose_name="Created by"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Shipment"
        verbose_name_plural = "Shipments"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='shipment_status_idx'),
            models.Index(fields=['-created_at'], name='shipment_created_idx'),
            models.Index(fields=['sender_email'], name='shipment_sender_email_idx'),
            models.Index(fields=['receiver_email'], name='shipment_receiver_email_idx'),
        ]

    def __str__(self):
        return f"{self.tracking_code} - {self.origin} → {self.destination}"

    def save(self, *args, **kwargs):
        if self.tracking_code:
            self.tracking_code = self.tracking_code.strip().upper()
        for field in ('sender_email', 'receiver_email'):
            value = getattr(self, field)
            if value:
                setattr(self, field, value.strip().lower())
        super().save(*args, **kwargs)

    @property
    def tracking_url(self):
        return f"/tracking?code={self.tracking_code}"

    @property
    def origin_point(self):
        """(lng, lat) of the origin location, falling back to the sender."""
        return _point(self.origin_longitude, self.origin_latitude) or \
            _point(self.sender_longitude, self.sender_latitude)

    @property
    def destination_point(self):
        """(lng, lat) of the destination location, falling back to the receiver."""
        return _point(self.destination_longitude, self.destination_latitude) or \
            _point(self.receiver_longitude, self.receiver_latitude)


def _point(lng, lat):
    if lng is None or lat is None:
        return None
    return (lng, lat)


class FreightCharges(models.Model):
    """Freight charge breakdown and payment state of a shipment."""

    shipment = models.OneToOneField(
        Shipment,
        on_delete=models.CASCADE,
        related_name='freight_charges',
        primary_key=True
    )

    base_charge = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    fuel_surcharge = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    handling_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    insurance_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    customs_duty = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0'))])
    total = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    # Payment
    is_paid = models.BooleanField(default=False, verbose_name="Paid")
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True, default='')
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True, default='')

    class Meta:
        verbose_name = "Freight charges"
        verbose_name_plural = "Freight charges"

    def __str__(self):
        return f"{self.shipment_id}: {self.total} {self.currency}"

    @staticmethod
    def compute_total(base_charge, fuel_surcharge=0, handling_fee=0, insurance_fee=0,
                      customs_duty=0, tax=0, discount=0) -> Decimal:
        """base + surcharges + fees + duty + tax - discount, never negative."""
        amounts = [
            Decimal(str(value or 0))
            for value in (base_charge, fuel_surcharge, handling_fee, insurance_fee, customs_duty, tax)
        ]
        total = sum(amounts, Decimal('0')) - Decimal(str(discount or 0))
        return max(total, Decimal('0')).quantize(Decimal('0.01'))


class PackageImage(models.Model):
    """Cloudinary-hosted package photo (max 5 per shipment)."""

    shipment = models.ForeignKey(
        Shipment,
        on_delete=models.CASCADE,
        related_name='package_images'
    )
    url = models.URLField(max_length=500)
    public_id = models.CharField(max_length=255)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Package image"
        verbose_name_plural = "Package images"
        ordering = ['uploaded_at', 'id']

    def __str__(self):
        return self.public_id


class TrackingEvent(models.Model):
    """
    One entry of a shipment's tracking history.

    An empty description is filled from the default description of its status.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shipment = models.ForeignKey(
        Shipment,
        on_delete=models.CASCADE,
        related_name='tracking_events',
        verbose_name="Shipment"
    )
    status = models.CharField(
        max_length=30,
        choices=ShipmentStatus.choices,
        verbose_name="Status"
    )
    location = models.CharField(max_length=200, verbose_name="Location")
    description = models.CharField(max_length=500, blank=True, default='', verbose_name="Description")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Tracking event"
        verbose_name_plural = "Tracking events"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['shipment', '-created_at'], name='event_shipment_created_idx'),
        ]

    def __str__(self):
        return f"{self.shipment.tracking_code} - {self.status} @ {self.location}"

    def save(self, *args, **kwargs):
        if not self.description:
            self.description = get_default_event_description(self.status)
        super().save(*args, **kwargs)
