"""
Shipments App Serializers - Shipments, tracking events & carriers

Contact, package and location details are stored as flat columns on the
Shipment model and exposed as nested JSON objects:

    {"sender": {"name": ..., "coordinates": {"lat": ..., "lng": ...}}, ...}
"""

from rest_framework import serializers
from rest_framework.fields import empty

from .constants import (
    ShipmentStatus, ServiceType, ShipmentType, ShipmentMode, ConsignmentType,
    Currency, get_status_label
)
from .models import Carrier, Shipment, FreightCharges, PackageImage, TrackingEvent, MAX_PACKAGE_IMAGES
from .progress import calculate_progress, build_route
from .services import DuplicateCarrierCodeError


def validate_positive(value):
    if value is not None and value <= 0:
        raise serializers.ValidationError("Must be greater than 0")


# ============================================
# NESTED GROUPS OVER FLAT COLUMNS
# ============================================

class PrefixedGroupSerializer(serializers.Serializer):
    """
    Nested view over prefixed model columns.

    Declared with source='*': with prefix='sender', the field 'name' reads
    and writes the 'sender_name' column of the parent object.
    """

    prefix = None

    def __init__(self, *args, prefix=None, **kwargs):
        if prefix is not None:
            self.prefix = prefix
        kwargs.setdefault('source', '*')
        super().__init__(*args, **kwargs)

    def get_fields(self):
        fields = super().get_fields()
        for name, field in fields.items():
            if field.source is None:
                field.source = f"{self.prefix}_{name}"
        return fields


class CoordinatesField(serializers.Field):
    """
    {lat, lng} stored as <prefix>_latitude / <prefix>_longitude.

    Also accepts {latitude, longitude}. A missing or null value clears both
    columns.
    """

    default_error_messages = {
        'invalid': 'Coordinates must be an object with lat and lng',
        'latitude': 'Latitude must be between -90 and 90',
        'longitude': 'Longitude must be between -180 and 180',
    }

    def __init__(self, **kwargs):
        kwargs['source'] = '*'
        kwargs.setdefault('required', False)
        super().__init__(**kwargs)

    def _columns(self):
        prefix = self.parent.prefix
        return f"{prefix}_latitude", f"{prefix}_longitude"

    def run_validation(self, data=empty):
        if data is empty or data is None:
            lat_column, lng_column = self._columns()
            return {lat_column: None, lng_column: None}
        return super().run_validation(data)

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            self.fail('invalid')

        lat = data.get('lat', data.get('latitude'))
        lng = data.get('lng', data.get('longitude'))
        try:
            lat = float(lat)
            lng = float(lng)
        except (TypeError, ValueError):
            self.fail('invalid')

        if not -90 <= lat <= 90:
            self.fail('latitude')
        if not -180 <= lng <= 180:
            self.fail('longitude')

        lat_column, lng_column = self._columns()
        return {lat_column: lat, lng_column: lng}

    def to_representation(self, instance):
        lat_column, lng_column = self._columns()
        lat = getattr(instance, lat_column)
        lng = getattr(instance, lng_column)
        if lat is None or lng is None:
            return None
        return {'lat': lat, 'lng': lng}


class ContactSerializer(PrefixedGroupSerializer):
    """Sender or receiver contact details."""

    name = serializers.CharField(min_length=2, max_length=100)
    phone = serializers.CharField(min_length=5, max_length=20)
    email = serializers.EmailField()
    address = serializers.CharField(min_length=5, max_length=500)
    coordinates = CoordinatesField()


class LocationSerializer(PrefixedGroupSerializer):
    """City / state / country of the origin or destination."""

    city = serializers.CharField(min_length=1, max_length=100)
    state = serializers.CharField(min_length=1, max_length=100)
    country = serializers.CharField(min_length=1, max_length=100)
    coordinates = CoordinatesField()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not (data['city'] or data['state'] or data['country'] or data['coordinates']):
            return None
        return data


class DimensionsSerializer(PrefixedGroupSerializer):
    prefix = 'package'

    length = serializers.FloatField(validators=[validate_positive])
    width = serializers.FloatField(validators=[validate_positive])
    height = serializers.FloatField(validators=[validate_positive])


class PackageSerializer(PrefixedGroupSerializer):
    """Package weight (kg), dimensions (cm), declared value and description."""

    prefix = 'package'

    weight = serializers.FloatField(validators=[validate_positive])
    dimensions = DimensionsSerializer()
    value = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0,
        required=False, allow_null=True, default=None
    )
    currency = serializers.ChoiceField(choices=Currency.choices, required=False, default=Currency.USD)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


# ============================================
# RELATED RECORDS
# ============================================

class FreightChargesSerializer(serializers.ModelSerializer):
    """Freight breakdown. The total is computed when not supplied."""

    class Meta:
        model = FreightCharges
        fields = [
            'base_charge', 'fuel_surcharge', 'handling_fee', 'insurance_fee',
            'customs_duty', 'tax', 'discount', 'total', 'currency',
            'is_paid', 'payment_method', 'payment_status', 'paid_at', 'payment_reference'
        ]
        extra_kwargs = {
            'total': {'required': False},
        }

    def validate(self, data):
        if data.get('total') is None:
            data['total'] = FreightCharges.compute_total(
                data.get('base_charge'),
                data.get('fuel_surcharge'),
                data.get('handling_fee'),
                data.get('insurance_fee'),
                data.get('customs_duty'),
                data.get('tax'),
                data.get('discount'),
            )
        return data


class PackageImageSerializer(serializers.ModelSerializer):

    class Meta:
        model = PackageImage
        fields = ['url', 'public_id', 'uploaded_at']
        read_only_fields = ['uploaded_at']


class TrackingEventSerializer(serializers.ModelSerializer):
    """Serializer for TrackingEvent model."""

    status_label = serializers.SerializerMethodField()

    class Meta:
        model = TrackingEvent
        fields = ['id', 'status', 'status_label', 'location', 'description', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_status_label(self, obj):
        return get_status_label(obj.status)


class TrackingEventUpdateSerializer(serializers.Serializer):
    location = serializers.CharField(min_length=2, max_length=200, required=False)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)


class StatusUpdateSerializer(serializers.Serializer):
    """Serializer for PATCH /shipments/<id>/status/."""

    status = serializers.ChoiceField(choices=ShipmentStatus.choices)
    location = serializers.CharField(min_length=2, max_length=200)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


# ============================================
# CARRIERS
# ============================================

class CarrierSerializer(serializers.ModelSerializer):
    """Serializer for Carrier model. Codes are unique and stored uppercase."""

    class Meta:
        model = Carrier
        fields = [
            'id', 'name', 'code', 'contact_email', 'contact_phone', 'website',
            'tracking_url_template', 'is_active', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {
            # Uniqueness is reported as a 409 by validate_code
            'code': {'validators': []},
        }

    def validate_code(self, value):
        code = value.strip().upper()
        queryset = Carrier.objects.filter(code=code)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise DuplicateCarrierCodeError()
        return code

    def validate_tracking_url_template(self, value):
        if value and '{trackingCode}' not in value:
            raise serializers.ValidationError("Template must contain the {trackingCode} placeholder")
        return value


class CarrierSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Carrier
        fields = ['id', 'name', 'code', 'tracking_url_template']


# ============================================
# SHIPMENTS (read)
# ============================================

class ShipmentListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the admin shipment table."""

    sender = ContactSerializer(prefix='sender', read_only=True)
    receiver = ContactSerializer(prefix='receiver', read_only=True)
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = Shipment
        fields = [
            'id', 'tracking_code', 'status', 'status_label', 'service_type',
            'shipment_type', 'shipment_mode', 'sender', 'receiver',
            'origin', 'destination', 'current_location',
            'estimated_delivery_date', 'created_at', 'updated_at'
        ]

    def get_status_label(self, obj):
        return get_status_label(obj.status)


class ShipmentSerializer(ShipmentListSerializer):
    """Full admin serializer with freight, images, carrier and history."""

    package = PackageSerializer(read_only=True)
    origin_location = LocationSerializer(prefix='origin', read_only=True)
    destination_location = LocationSerializer(prefix='destination', read_only=True)
    freight_charges = FreightChargesSerializer(read_only=True)
    package_images = PackageImageSerializer(many=True, read_only=True)
    tracking_events = TrackingEventSerializer(many=True, read_only=True)
    carrier = CarrierSummarySerializer(read_only=True)
    carrier_tracking_url = serializers.SerializerMethodField()
    created_by = serializers.SerializerMethodField()

    class Meta(ShipmentListSerializer.Meta):
        fields = ShipmentListSerializer.Meta.fields + [
            'consignment_type', 'package', 'origin_location', 'destination_location',
            'freight_charges', 'package_images', 'tracking_events',
            'carrier', 'carrier_tracking_code', 'carrier_tracking_url',
            'tracking_url', 'created_by'
        ]

    def get_carrier_tracking_url(self, obj):
        if obj.carrier is None or not obj.carrier_tracking_code:
            return None
        return obj.carrier.get_tracking_url(obj.carrier_tracking_code)

    def get_created_by(self, obj):
        if obj.created_by is None:
            return None
        return {'id': str(obj.created_by.id), 'name': obj.created_by.name, 'email': obj.created_by.email}


# ============================================
# SHIPMENTS (write)
# ============================================

class ShipmentCreateSerializer(serializers.Serializer):
    """Serializer for creating a shipment from the admin dashboard."""

    consignment_type = serializers.ChoiceField(choices=ConsignmentType.choices, default=ConsignmentType.SHIPMENT)
    shipment_type = serializers.ChoiceField(choices=ShipmentType.choices, default=ShipmentType.DOMESTIC)
    shipment_mode = serializers.ChoiceField(choices=ShipmentMode.choices, default=ShipmentMode.ROAD)
    service_type = serializers.ChoiceField(choices=ServiceType.choices, default=ServiceType.STANDARD)

    sender = ContactSerializer(prefix='sender')
    receiver = ContactSerializer(prefix='receiver')
    package = PackageSerializer()

    origin = serializers.CharField(min_length=2, max_length=200)
    destination = serializers.CharField(min_length=2, max_length=200)
    origin_location = LocationSerializer(prefix='origin', required=False)
    destination_location = LocationSerializer(prefix='destination', required=False)

    estimated_delivery_date = serializers.DateField(required=False, allow_null=True)
    package_images = PackageImageSerializer(many=True, required=False)
    freight_charges = FreightChargesSerializer(required=False, allow_null=True)
    carrier = serializers.PrimaryKeyRelatedField(queryset=Carrier.objects.all(), required=False, allow_null=True)
    carrier_tracking_code = serializers.CharField(max_length=100, required=False, allow_blank=True)

    send_notification = serializers.BooleanField(default=True)

    def validate_package_images(self, value):
        if len(value) > MAX_PACKAGE_IMAGES:
            raise serializers.ValidationError(f"Maximum {MAX_PACKAGE_IMAGES} package images allowed")
        return value


class ShipmentUpdateSerializer(serializers.Serializer):
    """
    Serializer for editing a shipment. Every group is optional; a group that
    is sent replaces the stored one.
    """

    consignment_type = serializers.ChoiceField(choices=ConsignmentType.choices, required=False)
    shipment_type = serializers.ChoiceField(choices=ShipmentType.choices, required=False)
    shipment_mode = serializers.ChoiceField(choices=ShipmentMode.choices, required=False)
    service_type = serializers.ChoiceField(choices=ServiceType.choices, required=False)

    sender = ContactSerializer(prefix='sender', required=False)
    receiver = ContactSerializer(prefix='receiver', required=False)
    package = PackageSerializer(required=False)

    origin = serializers.CharField(min_length=2, max_length=200, required=False)
    destination = serializers.CharField(min_length=2, max_length=200, required=False)
    origin_location = LocationSerializer(prefix='origin', required=False)
    destination_location = LocationSerializer(prefix='destination', required=False)

    current_location = serializers.CharField(max_length=200, required=False, allow_blank=True)
    estimated_delivery_date = serializers.DateField(required=False, allow_null=True)
    package_images = PackageImageSerializer(many=True, required=False)
    freight_charges = FreightChargesSerializer(required=False, allow_null=True)
    carrier = serializers.PrimaryKeyRelatedField(queryset=Carrier.objects.all(), required=False, allow_null=True)
    carrier_tracking_code = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_package_images(self, value):
        if len(value) > MAX_PACKAGE_IMAGES:
            raise serializers.ValidationError(f"Maximum {MAX_PACKAGE_IMAGES} package images allowed")
        return value


# ============================================
# PUBLIC TRACKING
# ============================================

class PublicContactSerializer(PrefixedGroupSerializer):
    name = serializers.CharField()
    address = serializers.CharField()
    phone = serializers.CharField()
    email = serializers.EmailField()


class PublicTrackingSerializer(serializers.ModelSerializer):
    """
    Sanitized shipment payload for GET /api/tracking/.
    Never exposes the creating admin or internal ids.
    """

    sender = PublicContactSerializer(prefix='sender', read_only=True)
    receiver = PublicContactSerializer(prefix='receiver', read_only=True)
    package = serializers.SerializerMethodField()
    freight = serializers.SerializerMethodField()
    payment_status = serializers.SerializerMethodField()
    payment_method = serializers.SerializerMethodField()
    carrier = serializers.SerializerMethodField()
    origin_location = LocationSerializer(prefix='origin', read_only=True)
    destination_location = LocationSerializer(prefix='destination', read_only=True)
    events = serializers.SerializerMethodField()
    package_images = PackageImageSerializer(many=True, read_only=True)
    status_label = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()
    route = serializers.SerializerMethodField()

    class Meta:
        model = Shipment
        fields = [
            'tracking_code', 'status', 'status_label', 'progress',
            'origin', 'destination', 'current_location', 'estimated_delivery_date',
            'sender', 'receiver', 'package',
            'service_type', 'consignment_type', 'shipment_type', 'shipment_mode',
            'freight', 'payment_status', 'payment_method', 'carrier',
            'origin_location', 'destination_location', 'route',
            'events', 'package_images', 'created_at', 'updated_at'
        ]

    def _freight(self, obj):
        # Missing one-to-one raises RelatedObjectDoesNotExist, an AttributeError
        return getattr(obj, 'freight_charges', None)

    def get_package(self, obj):
        data = {
            'weight': obj.package_weight,
            'description': obj.package_description or '',
            'dimensions': {
                'length': obj.package_length,
                'width': obj.package_width,
                'height': obj.package_height,
                'unit': 'cm',
            },
            'declared_value': None,
        }
        if obj.package_value:
            data['declared_value'] = {
                'amount': obj.package_value,
                'currency': obj.package_currency or Currency.USD,
            }
        return data

    def get_freight(self, obj):
        charges = self._freight(obj)
        if charges is None:
            return None
        return {
            'base_charge': charges.base_charge,
            'fuel_surcharge': charges.fuel_surcharge,
            'insurance': charges.insurance_fee,
            'handling_fee': charges.handling_fee,
            'customs_duty': charges.customs_duty,
            'tax': charges.tax,
            'discount': charges.discount,
            'total': charges.total,
            'currency': charges.currency or Currency.USD,
        }

    def get_payment_status(self, obj):
        charges = self._freight(obj)
        return charges.payment_status if charges else None

    def get_payment_method(self, obj):
        charges = self._freight(obj)
        return (charges.payment_method or None) if charges else None

    def get_carrier(self, obj):
        if not obj.carrier_tracking_code:
            return None
        data = {'tracking_code': obj.carrier_tracking_code, 'mode': obj.shipment_mode}
        if obj.carrier is not None:
            data['name'] = obj.carrier.name
            data['tracking_url'] = obj.carrier.get_tracking_url(obj.carrier_tracking_code)
        return data

    def get_events(self, obj):
        return [
            {
                'status': event.status,
                'location': event.location,
                'description': event.description,
                'timestamp': serializers.DateTimeField().to_representation(event.created_at),
            }
            for event in obj.tracking_events.all()
        ]

    def get_status_label(self, obj):
        return get_status_label(obj.status)

    def get_progress(self, obj):
        return calculate_progress(obj.status)

    def get_route(self, obj):
        return build_route(obj.origin_point, obj.destination_point, obj.status)
