"""
Quotes App Serializers
"""

from decimal import Decimal
from rest_framework import serializers

from shipments.constants import ServiceType
from shipments.serializers import PackageSerializer, validate_positive
from .models import Quote


class QuotePackageSerializer(PackageSerializer):
    """Package details of a quote: description is required, value defaults to 0."""

    value = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0,
        required=False, default=Decimal('0')
    )
    description = serializers.CharField(min_length=1, max_length=500)


class QuoteCreateSerializer(serializers.Serializer):
    """Public quote request form."""

    name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(min_length=5, max_length=20)
    origin = serializers.CharField(min_length=2, max_length=200)
    destination = serializers.CharField(min_length=2, max_length=200)
    package_details = QuotePackageSerializer()
    service_type = serializers.ChoiceField(choices=ServiceType.choices)


class QuoteSerializer(serializers.ModelSerializer):
    """Serializer for admin quote list and detail."""

    package_details = QuotePackageSerializer(read_only=True)
    status_label = serializers.SerializerMethodField()
    responded_by = serializers.SerializerMethodField()

    class Meta:
        model = Quote
        fields = [
            'id', 'name', 'email', 'phone', 'origin', 'destination',
            'package_details', 'service_type', 'estimated_price',
            'status', 'status_label', 'admin_response', 'responded_by', 'responded_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_status_label(self, obj):
        return obj.get_status_display()

    def get_responded_by(self, obj):
        if obj.responded_by is None:
            return None
        return {'id': str(obj.responded_by.pk), 'name': obj.responded_by.name}


class QuoteRespondSerializer(serializers.Serializer):
    estimated_price = serializers.DecimalField(max_digits=12, decimal_places=2, validators=[validate_positive])
    admin_response = serializers.CharField(min_length=1, max_length=1000)
