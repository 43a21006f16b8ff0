from rest_framework import serializers

from shipments.models import Shipment
from .models import EmailLog


class EmailLogSerializer(serializers.ModelSerializer):
    related_shipment = serializers.SerializerMethodField()
    sent_by = serializers.SerializerMethodField()

    class Meta:
        model = EmailLog
        fields = [
            'id', 'to', 'subject', 'html_content', 'related_shipment', 'sent_by',
            'status', 'error_message', 'provider_message_id', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_related_shipment(self, obj):
        if obj.related_shipment is None:
            return None
        return {'id': str(obj.related_shipment.pk), 'tracking_code': obj.related_shipment.tracking_code}

    def get_sent_by(self, obj):
        if obj.sent_by is None:
            return None
        return {'id': str(obj.sent_by.pk), 'name': obj.sent_by.name, 'email': obj.sent_by.email}


class SendEmailSerializer(serializers.Serializer):
    """Serializer for a custom email from the admin dashboard."""

    to = serializers.EmailField()
    subject = serializers.CharField(min_length=1, max_length=200)
    html_content = serializers.CharField()
    related_shipment_id = serializers.PrimaryKeyRelatedField(
        queryset=Shipment.objects.all(),
        source='related_shipment',
        required=False,
        allow_null=True
    )
