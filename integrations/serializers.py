from rest_framework import serializers


class AddressQuerySerializer(serializers.Serializer):
    q = serializers.CharField(min_length=2, max_length=200, trim_whitespace=True)


class UploadRequestSerializer(serializers.Serializer):
    """JSON upload request. Without `file` a signature is returned instead."""

    file = serializers.CharField(required=False, allow_blank=False)
    filename = serializers.CharField(max_length=255, required=False)
    shipment_id = serializers.UUIDField(required=False, allow_null=True)
