"""
Integrations App Views - Mapbox proxy and package image uploads
"""

import logging
from rest_framework import status, permissions
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from core.audit import log_request_audit
from core.models import AuditAction
from core.permissions import IsAdminUser
from shipments.models import Shipment, MAX_PACKAGE_IMAGES
from shipments.services import ShipmentService, ImageLimitError
from .cloudinary import CloudinaryService, validate_upload_file
from .mapbox import MapboxService
from .serializers import AddressQuerySerializer, UploadRequestSerializer

logger = logging.getLogger(__name__)


class MapboxProxyView(APIView):
    """Base for the public Mapbox proxy endpoints (?q=, 2-200 characters)."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    cache_max_age = 300

    def get_query(self, request):
        serializer = AddressQuerySerializer(data={'q': request.query_params.get('q', '')})
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data['q']

    def cached(self, payload):
        response = Response(payload)
        response['Cache-Control'] = f"public, max-age={self.cache_max_age}"
        return response


class MapboxAutocompleteView(MapboxProxyView):
    """
    GET /api/mapbox/autocomplete/?q=
    """

    def get(self, request):
        features = MapboxService().autocomplete(self.get_query(request))
        return self.cached({'success': True, 'data': {'features': features}})


class MapboxGeocodeView(MapboxProxyView):
    """
    GET /api/mapbox/geocode/?q=

    Addresses rarely move: cached for an hour.
    """

    cache_max_age = 3600

    def get(self, request):
        result = MapboxService().geocode(self.get_query(request))
        if result is None:
            raise NotFound('Address not found')
        return self.cached({'success': True, 'data': result})


class UploadView(APIView):
    """
    POST /api/admin/uploads/

    - JSON without file: signature for a direct browser upload
    - JSON with base64 file, or multipart file: server-side upload (201)

    With shipment_id the uploaded image is attached to that shipment.
    """

    permission_classes = [IsAdminUser]

    def _get_shipment(self, shipment_id):
        if not shipment_id:
            return None
        shipment = Shipment.objects.filter(pk=shipment_id).first()
        if shipment is None:
            raise NotFound('Shipment not found')
        if shipment.package_images.count() >= MAX_PACKAGE_IMAGES:
            raise ImageLimitError()
        return shipment

    def post(self, request):
        cloudinary = CloudinaryService()
        uploaded_file = request.FILES.get('file')

        if uploaded_file is not None:
            serializer = UploadRequestSerializer(data={
                'filename': uploaded_file.name,
                'shipment_id': request.data.get('shipment_id') or None,
            })
            serializer.is_valid(raise_exception=True)
            validate_upload_file(uploaded_file)
            file = uploaded_file
        else:
            serializer = UploadRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            file = serializer.validated_data.get('file')
            if not file:
                return Response({'success': True, 'data': cloudinary.generate_upload_signature()})

        data = serializer.validated_data
        shipment = self._get_shipment(data.get('shipment_id'))

        result = cloudinary.upload(file, data.get('filename'))

        if shipment is not None:
            ShipmentService.attach_image(shipment, result['url'], result['public_id'])

        log_request_audit(
            request, AuditAction.FILE_UPLOADED, 'PackageImage',
            entity_id=result['public_id'],
            new_data={**result, 'shipment_id': str(shipment.pk) if shipment else None},
        )

        payload = dict(result)
        if uploaded_file is not None:
            payload['filename'] = uploaded_file.name

        return Response({
            'success': True,
            'data': payload,
            'message': 'File uploaded successfully',
        }, status=status.HTTP_201_CREATED)
