"""
Shipments App Views - Admin shipment & carrier API, public tracking
"""

import logging
from django.http import Http404
from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from core.audit import log_request_audit
from core.models import AuditAction
from core.permissions import IsAdminUser
from .filters import ShipmentFilter, CarrierFilter
from .models import Shipment, Carrier
from .serializers import (
    ShipmentSerializer, ShipmentListSerializer,
    ShipmentCreateSerializer, ShipmentUpdateSerializer,
    StatusUpdateSerializer, TrackingEventSerializer, TrackingEventUpdateSerializer,
    CarrierSerializer, PublicTrackingSerializer
)
from .services import ShipmentService
from .utils import normalize_tracking_code, is_valid_tracking_code

logger = logging.getLogger(__name__)


class EnvelopeMixin:
    """Wrap single-object responses as {success, data, message}."""

    not_found_message = 'Not found'

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound(self.not_found_message)

    def envelope(self, data=None, message=None, status_code=status.HTTP_200_OK):
        payload = {'success': True}
        if data is not None:
            payload['data'] = data
        if message:
            payload['message'] = message
        return Response(payload, status=status_code)


class ShipmentViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    ViewSet for shipment management (admin dashboard).

    list:    ?page&limit&status&service_type&search, newest first
    status:  PATCH <id>/status/ appends a tracking event
    events:  PUT/DELETE <id>/events/<event_id>/
    """

    permission_classes = [IsAdminUser]
    filterset_class = ShipmentFilter
    not_found_message = 'Shipment not found'

    def get_queryset(self):
        qs = Shipment.objects.select_related('carrier', 'created_by', 'freight_charges')
        if self.action == 'list':
            return qs.order_by('-created_at')
        return qs.prefetch_related('package_images', 'tracking_events')

    def get_serializer_class(self):
        if self.action == 'list':
            return ShipmentListSerializer
        if self.action == 'create':
            return ShipmentCreateSerializer
        if self.action in ('update', 'partial_update'):
            return ShipmentUpdateSerializer
        return ShipmentSerializer

    def _reload(self, shipment):
        return self.get_queryset().get(pk=shipment.pk)

    def retrieve(self, request, *args, **kwargs):
        return self.envelope(ShipmentSerializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        serializer = ShipmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        shipment = ShipmentService.create_shipment(serializer.validated_data, request.user, request=request)

        return self.envelope(
            ShipmentSerializer(self._reload(shipment)).data,
            message=f"Shipment created with tracking code: {shipment.tracking_code}",
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        shipment = self.get_object()
        serializer = ShipmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ShipmentService.update_shipment(shipment, serializer.validated_data, request.user, request=request)

        return self.envelope(
            ShipmentSerializer(self._reload(shipment)).data,
            message='Shipment updated successfully',
        )

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        shipment = self.get_object()
        ShipmentService.delete_shipment(shipment, request.user, request=request)
        return self.envelope(message='Shipment deleted successfully')

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        """Update shipment status and record a tracking event."""
        shipment = self.get_object()
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ShipmentService.update_status(
            shipment,
            data['status'],
            data['location'],
            data.get('description', ''),
            user=request.user,
            request=request,
        )

        return self.envelope(
            ShipmentSerializer(self._reload(shipment)).data,
            message=f"Shipment status updated to {data['status']}",
        )

    @action(detail=True, methods=['put', 'delete'], url_path=r'events/(?P<event_id>[^/.]+)')
    def events(self, request, pk=None, event_id=None):
        """Edit or remove one tracking event of this shipment."""
        shipment = self.get_object()

        if request.method == 'DELETE':
            ShipmentService.delete_event(shipment, event_id)
            return self.envelope(message='Tracking event deleted')

        serializer = TrackingEventUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = ShipmentService.update_event(shipment, event_id, serializer.validated_data)
        return self.envelope(TrackingEventSerializer(event).data, message='Tracking event updated')


class CarrierViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    ViewSet for carriers. The list is not paginated and sorted by name;
    ?active=true keeps active carriers only.
    """

    queryset = Carrier.objects.all().order_by('name')
    serializer_class = CarrierSerializer
    permission_classes = [IsAdminUser]
    filterset_class = CarrierFilter
    pagination_class = None
    not_found_message = 'Carrier not found'

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        return self.envelope(self.get_serializer(queryset, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return self.envelope(self.get_serializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        carrier = serializer.save(created_by=request.user)

        log_request_audit(
            request, AuditAction.CARRIER_CREATED, 'Carrier', entity_id=carrier.pk,
            new_data=serializer.data,
        )
        return self.envelope(serializer.data, message='Carrier created successfully',
                             status_code=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        carrier = self.get_object()
        previous = CarrierSerializer(carrier).data

        serializer = self.get_serializer(carrier, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        log_request_audit(
            request, AuditAction.CARRIER_UPDATED, 'Carrier', entity_id=carrier.pk,
            previous_data=previous, new_data=serializer.data,
        )
        return self.envelope(serializer.data, message='Carrier updated successfully')

    def destroy(self, request, *args, **kwargs):
        carrier = self.get_object()
        previous = CarrierSerializer(carrier).data
        carrier_id = carrier.pk
        carrier.delete()

        log_request_audit(
            request, AuditAction.CARRIER_DELETED, 'Carrier', entity_id=carrier_id,
            previous_data=previous,
        )
        return self.envelope(message='Carrier deleted successfully')


class TrackingView(APIView):
    """
    Public shipment tracking.

    GET /api/tracking/?code=CRR-XXXXXXXX-XX
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        code = normalize_tracking_code(request.query_params.get('code'))

        if not code:
            return Response(
                {'success': False, 'error': 'Tracking code is required'},
                status=status.HTTP_400_BAD_REQUEST
            )
        if not is_valid_tracking_code(code):
            return Response(
                {'success': False, 'error': 'Invalid tracking code format'},
                status=status.HTTP_400_BAD_REQUEST
            )

        shipment = (
            Shipment.objects
            .select_related('carrier', 'freight_charges')
            .prefetch_related('package_images', 'tracking_events')
            .filter(tracking_code=code)
            .first()
        )
        if shipment is None:
            return Response(
                {'success': False, 'error': 'Shipment not found. Please check your tracking code.'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response({'success': True, 'data': PublicTrackingSerializer(shipment).data})
