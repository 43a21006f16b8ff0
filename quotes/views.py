"""
Quotes App Views - Public quote requests and admin quote handling
"""

from rest_framework import viewsets, mixins, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdminUser
from shipments.views import EnvelopeMixin
from .filters import QuoteFilter
from .models import Quote
from .serializers import QuoteCreateSerializer, QuoteSerializer, QuoteRespondSerializer
from .services import QuoteService


class QuoteRequestView(APIView):
    """
    Public quote request.

    POST /api/quotes/
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = QuoteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        quote, estimated_delivery = QuoteService.create_quote(serializer.validated_data, request=request)

        return Response({
            'success': True,
            'data': {
                'id': str(quote.pk),
                'status': quote.status,
                'estimated_price': quote.estimated_price,
                'estimated_delivery': estimated_delivery,
                'message': "We'll review your request and get back to you within 24 hours.",
            },
            'message': 'Quote request submitted successfully',
        }, status=status.HTTP_201_CREATED)


class QuoteViewSet(EnvelopeMixin,
                   mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   mixins.DestroyModelMixin,
                   viewsets.GenericViewSet):
    """
    Admin quote handling.

    list:     ?page&limit&status&service_type, newest first
    respond:  POST <id>/respond/ {estimated_price, admin_response}
    convert:  POST <id>/convert/
    """

    queryset = Quote.objects.select_related('responded_by').order_by('-created_at')
    serializer_class = QuoteSerializer
    permission_classes = [IsAdminUser]
    filterset_class = QuoteFilter
    not_found_message = 'Quote not found'

    def retrieve(self, request, *args, **kwargs):
        return self.envelope(self.get_serializer(self.get_object()).data)

    def destroy(self, request, *args, **kwargs):
        QuoteService.delete_quote(self.get_object())
        return self.envelope(message='Quote deleted successfully')

    @action(detail=True, methods=['post'])
    def respond(self, request, pk=None):
        quote = self.get_object()
        serializer = QuoteRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        QuoteService.respond(
            quote,
            serializer.validated_data['estimated_price'],
            serializer.validated_data['admin_response'],
            request.user,
            request=request,
        )
        return self.envelope(self.get_serializer(quote).data, message='Quote response sent successfully')

    @action(detail=True, methods=['post'])
    def convert(self, request, pk=None):
        quote = QuoteService.convert(self.get_object(), user=request.user, request=request)
        return self.envelope(self.get_serializer(quote).data, message='Quote marked as converted')
