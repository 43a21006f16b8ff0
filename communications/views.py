"""
Communications App Views - Admin email log and custom emails
"""

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdminUser
from .filters import EmailLogFilter
from .models import EmailLog
from .resend import EmailDeliveryError
from .serializers import EmailLogSerializer, SendEmailSerializer
from .services import EmailService


class EmailLogListView(generics.ListAPIView):
    """
    GET /api/admin/emails/?page&limit&status
    """

    queryset = EmailLog.objects.select_related('related_shipment', 'sent_by').order_by('-created_at')
    serializer_class = EmailLogSerializer
    permission_classes = [IsAdminUser]
    filterset_class = EmailLogFilter


class SendEmailView(APIView):
    """
    POST /api/admin/emails/send/

    The attempt is logged either way; a provider failure answers 502.
    """

    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = SendEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = EmailService.send_email(
            data['to'],
            data['subject'],
            data['html_content'],
            sent_by=request.user,
            related_shipment=data.get('related_shipment'),
        )
        if not result.success:
            raise EmailDeliveryError(result.error)

        return Response({
            'success': True,
            'data': EmailLogSerializer(result.log).data,
            'message': 'Email sent successfully',
        }, status=status.HTTP_200_OK)
