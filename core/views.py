"""
Core App Views - Authentication, admin account and company settings API
"""

import logging
from rest_framework import status, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from .audit import log_request_audit
from .models import AuditAction, CompanySettings
from .permissions import IsAdminUser
from .serializers import (
    AdminTokenObtainPairSerializer, LogoutSerializer, UserSerializer,
    ChangePasswordSerializer, CompanySettingsSerializer
)

logger = logging.getLogger(__name__)


class AdminTokenObtainPairView(TokenObtainPairView):
    """
    Admin login. Returns an access/refresh token pair and the user profile.
    Successful and failed attempts are written to the audit log.
    """

    serializer_class = AdminTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        email = str(request.data.get('email', '')).strip().lower()

        try:
            serializer.is_valid(raise_exception=True)
        except Exception:
            log_request_audit(
                request, AuditAction.USER_LOGIN_FAILED, 'User',
                user_email=email if '@' in email else '',
                metadata={'email': email},
            )
            logger.warning(f"[AUTH] Failed login for {email}")
            raise

        user = serializer.user
        log_request_audit(
            request, AuditAction.USER_LOGIN, 'User', entity_id=user.pk,
            user_email=user.email,
        )
        return Response({'success': True, 'data': serializer.validated_data})


class LogoutView(APIView):
    """Blacklist the refresh token of the current session."""

    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError as e:
            return Response(
                {'success': False, 'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        log_request_audit(request, AuditAction.USER_LOGOUT, 'User', entity_id=request.user.pk)
        return Response({'success': True, 'message': 'Logged out successfully'})


class MeView(APIView):
    """Profile of the signed-in admin."""

    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response({'success': True, 'data': UserSerializer(request.user).data})


class ChangePasswordView(APIView):
    """
    PUT /api/admin/settings/password/

    Verify the current password, then store the new one.
    """

    permission_classes = [IsAdminUser]

    def put(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.check_password(serializer.validated_data['current_password']):
            return Response(
                {'success': False, 'error': 'Current password is incorrect'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user.set_password(serializer.validated_data['new_password'])
        user.save(update_fields=['password', 'updated_at'])
        logger.info(f"[AUTH] Password changed for {user.email}")

        return Response({'success': True, 'message': 'Password changed successfully'})


class CompanySettingsView(APIView):
    """GET/PUT the company settings (admin)."""

    permission_classes = [IsAdminUser]

    def get(self, request):
        settings_obj = CompanySettings.get_settings()
        return Response({'success': True, 'data': CompanySettingsSerializer(settings_obj).data})

    def put(self, request):
        settings_obj, _ = CompanySettings.objects.get_or_create(pk=1)
        serializer = CompanySettingsSerializer(settings_obj, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({
            'success': True,
            'data': serializer.data,
            'message': 'Settings updated successfully',
        })


class PublicCompanySettingsView(APIView):
    """Public company contact details for the marketing site."""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        settings_obj = CompanySettings.get_settings()
        data = CompanySettingsSerializer(settings_obj).data
        data.pop('updated_at', None)
        return Response({'success': True, 'data': data})
