"""
Core App Serializers - Admin users, authentication and company settings
"""

import re
from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import CompanySettings

User = get_user_model()

PASSWORD_STRENGTH_REGEX = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read operations). Never exposes the password."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'is_active', 'date_joined', 'updated_at']
        read_only_fields = fields


class AdminTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT login by email; the address is matched case-insensitively."""

    def validate(self, attrs):
        attrs[self.username_field] = attrs.get(self.username_field, '').strip().lower()
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for the admin password change form."""

    current_password = serializers.CharField(
        write_only=True,
        error_messages={'blank': 'Current password is required'}
    )
    new_password = serializers.CharField(
        write_only=True,
        min_length=8,
        error_messages={'min_length': 'New password must be at least 8 characters'}
    )
    confirm_password = serializers.CharField(
        write_only=True,
        error_messages={'blank': 'Please confirm your new password'}
    )

    def validate_new_password(self, value):
        if not PASSWORD_STRENGTH_REGEX.match(value):
            raise serializers.ValidationError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value

    def validate(self, data):
        if data['new_password'] != data['confirm_password']:
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match'})
        return data


class CompanySettingsSerializer(serializers.ModelSerializer):
    """Serializer for the company settings singleton."""

    company_name = serializers.CharField(max_length=200, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    website = serializers.URLField(required=False, allow_blank=True)

    class Meta:
        model = CompanySettings
        fields = ['company_name', 'office_address', 'phone', 'email', 'website', 'updated_at']
        read_only_fields = ['updated_at']
