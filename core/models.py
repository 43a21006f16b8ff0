"""
CORE App - Admin users, audit trail and company settings for Courier Express

Handles: Users (Admins), AuditLog, CompanySettings (singleton)
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinLengthValidator
from django.db import models
from django.utils import timezone


class UserRole(models.TextChoices):
    """User role enumeration."""
    ADMIN = 'ADMIN', 'Administrator'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email address is required')

        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Dashboard user, identified by email.

    Only admins exist: there is no public registration. The password hash
    is handled by Django's hashers and is never exposed by serializers.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=100,
        validators=[MinLengthValidator(2)],
        verbose_name="Full name"
    )
    email = models.EmailField(unique=True, verbose_name="Email address")
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.ADMIN,
        verbose_name="Role"
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class AuditAction(models.TextChoices):
    """Auditable actions."""
    SHIPMENT_CREATED = 'SHIPMENT_CREATED', 'Shipment created'
    SHIPMENT_UPDATED = 'SHIPMENT_UPDATED', 'Shipment updated'
    SHIPMENT_DELETED = 'SHIPMENT_DELETED', 'Shipment deleted'
    SHIPMENT_STATUS_CHANGED = 'SHIPMENT_STATUS_CHANGED', 'Shipment status changed'
    QUOTE_CREATED = 'QUOTE_CREATED', 'Quote created'
    QUOTE_RESPONDED = 'QUOTE_RESPONDED', 'Quote responded'
    QUOTE_CONVERTED = 'QUOTE_CONVERTED', 'Quote converted'
    CARRIER_CREATED = 'CARRIER_CREATED', 'Carrier created'
    CARRIER_UPDATED = 'CARRIER_UPDATED', 'Carrier updated'
    CARRIER_DELETED = 'CARRIER_DELETED', 'Carrier deleted'
    PAYMENT_RECORDED = 'PAYMENT_RECORDED', 'Payment recorded'
    PAYMENT_UPDATED = 'PAYMENT_UPDATED', 'Payment updated'
    EMAIL_SENT = 'EMAIL_SENT', 'Email sent'
    EMAIL_FAILED = 'EMAIL_FAILED', 'Email failed'
    USER_LOGIN = 'USER_LOGIN', 'User login'
    USER_LOGOUT = 'USER_LOGOUT', 'User logout'
    USER_LOGIN_FAILED = 'USER_LOGIN_FAILED', 'User login failed'
    FILE_UPLOADED = 'FILE_UPLOADED', 'File uploaded'
    FILE_DELETED = 'FILE_DELETED', 'File deleted'


class AuditLog(models.Model):
    """
    Append-only audit trail of admin and public actions.

    Written through core.audit.log_audit, which never raises.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    action = models.CharField(
        max_length=40,
        choices=AuditAction.choices,
        db_index=True,
        verbose_name="Action"
    )
    entity_type = models.CharField(max_length=50, db_index=True, verbose_name="Entity type")
    entity_id = models.CharField(max_length=64, blank=True, db_index=True, verbose_name="Entity ID")

    user = models.ForeignKey(
        'core.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name="User"
    )
    user_email = models.EmailField(blank=True, verbose_name="User email")
    ip_address = models.CharField(max_length=64, blank=True, verbose_name="IP address")
    user_agent = models.CharField(max_length=500, blank=True, verbose_name="User agent")

    previous_data = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_data = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    metadata = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = "Audit log"
        verbose_name_plural = "Audit logs"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['user', '-created_at'], name='audit_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"


class CompanySettings(models.Model):
    """
    Company contact details shown on the public site and in emails.
    Singleton: there is only ever one row (pk=1).
    """

    CACHE_KEY = 'company_settings'

    company_name = models.CharField(
        max_length=200,
        default='Courier Express',
        verbose_name="Company name"
    )
    office_address = models.CharField(max_length=500, blank=True, default='', verbose_name="Office address")
    phone = models.CharField(max_length=50, blank=True, default='', verbose_name="Phone")
    email = models.EmailField(blank=True, default='', verbose_name="Email")
    website = models.URLField(blank=True, default='', verbose_name="Website")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Company settings"
        verbose_name_plural = "Company settings"

    def __str__(self):
        return self.company_name

    def save(self, *args, **kwargs):
        """Enforce singleton: only one settings instance."""
        self.pk = 1
        super().save(*args, **kwargs)
        from django.core.cache import cache
        cache.delete(self.CACHE_KEY)

    @classmethod
    def get_settings(cls):
        """Get the company settings (cached), creating defaults if missing."""
        from django.core.cache import cache

        settings_obj = cache.get(cls.CACHE_KEY)
        if settings_obj is None:
            settings_obj, _ = cls.objects.get_or_create(pk=1)
            cache.set(cls.CACHE_KEY, settings_obj, 600)
        return settings_obj
