"""
Courier Express Core Tests
==========================

Tests for:
1. Custom User Model (email identity, roles)
2. Company settings singleton
3. JWT authentication, logout and password change
4. Security Middleware (rate limiting, headers) and health checks
5. Audit helpers, pagination and the error envelope
"""

import uuid
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient, APIRequestFactory
from rest_framework.request import Request
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken
from rest_framework_simplejwt.tokens import RefreshToken

from core.audit import get_client_ip, log_audit
from core.exceptions import _first_message
from core.models import User, UserRole, AuditLog, AuditAction, CompanySettings
from core.pagination import StandardPagination


class TestUserModel(TestCase):
    """Tests for the custom User model."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='Admin@Example.COM',
            password='Secret123',
            name='Admin Test',
        )

    def test_email_is_lowercased(self):
        """Email should be stored lowercase."""
        self.assertEqual(self.admin.email, 'admin@example.com')
        self.assertTrue(self.admin.check_password('Secret123'))

    def test_user_uuid_primary_key(self):
        """User should have UUID as primary key."""
        self.assertIsInstance(self.admin.id, uuid.UUID)

    def test_default_role_is_admin(self):
        self.assertEqual(self.admin.role, UserRole.ADMIN)
        self.assertTrue(self.admin.is_admin)

    def test_user_without_password_cannot_log_in(self):
        user = User.objects.create_user(email='nopass@example.com', name='No Pass')
        self.assertFalse(user.has_usable_password())

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='Secret123', name='Nobody')

    def test_create_superuser(self):
        user = User.objects.create_superuser(
            email='root@example.com', password='Secret123', name='Root'
        )
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertEqual(user.role, UserRole.ADMIN)

    def test_user_str_representation(self):
        self.assertEqual(str(self.admin), 'Admin Test <admin@example.com>')


class TestCompanySettings(TestCase):
    """Tests for the CompanySettings singleton."""

    def setUp(self):
        cache.clear()

    def test_get_settings_creates_defaults(self):
        settings_obj = CompanySettings.get_settings()
        self.assertEqual(settings_obj.pk, 1)
        self.assertEqual(settings_obj.company_name, 'Courier Express')

    def test_singleton_pk_is_forced(self):
        CompanySettings.objects.create(company_name='First')
        second = CompanySettings(company_name='Second')
        second.save()
        self.assertEqual(CompanySettings.objects.count(), 1)
        self.assertEqual(CompanySettings.objects.get().company_name, 'Second')

    def test_save_invalidates_cache(self):
        CompanySettings.get_settings()
        settings_obj = CompanySettings.objects.get(pk=1)
        settings_obj.company_name = 'Renamed Express'
        settings_obj.save()
        self.assertEqual(CompanySettings.get_settings().company_name, 'Renamed Express')


class TestAuthAPI(TestCase):
    """Tests for login, logout and the current user endpoint."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )

    # ==========================================
    # Login
    # ==========================================

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/auth/token/', {
            'email': 'ADMIN@example.com',
            'password': 'Secret123',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertIn('access', data['data'])
        self.assertIn('refresh', data['data'])
        self.assertEqual(data['data']['user']['email'], 'admin@example.com')
        self.assertNotIn('password', data['data']['user'])
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.USER_LOGIN).exists())

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/auth/token/', {
            'email': 'admin@example.com',
            'password': 'wrong',
        }, format='json')

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])
        log = AuditLog.objects.get(action=AuditAction.USER_LOGIN_FAILED)
        self.assertEqual(log.user_email, 'admin@example.com')

    def test_me_requires_authentication(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])

    def test_me_returns_profile(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['name'], 'Admin Test')

    # ==========================================
    # Logout
    # ==========================================

    def test_logout_blacklists_refresh_token(self):
        refresh = RefreshToken.for_user(self.admin)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post('/api/auth/logout/', {'refresh': str(refresh)}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(BlacklistedToken.objects.count(), 1)
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.USER_LOGOUT).exists())

    def test_logout_with_invalid_token(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post('/api/auth/logout/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, 400)


class TestChangePassword(TestCase):
    """Tests for PUT /api/admin/settings/password/."""

    URL = '/api/admin/settings/password/'

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.client.force_authenticate(user=self.admin)

    def test_wrong_current_password(self):
        response = self.client.put(self.URL, {
            'current_password': 'Nope1234',
            'new_password': 'NewSecret456',
            'confirm_password': 'NewSecret456',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Current password is incorrect')

    def test_confirmation_mismatch(self):
        response = self.client.put(self.URL, {
            'current_password': 'Secret123',
            'new_password': 'NewSecret456',
            'confirm_password': 'NewSecret789',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('confirm_password', response.json()['details'])

    def test_weak_password_rejected(self):
        response = self.client.put(self.URL, {
            'current_password': 'Secret123',
            'new_password': 'alllowercase1',
            'confirm_password': 'alllowercase1',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('new_password', response.json()['details'])

    def test_password_changed(self):
        response = self.client.put(self.URL, {
            'current_password': 'Secret123',
            'new_password': 'NewSecret456',
            'confirm_password': 'NewSecret456',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Password changed successfully')
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password('NewSecret456'))


class TestCompanySettingsAPI(TestCase):
    """Tests for the admin and public settings endpoints."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )

    def test_admin_settings_require_auth(self):
        response = self.client.get('/api/admin/settings/')
        self.assertEqual(response.status_code, 401)

    def test_partial_update(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.put('/api/admin/settings/', {
            'phone': '+1 555 0100',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['phone'], '+1 555 0100')
        self.assertEqual(data['company_name'], 'Courier Express')

    def test_email_and_website_may_be_empty(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.put('/api/admin/settings/', {
            'email': '',
            'website': '',
        }, format='json')
        self.assertEqual(response.status_code, 200)

    def test_invalid_email_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.put('/api/admin/settings/', {'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_public_settings(self):
        CompanySettings.objects.create(company_name='Acme Freight', phone='123')
        response = self.client.get('/api/settings/')
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['company_name'], 'Acme Freight')
        self.assertNotIn('updated_at', data)


class TestSeedAdminCommand(TestCase):

    def test_creates_admin(self):
        out = StringIO()
        call_command('seed_admin', email='Boss@Example.com', password='Secret123', stdout=out)
        user = User.objects.get(email='boss@example.com')
        self.assertEqual(user.name, 'Admin User')
        self.assertTrue(user.check_password('Secret123'))

    def test_existing_admin_is_left_alone(self):
        User.objects.create_user(email='boss@example.com', password='Secret123', name='Boss')
        out = StringIO()
        call_command('seed_admin', email='boss@example.com', password='Other456', stdout=out)
        self.assertIn('already exists', out.getvalue())
        self.assertEqual(User.objects.count(), 1)

    def test_missing_credentials(self):
        with self.assertRaises(CommandError):
            call_command('seed_admin', email='', password='', stdout=StringIO())


class TestSecurityMiddleware(TestCase):
    """Tests for security middleware behavior."""

    def setUp(self):
        cache.clear()

    def test_health_endpoint_accessible(self):
        """Health check should be accessible without auth."""
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['service'], 'courier-express')

    def test_readiness_endpoint_accessible(self):
        response = self.client.get('/health/ready/')
        self.assertIn(response.status_code, [200, 503])
        self.assertIn('checks', response.json())

    def test_security_headers_present(self):
        response = self.client.get('/health/')
        self.assertEqual(response['X-Content-Type-Options'], 'nosniff')
        self.assertEqual(response['X-Frame-Options'], 'DENY')
        self.assertIn('Referrer-Policy', response)

    @override_settings(RATE_LIMITS={'default': (2, 60)})
    def test_rate_limit_exceeded(self):
        """Third request in the window should be rejected with 429."""
        for _ in range(2):
            response = self.client.get('/api/settings/')
            self.assertEqual(response.status_code, 200)
            self.assertIn('X-RateLimit-Remaining', response)

        response = self.client.get('/api/settings/')
        self.assertEqual(response.status_code, 429)
        self.assertFalse(response.json()['success'])
        self.assertIn('Retry-After', response)

    @override_settings(RATE_LIMITS={'default': (1, 60)})
    def test_rate_limit_is_per_ip(self):
        self.client.get('/api/settings/', REMOTE_ADDR='10.0.0.1')
        response = self.client.get('/api/settings/', REMOTE_ADDR='10.0.0.2')
        self.assertEqual(response.status_code, 200)

    @override_settings(RATE_LIMIT_ENABLED=False, RATE_LIMITS={'default': (1, 60)})
    def test_rate_limit_can_be_disabled(self):
        for _ in range(3):
            response = self.client.get('/api/settings/')
            self.assertEqual(response.status_code, 200)

    def test_non_api_paths_not_limited(self):
        response = self.client.get('/health/')
        self.assertNotIn('X-RateLimit-Limit', response)


class TestAuditHelpers(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()

    def test_client_ip_from_forwarded_header(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.5, 10.0.0.1')
        self.assertEqual(get_client_ip(request), '203.0.113.5')

    def test_client_ip_from_real_ip_header(self):
        request = self.factory.get('/', HTTP_X_REAL_IP='198.51.100.7')
        self.assertEqual(get_client_ip(request), '198.51.100.7')

    def test_log_audit_records_entry(self):
        admin = User.objects.create_user(email='admin@example.com', password='Secret123', name='Admin')
        log = log_audit(
            AuditAction.SHIPMENT_CREATED, 'Shipment', entity_id='abc',
            user=admin, new_data={'tracking_code': 'CRR-ABCDEF12-XY'},
        )
        self.assertIsNotNone(log)
        self.assertEqual(log.user_email, 'admin@example.com')
        self.assertEqual(log.new_data['tracking_code'], 'CRR-ABCDEF12-XY')

    def test_log_audit_ignores_anonymous_user(self):
        from django.contrib.auth.models import AnonymousUser
        log = log_audit(AuditAction.QUOTE_CREATED, 'Quote', user=AnonymousUser())
        self.assertIsNone(log.user)


class TestPaginationAndErrors(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()
        for i in range(25):
            User.objects.create_user(email=f'user{i}@example.com', name=f'User {i}')

    def _paginate(self, query):
        paginator = StandardPagination()
        request = Request(self.factory.get('/', query))
        page = paginator.paginate_queryset(User.objects.order_by('email'), request)
        return paginator, page

    def test_defaults(self):
        paginator, page = self._paginate({})
        self.assertEqual(len(page), 20)
        body = paginator.get_paginated_response([]).data
        self.assertEqual(body['pagination'], {'total': 25, 'page': 1, 'limit': 20, 'total_pages': 2})

    def test_invalid_values_fall_back(self):
        paginator, _ = self._paginate({'page': 'abc', 'limit': '500'})
        self.assertEqual(paginator.page, 1)
        self.assertEqual(paginator.limit, 20)

    def test_page_past_end_is_empty(self):
        _, page = self._paginate({'page': 9, 'limit': 10})
        self.assertEqual(page, [])

    def test_first_message(self):
        self.assertEqual(_first_message({'email': ['Enter a valid email address.']}),
                         'email: Enter a valid email address.')
        self.assertEqual(_first_message({'non_field_errors': ['Bad input']}), 'Bad input')
        self.assertEqual(_first_message({'detail': 'Not found.'}), 'Not found.')
