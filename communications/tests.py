"""
Courier Express Communications Tests
====================================

Tests for:
1. Resend client
2. EmailService (logging, template emails)
3. Notification tasks
4. Admin email API
"""

from decimal import Decimal
from unittest import mock
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.models import User, AuditLog, AuditAction
from shipments.constants import ShipmentStatus, get_email_status_emoji
from shipments.models import Shipment
from quotes.models import Quote, QuoteStatus
from communications.models import EmailLog, EmailStatus
from communications.resend import ResendClient, EmailDeliveryError
from communications.services import EmailService
from communications.tasks import (
    send_shipment_created_email_task,
    send_status_update_email_task,
    send_quote_response_email_task,
)


def make_shipment(**kwargs):
    data = {
        'tracking_code': 'CRR-ABCD1234-XY',
        'sender_name': 'Sam Sender',
        'sender_phone': '+15550101',
        'sender_email': 'sam@example.com',
        'sender_address': '1 Origin Street',
        'receiver_name': 'Rita Receiver',
        'receiver_phone': '+15550102',
        'receiver_email': 'rita@example.com',
        'receiver_address': '2 Destination Road',
        'package_weight': 2.5,
        'package_length': 30,
        'package_width': 20,
        'package_height': 10,
        'origin': 'Lagos, Nigeria',
        'destination': 'London, UK',
    }
    data.update(kwargs)
    return Shipment.objects.create(**data)


def resend_response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {'id': 'msg_123'}
    response.text = str(payload)
    return response


@override_settings(RESEND_API_KEY='re_test_key', RESEND_FROM_EMAIL='noreply@courier.test')
class TestResendClient(TestCase):

    @mock.patch('communications.resend.requests.post')
    def test_send_success(self, mock_post):
        mock_post.return_value = resend_response()

        message_id = ResendClient().send('rita@example.com', 'Hello', '<p>Hi</p>')

        self.assertEqual(message_id, 'msg_123')
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer re_test_key')
        self.assertEqual(kwargs['json']['to'], ['rita@example.com'])
        self.assertEqual(kwargs['json']['from'], 'noreply@courier.test')

    @mock.patch('communications.resend.requests.post')
    def test_provider_error(self, mock_post):
        mock_post.return_value = resend_response(422, {'message': 'Invalid `to` field'})

        with self.assertRaises(EmailDeliveryError) as ctx:
            ResendClient().send('bad', 'Hello', '<p>Hi</p>')
        self.assertEqual(ctx.exception.message, 'Invalid `to` field')

    def test_missing_api_key(self):
        with self.assertRaises(EmailDeliveryError):
            ResendClient(api_key='').send('rita@example.com', 'Hello', '<p>Hi</p>')


class TestEmailService(TestCase):
    """Tests for EmailService.send_email and the template emails."""

    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.shipment = make_shipment()

    @override_settings(RESEND_API_KEY='')
    def test_failure_is_logged_not_raised(self):
        result = EmailService.send_email('rita@example.com', 'Hello', '<p>Hi</p>', sent_by=self.admin)

        self.assertFalse(result.success)
        self.assertIn('RESEND_API_KEY', result.error)
        log = EmailLog.objects.get()
        self.assertEqual(log.status, EmailStatus.FAILED)
        self.assertEqual(log.sent_by, self.admin)
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.EMAIL_FAILED).exists())

    @override_settings(RESEND_API_KEY='re_test_key')
    @mock.patch('communications.resend.requests.post')
    def test_success_is_logged(self, mock_post):
        mock_post.return_value = resend_response()

        result = EmailService.send_email(
            ['a@example.com', 'b@example.com'], 'Hello', '<p>Hi</p>',
            related_shipment=self.shipment,
        )

        self.assertTrue(result.success)
        self.assertEqual(result.message_id, 'msg_123')
        log = EmailLog.objects.get()
        self.assertEqual(log.status, EmailStatus.SENT)
        self.assertEqual(log.to, 'a@example.com, b@example.com')
        self.assertEqual(log.related_shipment, self.shipment)
        self.assertEqual(log.provider_message_id, 'msg_123')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.EMAIL_SENT).exists())

    @override_settings(RESEND_API_KEY='re_test_key')
    @mock.patch('communications.resend.requests.post')
    def test_accepted_without_json_body_is_sent(self, mock_post):
        response = resend_response()
        response.json.side_effect = ValueError('Expecting value')
        response.text = 'OK'
        mock_post.return_value = response

        result = EmailService.send_email('rita@example.com', 'Hello', '<p>Hi</p>')

        self.assertTrue(result.success)
        self.assertEqual(result.message_id, '')
        log = EmailLog.objects.get()
        self.assertEqual(log.status, EmailStatus.SENT)
        self.assertEqual(log.provider_message_id, '')

    @override_settings(RESEND_API_KEY='', SITE_URL='https://courier.test')
    def test_status_update_email_content(self):
        result = EmailService.send_status_update_email(
            self.shipment, ShipmentStatus.IN_TRANSIT, 'Paris Hub', 'Departed hub'
        )

        log = result.log
        self.assertEqual(log.to, 'rita@example.com')
        self.assertTrue(log.subject.startswith(get_email_status_emoji(ShipmentStatus.IN_TRANSIT)))
        self.assertIn('Shipment CRR-ABCD1234-XY Update: IN TRANSIT', log.subject)
        self.assertIn('https://courier.test/track?code=CRR-ABCD1234-XY', log.html_content)
        self.assertIn('#f59e0b', log.html_content)
        self.assertIn('Departed hub', log.html_content)
        self.assertNotIn('has been delivered', log.html_content)

    @override_settings(RESEND_API_KEY='')
    def test_delivered_email_has_banner(self):
        result = EmailService.send_status_update_email(self.shipment, ShipmentStatus.DELIVERED, 'London')
        self.assertIn('Your package has been delivered', result.log.html_content)

    @override_settings(RESEND_API_KEY='')
    def test_unknown_status_uses_defaults(self):
        result = EmailService.send_status_update_email(self.shipment, ShipmentStatus.STORED, 'Warehouse')
        self.assertTrue(result.log.subject.startswith('📍'))
        self.assertIn('#6b7280', result.log.html_content)

    @override_settings(RESEND_API_KEY='')
    def test_shipment_created_email(self):
        result = EmailService.send_shipment_created_email(self.shipment)

        self.assertIn('CRR-ABCD1234-XY', result.log.subject)
        self.assertIn('Rita Receiver', result.log.html_content)
        self.assertIn('Lagos, Nigeria', result.log.html_content)


@override_settings(RESEND_API_KEY='')
class TestNotificationTasks(TestCase):

    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.shipment = make_shipment()

    def test_shipment_created_task(self):
        result = send_shipment_created_email_task(str(self.shipment.pk), str(self.admin.pk))

        self.assertFalse(result)
        log = EmailLog.objects.get()
        self.assertEqual(log.related_shipment, self.shipment)
        self.assertEqual(log.sent_by, self.admin)

    def test_status_task_for_missing_shipment(self):
        result = send_status_update_email_task(
            '00000000-0000-0000-0000-000000000000', ShipmentStatus.IN_TRANSIT, 'Paris'
        )
        self.assertFalse(result)
        self.assertEqual(EmailLog.objects.count(), 0)

    def test_quote_response_task(self):
        quote = Quote.objects.create(
            name='Jane Customer', email='jane@example.com', phone='+15550100',
            origin='Lagos', destination='London',
            package_weight=1, package_length=1, package_width=1, package_height=1,
            package_description='Docs', estimated_price=Decimal('42.50'),
            status=QuoteStatus.RESPONDED, admin_response='Ready when you are',
        )

        send_quote_response_email_task(str(quote.pk))

        log = EmailLog.objects.get()
        self.assertEqual(log.to, 'jane@example.com')
        self.assertIn('Lagos → London', log.subject)
        self.assertIn('$42.50', log.html_content)
        self.assertIn('Ready when you are', log.html_content)
        self.assertIsNone(log.related_shipment)


class TestAdminEmailAPI(TestCase):
    """Tests for /api/admin/emails/."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.client.force_authenticate(user=self.admin)
        self.shipment = make_shipment()

    @override_settings(RESEND_API_KEY='re_test_key')
    @mock.patch('communications.resend.requests.post')
    def test_send_email(self, mock_post):
        mock_post.return_value = resend_response()

        response = self.client.post('/api/admin/emails/send/', {
            'to': 'rita@example.com',
            'subject': 'Your parcel',
            'html_content': '<p>On its way</p>',
            'related_shipment_id': str(self.shipment.pk),
        }, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['status'], 'SENT')
        self.assertEqual(data['related_shipment']['tracking_code'], 'CRR-ABCD1234-XY')
        self.assertEqual(data['sent_by']['email'], 'admin@example.com')

    @override_settings(RESEND_API_KEY='re_test_key')
    @mock.patch('communications.resend.requests.post')
    def test_send_email_provider_failure(self, mock_post):
        mock_post.return_value = resend_response(403, {'message': 'Domain not verified'})

        response = self.client.post('/api/admin/emails/send/', {
            'to': 'rita@example.com',
            'subject': 'Your parcel',
            'html_content': '<p>On its way</p>',
        }, format='json')

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()['error'], 'Domain not verified')
        self.assertEqual(EmailLog.objects.get().status, EmailStatus.FAILED)

    def test_send_email_validation(self):
        response = self.client.post('/api/admin/emails/send/', {
            'to': 'not-an-email',
            'subject': '',
            'html_content': '<p>x</p>',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_list_emails_with_status_filter(self):
        EmailLog.objects.create(to='a@example.com', subject='A', html_content='a', status=EmailStatus.SENT)
        EmailLog.objects.create(to='b@example.com', subject='B', html_content='b', status=EmailStatus.FAILED)

        response = self.client.get('/api/admin/emails/')
        self.assertEqual(response.json()['pagination']['total'], 2)

        response = self.client.get('/api/admin/emails/?status=FAILED')
        body = response.json()
        self.assertEqual(body['pagination']['total'], 1)
        self.assertEqual(body['data'][0]['subject'], 'B')

    def test_requires_admin(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/admin/emails/')
        self.assertEqual(response.status_code, 401)
