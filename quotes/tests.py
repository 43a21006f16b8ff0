"""
Courier Express Quotes Tests
============================

Tests for:
1. Quote estimator (dimensional weight, minimums, insurance, handling)
2. Delivery windows
3. Public quote request API
4. Admin quote handling (list, respond, convert, delete)
"""

from datetime import timedelta
from decimal import Decimal
from unittest import mock
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import User, AuditLog, AuditAction
from shipments.constants import ServiceType
from quotes.models import Quote, QuoteStatus
from quotes.pricing import (
    QuoteEstimator, quote_estimator,
    get_estimated_delivery_days, calculate_estimated_delivery_date
)


def make_quote(**kwargs):
    data = {
        'name': 'Jane Customer',
        'email': 'jane@example.com',
        'phone': '+15550100',
        'origin': 'Lagos, Nigeria',
        'destination': 'London, UK',
        'package_weight': 2.0,
        'package_length': 10,
        'package_width': 10,
        'package_height': 10,
        'package_value': Decimal('100.00'),
        'package_description': 'Documents',
        'service_type': ServiceType.STANDARD,
        'estimated_price': Decimal('17.00'),
    }
    data.update(kwargs)
    return Quote.objects.create(**data)


def quote_payload(**package):
    package_details = {
        'weight': 2,
        'dimensions': {'length': 10, 'width': 10, 'height': 10},
        'value': 0,
        'description': 'Documents',
    }
    package_details.update(package)
    return {
        'name': 'Jane Customer',
        'email': 'Jane@Example.com',
        'phone': '+15550100',
        'origin': 'Lagos, Nigeria',
        'destination': 'London, UK',
        'package_details': package_details,
        'service_type': 'STANDARD',
    }


class TestQuoteEstimator(TestCase):
    """Tests for QuoteEstimator.calculate_estimate."""

    def setUp(self):
        self.estimator = QuoteEstimator()

    def test_dimensional_weight(self):
        self.assertEqual(self.estimator.calculate_dimensional_weight(50, 40, 30), Decimal('12'))

    def test_chargeable_weight_is_the_heavier(self):
        self.assertEqual(self.estimator.get_chargeable_weight(20, 10, 10, 10), Decimal('20'))
        self.assertEqual(self.estimator.get_chargeable_weight(1, 50, 40, 30), Decimal('12'))

    def test_minimum_charge_applies(self):
        """2kg STANDARD = 10.00 before the 15.00 minimum."""
        estimate = self.estimator.calculate_estimate(2, (10, 10, 10), ServiceType.STANDARD)

        self.assertEqual(estimate.base_charge, Decimal('15.00'))
        self.assertEqual(estimate.insurance_fee, Decimal('0.00'))
        self.assertEqual(estimate.handling_fee, Decimal('0.00'))
        self.assertEqual(estimate.total_estimate, Decimal('15.00'))
        self.assertEqual(len(estimate.breakdown), 2)

    def test_high_value_express_shipment(self):
        """12kg dimensional x 12 x 1.5 = 216, + 2% of 1500 + 25 handling."""
        estimate = self.estimator.calculate_estimate(
            10, (50, 40, 30), ServiceType.EXPRESS, value=Decimal('1500')
        )

        self.assertEqual(estimate.dimensional_weight, Decimal('12.00'))
        self.assertEqual(estimate.chargeable_weight, Decimal('12.00'))
        self.assertEqual(estimate.base_charge, Decimal('216.00'))
        self.assertEqual(estimate.insurance_fee, Decimal('30.00'))
        self.assertEqual(estimate.handling_fee, Decimal('25.00'))
        self.assertEqual(estimate.total_estimate, Decimal('271.00'))
        self.assertEqual(
            [line['label'] for line in estimate.breakdown],
            ['Shipping charge', 'Insurance (2%)', 'High-value handling']
        )

    def test_no_handling_fee_at_threshold(self):
        estimate = self.estimator.calculate_estimate(1, (1, 1, 1), ServiceType.STANDARD, value=1000)
        self.assertEqual(estimate.handling_fee, Decimal('0.00'))
        self.assertEqual(estimate.insurance_fee, Decimal('20.00'))

    def test_rounding_half_up(self):
        estimate = quote_estimator.calculate_estimate('3.333', (1, 1, 1), ServiceType.STANDARD)
        self.assertEqual(estimate.base_charge, Decimal('16.67'))

    def test_economy_multiplier(self):
        estimate = quote_estimator.calculate_estimate(10, (1, 1, 1), ServiceType.ECONOMY)
        self.assertEqual(estimate.base_charge, Decimal('28.00'))

    def test_quick_estimate(self):
        self.assertEqual(
            quote_estimator.get_quick_estimate(1, (1, 1, 1), ServiceType.SAME_DAY),
            Decimal('75.00')
        )


class TestDeliveryWindows(TestCase):

    def test_known_services(self):
        self.assertEqual(get_estimated_delivery_days(ServiceType.SAME_DAY), {'min': 0, 'max': 1})
        self.assertEqual(get_estimated_delivery_days(ServiceType.EXPRESS), {'min': 1, 'max': 3})
        self.assertEqual(get_estimated_delivery_days(ServiceType.ECONOMY), {'min': 10, 'max': 21})

    def test_unknown_service_uses_standard_window(self):
        self.assertEqual(get_estimated_delivery_days('TELEPORT'), {'min': 5, 'max': 10})

    def test_delivery_date_is_today_plus_max(self):
        expected = timezone.now().date() + timedelta(days=4)
        self.assertEqual(calculate_estimated_delivery_date(ServiceType.PRIORITY), expected)


class TestQuoteRequestAPI(TestCase):
    """Tests for POST /api/quotes/."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_submit_quote(self):
        response = self.client.post('/api/quotes/', quote_payload(), format='json')

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['message'], 'Quote request submitted successfully')
        self.assertEqual(body['data']['status'], 'PENDING')
        self.assertEqual(body['data']['estimated_price'], 15.0)
        self.assertEqual(body['data']['estimated_delivery'], {'min': 5, 'max': 10})

        quote = Quote.objects.get(pk=body['data']['id'])
        self.assertEqual(quote.email, 'jane@example.com')
        self.assertEqual(quote.package_length, 10)
        self.assertEqual(quote.package_description, 'Documents')
        self.assertTrue(AuditLog.objects.filter(
            action=AuditAction.QUOTE_CREATED, entity_id=str(quote.pk)
        ).exists())

    def test_value_defaults_to_zero(self):
        payload = quote_payload()
        del payload['package_details']['value']
        response = self.client.post('/api/quotes/', payload, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Quote.objects.get().package_value, Decimal('0'))

    def test_description_required(self):
        payload = quote_payload()
        del payload['package_details']['description']
        response = self.client.post('/api/quotes/', payload, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertEqual(Quote.objects.count(), 0)

    def test_zero_weight_rejected(self):
        response = self.client.post('/api/quotes/', quote_payload(weight=0), format='json')
        self.assertEqual(response.status_code, 400)

    def test_service_type_required(self):
        payload = quote_payload()
        del payload['service_type']
        response = self.client.post('/api/quotes/', payload, format='json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_email(self):
        payload = quote_payload()
        payload['email'] = 'not-an-email'
        response = self.client.post('/api/quotes/', payload, format='json')
        self.assertEqual(response.status_code, 400)


class TestAdminQuoteAPI(TestCase):
    """Tests for /api/admin/quotes/."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.client.force_authenticate(user=self.admin)
        self.quote = make_quote()

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/admin/quotes/')
        self.assertEqual(response.status_code, 401)

    def test_list_quotes(self):
        make_quote(status=QuoteStatus.RESPONDED, service_type=ServiceType.EXPRESS)

        response = self.client.get('/api/admin/quotes/')
        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body['pagination']['total'], 2)

        response = self.client.get('/api/admin/quotes/?status=PENDING')
        body = response.json()
        self.assertEqual(body['pagination']['total'], 1)
        self.assertEqual(body['data'][0]['id'], str(self.quote.pk))
        self.assertEqual(body['data'][0]['package_details']['dimensions']['length'], 10)

        response = self.client.get('/api/admin/quotes/?service_type=EXPRESS')
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_retrieve_quote(self):
        response = self.client.get(f'/api/admin/quotes/{self.quote.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status_label'], 'Pending')

    def test_retrieve_missing_quote(self):
        response = self.client.get('/api/admin/quotes/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Quote not found')

    @mock.patch('communications.tasks.send_quote_response_email_task.delay')
    def test_respond_to_quote(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/respond/', {
                'estimated_price': '120.50',
                'admin_response': 'We can ship this next week.',
            }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Quote response sent successfully')

        self.quote.refresh_from_db()
        self.assertEqual(self.quote.status, QuoteStatus.RESPONDED)
        self.assertEqual(self.quote.estimated_price, Decimal('120.50'))
        self.assertEqual(self.quote.responded_by, self.admin)
        self.assertIsNotNone(self.quote.responded_at)
        mock_delay.assert_called_once_with(str(self.quote.pk), str(self.admin.pk))
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.QUOTE_RESPONDED).exists())

    @mock.patch('communications.tasks.send_quote_response_email_task.delay')
    def test_respond_only_once(self, mock_delay):
        self.quote.status = QuoteStatus.RESPONDED
        self.quote.save()

        response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/respond/', {
            'estimated_price': '99',
            'admin_response': 'Again',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Quote has already been responded')
        mock_delay.assert_not_called()

    def test_respond_validation(self):
        response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/respond/', {
            'estimated_price': '0',
            'admin_response': 'Free',
        }, format='json')
        self.assertEqual(response.status_code, 400)

        response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/respond/', {
            'estimated_price': '10',
            'admin_response': 'x' * 1001,
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_convert_quote(self):
        response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/convert/')
        self.assertEqual(response.status_code, 200)
        self.quote.refresh_from_db()
        self.assertEqual(self.quote.status, QuoteStatus.CONVERTED)
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.QUOTE_CONVERTED).exists())

        response = self.client.post(f'/api/admin/quotes/{self.quote.pk}/convert/')
        self.assertEqual(response.status_code, 400)

    def test_delete_quote(self):
        response = self.client.delete(f'/api/admin/quotes/{self.quote.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Quote.objects.filter(pk=self.quote.pk).exists())
