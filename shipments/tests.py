"""
Courier Express Shipments Tests
===============================

Tests for:
1. Tracking codes and status lookup tables
2. Route progress and map arcs
3. Models (shipment, carrier, freight, tracking events)
4. Admin shipment API (create, list, edit, status, events, delete)
5. Admin carrier API
6. Public tracking
"""

from datetime import timedelta
from decimal import Decimal
from unittest import mock
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import User, AuditLog, AuditAction
from shipments.constants import (
    ShipmentStatus, Currency, humanize_status, get_status_label,
    get_status_description, get_status_badge_class, get_email_status_color,
    get_email_status_emoji, format_currency
)
from shipments.models import Carrier, Shipment, FreightCharges, PackageImage, TrackingEvent
from shipments.progress import (
    calculate_progress, has_left_origin, generate_arc_points, covered_points, build_route
)
from shipments.services import ShipmentService, ImageLimitError, TrackingCodeGenerationError
from shipments.utils import generate_tracking_code, is_valid_tracking_code, normalize_tracking_code

CREATED_TASK = 'communications.tasks.send_shipment_created_email_task.delay'
STATUS_TASK = 'communications.tasks.send_status_update_email_task.delay'


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


def shipment_payload(**overrides):
    payload = {
        'service_type': 'EXPRESS',
        'shipment_mode': 'AIR',
        'sender': {
            'name': 'Sam Sender',
            'phone': '+15550101',
            'email': 'Sam@Example.com',
            'address': '1 Origin Street',
            'coordinates': {'lat': 6.5244, 'lng': 3.3792},
        },
        'receiver': {
            'name': 'Rita Receiver',
            'phone': '+15550102',
            'email': 'rita@example.com',
            'address': '2 Destination Road',
            'coordinates': {'latitude': 51.5072, 'longitude': -0.1276},
        },
        'package': {
            'weight': 2.5,
            'dimensions': {'length': 30, 'width': 20, 'height': 10},
            'value': '250.00',
            'currency': 'EUR',
            'description': 'Books',
        },
        'origin': 'Lagos, Nigeria',
        'destination': 'London, UK',
    }
    payload.update(overrides)
    return payload


class AdminAPITestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.client.force_authenticate(user=self.admin)


# ===========================================
# TRACKING CODES & LOOKUP TABLES
# ===========================================

class TestTrackingCodes(TestCase):

    def test_generated_code_format(self):
        for _ in range(20):
            code = generate_tracking_code()
            self.assertTrue(is_valid_tracking_code(code), code)

    def test_normalize(self):
        self.assertEqual(normalize_tracking_code('  crr-abcd1234-xy '), 'CRR-ABCD1234-XY')
        self.assertEqual(normalize_tracking_code(None), '')

    def test_invalid_codes(self):
        self.assertFalse(is_valid_tracking_code('CRR-ABC-XY'))
        self.assertFalse(is_valid_tracking_code('XYZ-ABCD1234-XY'))
        self.assertFalse(is_valid_tracking_code(''))
        self.assertTrue(is_valid_tracking_code('crr-abcd1234-xy'))

    @mock.patch('shipments.services.generate_tracking_code', return_value='CRR-ABCD1234-XY')
    def test_collisions_exhaust_attempts(self, _):
        make_shipment()
        with self.assertRaises(TrackingCodeGenerationError):
            ShipmentService.generate_unique_tracking_code()


class TestStatusTables(TestCase):

    def test_labels(self):
        self.assertEqual(get_status_label(ShipmentStatus.IN_TRANSIT), 'In Transit')
        self.assertEqual(get_status_label('LOST_IN_SPACE'), 'LOST IN SPACE')
        self.assertEqual(humanize_status('OUT_FOR_DELIVERY'), 'OUT FOR DELIVERY')

    def test_every_status_has_description_and_badge(self):
        for status in ShipmentStatus.values:
            self.assertTrue(get_status_description(status), status)
            self.assertTrue(get_status_badge_class(status).startswith('bg-'), status)

    def test_email_style_defaults(self):
        self.assertEqual(get_email_status_color(ShipmentStatus.DELIVERED), '#10b981')
        self.assertEqual(get_email_status_color(ShipmentStatus.STORED), '#6b7280')
        self.assertEqual(get_email_status_emoji(ShipmentStatus.STORED), '📍')

    def test_format_currency(self):
        self.assertEqual(format_currency(12.5, Currency.EUR), '€12.50')
        self.assertEqual(format_currency('0.005', Currency.USD), '$0.01')
        self.assertEqual(format_currency(3, 'XYZ'), 'XYZ3.00')


# ===========================================
# ROUTE PROGRESS
# ===========================================

class TestProgress(TestCase):

    def test_status_progress(self):
        self.assertEqual(calculate_progress(ShipmentStatus.CREATED), 0.0)
        self.assertEqual(calculate_progress(ShipmentStatus.IN_TRANSIT), 0.5)
        self.assertEqual(calculate_progress(ShipmentStatus.DELIVERED), 1.0)
        self.assertEqual(calculate_progress('UNKNOWN'), 0.0)

    def test_has_left_origin(self):
        self.assertFalse(has_left_origin(ShipmentStatus.PICKED_UP))
        self.assertFalse(has_left_origin(ShipmentStatus.CANCELLED))
        self.assertTrue(has_left_origin(ShipmentStatus.IN_TRANSIT))

    def test_arc_endpoints_are_exact(self):
        points = generate_arc_points((0.0, 0.0), (10.0, 0.0), num_points=10)

        self.assertEqual(len(points), 11)
        self.assertEqual(points[0], (0.0, 0.0))
        self.assertAlmostEqual(points[-1][0], 10.0)
        self.assertAlmostEqual(points[-1][1], 0.0)
        # Midpoint raised by |delta lng| * 0.15
        self.assertAlmostEqual(points[5][1], 1.5)

    def test_arc_height_is_capped(self):
        points = generate_arc_points((-170.0, 0.0), (170.0, 0.0), num_points=2)
        self.assertAlmostEqual(points[1][1], 15.0)

    def test_arc_needs_one_segment(self):
        with self.assertRaises(ValueError):
            generate_arc_points((0, 0), (1, 1), num_points=0)

    def test_covered_points(self):
        points = list(range(51))
        self.assertEqual(covered_points(points, 0.0), [0])
        self.assertEqual(len(covered_points(points, 0.5)), 26)
        self.assertEqual(len(covered_points(points, 1.0)), 51)

    def test_build_route_requires_both_ends(self):
        self.assertIsNone(build_route(None, (1.0, 1.0), ShipmentStatus.IN_TRANSIT))

        route = build_route((3.38, 6.52), (-0.13, 51.51), ShipmentStatus.IN_TRANSIT)
        self.assertEqual(route['origin'], {'lng': 3.38, 'lat': 6.52})
        self.assertEqual(route['progress'], 0.5)
        self.assertTrue(route['has_left_origin'])
        self.assertEqual(len(route['arc']), 51)
        self.assertEqual(len(route['covered']), 26)


# ===========================================
# MODELS
# ===========================================

class TestShipmentModels(TestCase):

    def test_codes_and_emails_normalized(self):
        shipment = make_shipment(tracking_code='crr-abcd1234-xy', receiver_email='Rita@Example.COM')
        self.assertEqual(shipment.tracking_code, 'CRR-ABCD1234-XY')
        self.assertEqual(shipment.receiver_email, 'rita@example.com')

    def test_points_fall_back_to_contacts(self):
        shipment = make_shipment(sender_latitude=6.5, sender_longitude=3.4)
        self.assertEqual(shipment.origin_point, (3.4, 6.5))
        self.assertIsNone(shipment.destination_point)

        shipment.origin_latitude, shipment.origin_longitude = 9.0, 7.5
        self.assertEqual(shipment.origin_point, (7.5, 9.0))

    def test_carrier_code_uppercase_and_tracking_url(self):
        carrier = Carrier.objects.create(
            name='DHL Express', code=' dhl ',
            tracking_url_template='https://dhl.test/track?id={trackingCode}'
        )
        self.assertEqual(carrier.code, 'DHL')
        self.assertEqual(carrier.get_tracking_url('JD0001'), 'https://dhl.test/track?id=JD0001')

        carrier.tracking_url_template = ''
        self.assertIsNone(carrier.get_tracking_url('JD0001'))

    def test_freight_total(self):
        total = FreightCharges.compute_total(
            base_charge=100, fuel_surcharge=10, handling_fee=5,
            insurance_fee='2.50', customs_duty=0, tax=7, discount=20
        )
        self.assertEqual(total, Decimal('104.50'))
        self.assertEqual(FreightCharges.compute_total(10, discount=50), Decimal('0.00'))

    def test_event_default_description(self):
        shipment = make_shipment()
        event = TrackingEvent.objects.create(
            shipment=shipment, status=ShipmentStatus.IN_TRANSIT, location='Paris'
        )
        self.assertEqual(event.description, 'Package is in transit')

    def test_image_limit(self):
        shipment = make_shipment()
        for i in range(5):
            ShipmentService.attach_image(shipment, f'https://img.test/{i}.png', f'img{i}')
        with self.assertRaises(ImageLimitError):
            ShipmentService.attach_image(shipment, 'https://img.test/6.png', 'img6')


# ===========================================
# ADMIN SHIPMENT API
# ===========================================

class TestShipmentCreateAPI(AdminAPITestCase):
    """Tests for POST /api/admin/shipments/."""

    @mock.patch(CREATED_TASK)
    def test_create_shipment(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post('/api/admin/shipments/', shipment_payload(), format='json')

        self.assertEqual(response.status_code, 201)
        body = response.json()
        data = body['data']
        self.assertTrue(is_valid_tracking_code(data['tracking_code']))
        self.assertEqual(body['message'], f"Shipment created with tracking code: {data['tracking_code']}")
        self.assertEqual(data['status'], 'CREATED')
        self.assertEqual(data['current_location'], 'Lagos, Nigeria')
        self.assertEqual(data['sender']['email'], 'sam@example.com')
        self.assertEqual(data['sender']['coordinates'], {'lat': 6.5244, 'lng': 3.3792})
        self.assertEqual(data['receiver']['coordinates'], {'lat': 51.5072, 'lng': -0.1276})
        self.assertEqual(data['package']['dimensions'], {'length': 30.0, 'width': 20.0, 'height': 10.0})
        self.assertEqual(data['package']['currency'], 'EUR')
        self.assertEqual(data['created_by']['email'], 'admin@example.com')

        # EXPRESS delivers within 3 days
        expected_date = timezone.now().date() + timedelta(days=3)
        self.assertEqual(data['estimated_delivery_date'], expected_date.isoformat())

        self.assertEqual(len(data['tracking_events']), 1)
        event = data['tracking_events'][0]
        self.assertEqual(event['status'], 'CREATED')
        self.assertEqual(event['location'], 'Lagos, Nigeria')
        self.assertEqual(event['description'], 'Shipment has been created and is being processed')

        mock_delay.assert_called_once_with(data['id'], str(self.admin.pk))
        self.assertTrue(AuditLog.objects.filter(
            action=AuditAction.SHIPMENT_CREATED, entity_id=data['id']
        ).exists())

    @mock.patch(CREATED_TASK)
    def test_create_without_notification(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                '/api/admin/shipments/', shipment_payload(send_notification=False), format='json'
            )
        self.assertEqual(response.status_code, 201)
        mock_delay.assert_not_called()

    @mock.patch(CREATED_TASK)
    def test_create_with_freight_and_images(self, mock_delay):
        payload = shipment_payload(
            freight_charges={'base_charge': '100.00', 'tax': '7.50', 'discount': '2.50'},
            package_images=[
                {'url': 'https://img.test/1.png', 'public_id': 'img1'},
                {'url': 'https://img.test/2.png', 'public_id': 'img2'},
            ],
        )
        response = self.client.post('/api/admin/shipments/', payload, format='json')

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['freight_charges']['total'], 105.0)
        self.assertEqual(data['freight_charges']['payment_status'], 'PENDING')
        self.assertEqual(len(data['package_images']), 2)

    def test_too_many_images(self):
        images = [{'url': f'https://img.test/{i}.png', 'public_id': f'img{i}'} for i in range(6)]
        response = self.client.post(
            '/api/admin/shipments/', shipment_payload(package_images=images), format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Shipment.objects.count(), 0)

    def test_validation_errors(self):
        payload = shipment_payload()
        payload['sender']['email'] = 'not-an-email'
        response = self.client.post('/api/admin/shipments/', payload, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

        payload = shipment_payload()
        payload['receiver']['coordinates'] = {'lat': 95, 'lng': 0}
        response = self.client.post('/api/admin/shipments/', payload, format='json')
        self.assertEqual(response.status_code, 400)

        payload = shipment_payload()
        payload['package']['dimensions']['height'] = 0
        response = self.client.post('/api/admin/shipments/', payload, format='json')
        self.assertEqual(response.status_code, 400)

    def test_requires_admin(self):
        self.client.force_authenticate(user=None)
        response = self.client.post('/api/admin/shipments/', shipment_payload(), format='json')
        self.assertEqual(response.status_code, 401)


class TestShipmentListAPI(AdminAPITestCase):
    """Tests for GET /api/admin/shipments/."""

    def setUp(self):
        super().setUp()
        self.first = make_shipment(tracking_code='CRR-AAAA0001-AA', receiver_name='Alice Smith')
        self.second = make_shipment(
            tracking_code='CRR-BBBB0002-BB', receiver_name='Bob Jones',
            status=ShipmentStatus.IN_TRANSIT, service_type='EXPRESS', destination='Paris, France'
        )

    def test_list_newest_first(self):
        response = self.client.get('/api/admin/shipments/')
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body['pagination'], {'total': 2, 'page': 1, 'limit': 20, 'total_pages': 1})
        self.assertEqual(body['data'][0]['tracking_code'], 'CRR-BBBB0002-BB')

    def test_filters(self):
        response = self.client.get('/api/admin/shipments/?status=IN_TRANSIT')
        self.assertEqual([s['tracking_code'] for s in response.json()['data']], ['CRR-BBBB0002-BB'])

        response = self.client.get('/api/admin/shipments/?service_type=STANDARD')
        self.assertEqual([s['tracking_code'] for s in response.json()['data']], ['CRR-AAAA0001-AA'])

    def test_search(self):
        response = self.client.get('/api/admin/shipments/?search=alice')
        self.assertEqual(response.json()['pagination']['total'], 1)

        response = self.client.get('/api/admin/shipments/?search=paris')
        self.assertEqual(response.json()['data'][0]['tracking_code'], 'CRR-BBBB0002-BB')

        response = self.client.get('/api/admin/shipments/?search=aaaa0001')
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_pagination(self):
        response = self.client.get('/api/admin/shipments/?page=2&limit=1')
        body = response.json()
        self.assertEqual(body['pagination'], {'total': 2, 'page': 2, 'limit': 1, 'total_pages': 2})
        self.assertEqual(body['data'][0]['tracking_code'], 'CRR-AAAA0001-AA')

        response = self.client.get('/api/admin/shipments/?page=5&limit=1')
        self.assertEqual(response.json()['data'], [])

    def test_retrieve(self):
        response = self.client.get(f'/api/admin/shipments/{self.first.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['tracking_code'], 'CRR-AAAA0001-AA')

    def test_retrieve_missing(self):
        response = self.client.get('/api/admin/shipments/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Shipment not found')

        response = self.client.get('/api/admin/shipments/not-a-uuid/')
        self.assertEqual(response.status_code, 404)


class TestShipmentUpdateAPI(AdminAPITestCase):
    """Tests for edits, status changes and tracking events."""

    def setUp(self):
        super().setUp()
        self.shipment = make_shipment()
        self.event = TrackingEvent.objects.create(
            shipment=self.shipment, status=ShipmentStatus.CREATED, location='Lagos, Nigeria'
        )

    def test_partial_update(self):
        response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/', {
            'destination': 'Manchester, UK',
            'receiver': {
                'name': 'Rita Receiver',
                'phone': '+15550102',
                'email': 'new@example.com',
                'address': '3 New Road',
            },
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Shipment updated successfully')
        self.shipment.refresh_from_db()
        self.assertEqual(self.shipment.destination, 'Manchester, UK')
        self.assertEqual(self.shipment.receiver_email, 'new@example.com')
        self.assertEqual(self.shipment.sender_name, 'Sam Sender')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.SHIPMENT_UPDATED).exists())

    def test_update_replaces_and_removes_freight(self):
        FreightCharges.objects.create(shipment=self.shipment, base_charge=50, total=50)

        response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/', {
            'freight_charges': {'base_charge': '80.00', 'is_paid': True, 'payment_status': 'PAID'},
        }, format='json')
        self.assertEqual(response.json()['data']['freight_charges']['total'], 80.0)
        self.assertTrue(response.json()['data']['freight_charges']['is_paid'])

        response = self.client.patch(
            f'/api/admin/shipments/{self.shipment.pk}/', {'freight_charges': None}, format='json'
        )
        self.assertIsNone(response.json()['data']['freight_charges'])
        self.assertFalse(FreightCharges.objects.filter(shipment=self.shipment).exists())

    def test_update_freight_resets_omitted_charges(self):
        FreightCharges.objects.create(
            shipment=self.shipment, base_charge=100, fuel_surcharge=20, tax=5, total=125,
            is_paid=True, payment_status='PAID', payment_reference='TXN-1',
        )

        response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/', {
            'freight_charges': {'base_charge': '50.00'},
        }, format='json')

        self.assertEqual(response.status_code, 200)
        freight = FreightCharges.objects.get(shipment=self.shipment)
        self.assertEqual(freight.base_charge, Decimal('50.00'))
        self.assertEqual(freight.fuel_surcharge, Decimal('0.00'))
        self.assertEqual(freight.tax, Decimal('0.00'))
        self.assertEqual(freight.total, Decimal('50.00'))
        self.assertEqual(freight.total, FreightCharges.compute_total(
            freight.base_charge, freight.fuel_surcharge, freight.handling_fee, freight.insurance_fee,
            freight.customs_duty, freight.tax, freight.discount,
        ))
        self.assertFalse(freight.is_paid)
        self.assertEqual(freight.payment_reference, '')
        self.assertEqual(response.json()['data']['freight_charges']['total'], 50.0)

    def test_update_freight_audits_payment(self):
        FreightCharges.objects.create(shipment=self.shipment, base_charge=50, total=50)
        url = f'/api/admin/shipments/{self.shipment.pk}/'

        # Charges edited without touching payment
        self.client.patch(url, {'freight_charges': {'base_charge': '60.00'}}, format='json')
        self.assertFalse(AuditLog.objects.filter(entity_type='FreightCharges').exists())

        self.client.patch(url, {'freight_charges': {
            'base_charge': '60.00', 'is_paid': True, 'payment_status': 'PAID', 'payment_method': 'CASH',
        }}, format='json')
        recorded = AuditLog.objects.get(action=AuditAction.PAYMENT_RECORDED)
        self.assertEqual(recorded.entity_id, str(self.shipment.pk))
        self.assertFalse(recorded.previous_data['is_paid'])
        self.assertEqual(recorded.new_data['payment_method'], 'CASH')

        self.client.patch(url, {'freight_charges': {
            'base_charge': '60.00', 'is_paid': True, 'payment_status': 'PAID',
            'payment_method': 'BANK_TRANSFER', 'payment_reference': 'TXN-9',
        }}, format='json')
        updated = AuditLog.objects.get(action=AuditAction.PAYMENT_UPDATED)
        self.assertEqual(updated.previous_data['payment_method'], 'CASH')
        self.assertEqual(updated.new_data['payment_reference'], 'TXN-9')
        self.assertEqual(AuditLog.objects.filter(action=AuditAction.PAYMENT_RECORDED).count(), 1)

    @mock.patch(STATUS_TASK)
    def test_update_status(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/status/', {
                'status': 'IN_TRANSIT',
                'location': 'Paris Hub',
            }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Shipment status updated to IN_TRANSIT')
        self.shipment.refresh_from_db()
        self.assertEqual(self.shipment.status, ShipmentStatus.IN_TRANSIT)
        self.assertEqual(self.shipment.current_location, 'Paris Hub')

        latest = self.shipment.tracking_events.first()
        self.assertEqual(latest.description, 'Status updated to IN TRANSIT')
        self.assertEqual(self.shipment.tracking_events.count(), 2)

        mock_delay.assert_called_once_with(
            str(self.shipment.pk), 'IN_TRANSIT', 'Paris Hub', 'Status updated to IN TRANSIT', str(self.admin.pk)
        )
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.SHIPMENT_STATUS_CHANGED).exists())

    @mock.patch(STATUS_TASK)
    def test_any_status_may_follow_any_other(self, mock_delay):
        self.shipment.status = ShipmentStatus.DELIVERED
        self.shipment.save()

        response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/status/', {
            'status': 'CREATED', 'location': 'Lagos', 'description': 'Reopened'
        }, format='json')
        self.assertEqual(response.status_code, 200)

    def test_invalid_status(self):
        response = self.client.patch(f'/api/admin/shipments/{self.shipment.pk}/status/', {
            'status': 'TELEPORTED', 'location': 'Mars'
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_edit_event(self):
        response = self.client.put(
            f'/api/admin/shipments/{self.shipment.pk}/events/{self.event.pk}/',
            {'location': 'Ikeja Depot', 'description': 'Booked in'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Tracking event updated')
        self.event.refresh_from_db()
        self.assertEqual(self.event.location, 'Ikeja Depot')
        self.assertEqual(self.event.description, 'Booked in')

    def test_delete_event(self):
        response = self.client.delete(f'/api/admin/shipments/{self.shipment.pk}/events/{self.event.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(TrackingEvent.objects.filter(pk=self.event.pk).exists())

    def test_event_of_other_shipment(self):
        other = make_shipment(tracking_code='CRR-OTHER001-ZZ')
        other_event = TrackingEvent.objects.create(shipment=other, status='CREATED', location='Abuja')

        response = self.client.delete(f'/api/admin/shipments/{self.shipment.pk}/events/{other_event.pk}/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Event not found in this shipment')

        response = self.client.delete(f'/api/admin/shipments/{self.shipment.pk}/events/garbage/')
        self.assertEqual(response.status_code, 404)


class TestShipmentDeleteAPI(AdminAPITestCase):

    @mock.patch('integrations.cloudinary.CloudinaryService.delete')
    def test_delete_removes_images_and_events(self, mock_delete):
        shipment = make_shipment()
        TrackingEvent.objects.create(shipment=shipment, status='CREATED', location='Lagos')
        PackageImage.objects.create(shipment=shipment, url='https://img.test/1.png', public_id='img1')

        response = self.client.delete(f'/api/admin/shipments/{shipment.pk}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Shipment deleted successfully')
        self.assertFalse(Shipment.objects.exists())
        self.assertFalse(TrackingEvent.objects.exists())
        mock_delete.assert_called_once_with('img1')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.SHIPMENT_DELETED).exists())
        file_log = AuditLog.objects.get(action=AuditAction.FILE_DELETED)
        self.assertEqual(file_log.entity_type, 'PackageImage')
        self.assertEqual(file_log.entity_id, 'img1')
        self.assertEqual(file_log.user, self.admin)
        self.assertEqual(file_log.previous_data['url'], 'https://img.test/1.png')

    @mock.patch('integrations.cloudinary.CloudinaryService.delete')
    def test_image_failure_does_not_block_delete(self, mock_delete):
        from integrations.cloudinary import UploadError

        mock_delete.side_effect = UploadError('Deletion failed: error')
        shipment = make_shipment()
        PackageImage.objects.create(shipment=shipment, url='https://img.test/1.png', public_id='img1')

        response = self.client.delete(f'/api/admin/shipments/{shipment.pk}/')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Shipment.objects.exists())
        self.assertFalse(AuditLog.objects.filter(action=AuditAction.FILE_DELETED).exists())


# ===========================================
# ADMIN CARRIER API
# ===========================================

class TestCarrierAPI(AdminAPITestCase):
    """Tests for /api/admin/carriers/."""

    def setUp(self):
        super().setUp()
        self.dhl = Carrier.objects.create(name='DHL', code='DHL')
        self.ups = Carrier.objects.create(name='UPS', code='UPS', is_active=False)

    def test_list_sorted_not_paginated(self):
        response = self.client.get('/api/admin/carriers/')
        body = response.json()
        self.assertEqual([c['code'] for c in body['data']], ['DHL', 'UPS'])
        self.assertNotIn('pagination', body)

    def test_active_filter(self):
        response = self.client.get('/api/admin/carriers/?active=true')
        self.assertEqual([c['code'] for c in response.json()['data']], ['DHL'])

    def test_create_carrier(self):
        response = self.client.post('/api/admin/carriers/', {
            'name': 'FedEx',
            'code': 'fedex',
            'tracking_url_template': 'https://fedex.test/track/{trackingCode}',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['code'], 'FEDEX')
        self.assertEqual(response.json()['message'], 'Carrier created successfully')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.CARRIER_CREATED).exists())

    def test_duplicate_code_conflict(self):
        response = self.client.post('/api/admin/carriers/', {'name': 'DHL Again', 'code': 'dhl'}, format='json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error'], 'A carrier with this code already exists')

    def test_template_needs_placeholder(self):
        response = self.client.post('/api/admin/carriers/', {
            'name': 'Aramex', 'code': 'ARX', 'tracking_url_template': 'https://aramex.test/track'
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_update_keeps_own_code(self):
        response = self.client.patch(
            f'/api/admin/carriers/{self.dhl.pk}/', {'code': 'DHL', 'name': 'DHL Express'}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.dhl.refresh_from_db()
        self.assertEqual(self.dhl.name, 'DHL Express')

    def test_delete_carrier_keeps_shipments(self):
        shipment = make_shipment(carrier=self.dhl, carrier_tracking_code='JD0001')

        response = self.client.delete(f'/api/admin/carriers/{self.dhl.pk}/')

        self.assertEqual(response.status_code, 200)
        shipment.refresh_from_db()
        self.assertIsNone(shipment.carrier)


# ===========================================
# PUBLIC TRACKING
# ===========================================

class TestTrackingAPI(TestCase):
    """Tests for GET /api/tracking/."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        carrier = Carrier.objects.create(
            name='DHL', code='DHL', tracking_url_template='https://dhl.test/track?id={trackingCode}'
        )
        self.shipment = make_shipment(
            status=ShipmentStatus.IN_TRANSIT,
            created_by=self.admin,
            carrier=carrier,
            carrier_tracking_code='JD0001',
            shipment_mode='AIR',
            package_value=Decimal('250.00'),
            package_currency=Currency.EUR,
            origin_latitude=6.5244, origin_longitude=3.3792,
            destination_latitude=51.5072, destination_longitude=-0.1276,
        )
        older = TrackingEvent.objects.create(shipment=self.shipment, status='CREATED', location='Lagos')
        TrackingEvent.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=1))
        TrackingEvent.objects.create(shipment=self.shipment, status='IN_TRANSIT', location='Paris Hub')

    def test_track_shipment(self):
        response = self.client.get('/api/tracking/?code=crr-abcd1234-xy')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['tracking_code'], 'CRR-ABCD1234-XY')
        self.assertEqual(data['status_label'], 'In Transit')
        self.assertEqual(data['progress'], 0.5)
        self.assertEqual([e['status'] for e in data['events']], ['IN_TRANSIT', 'CREATED'])
        self.assertEqual(data['package']['dimensions']['unit'], 'cm')
        self.assertEqual(data['package']['declared_value'], {'amount': 250.0, 'currency': 'EUR'})
        self.assertEqual(data['carrier'], {
            'tracking_code': 'JD0001',
            'mode': 'AIR',
            'name': 'DHL',
            'tracking_url': 'https://dhl.test/track?id=JD0001',
        })
        self.assertIsNone(data['freight'])
        self.assertEqual(len(data['route']['covered']), 26)
        self.assertNotIn('created_by', data)
        self.assertNotIn('id', data)

    def test_freight_and_payment(self):
        FreightCharges.objects.create(
            shipment=self.shipment, base_charge=100, total=100,
            payment_method='CASH', payment_status='PAID', is_paid=True
        )
        data = self.client.get('/api/tracking/?code=CRR-ABCD1234-XY').json()['data']

        self.assertEqual(data['freight']['total'], 100.0)
        self.assertEqual(data['payment_status'], 'PAID')
        self.assertEqual(data['payment_method'], 'CASH')

    def test_missing_code(self):
        response = self.client.get('/api/tracking/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Tracking code is required')

    def test_malformed_code(self):
        response = self.client.get('/api/tracking/?code=ABC123')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid tracking code format')

    def test_unknown_code(self):
        response = self.client.get('/api/tracking/?code=CRR-ZZZZ9999-ZZ')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Shipment not found. Please check your tracking code.')
