"""
Courier Express Integrations Tests
==================================

Tests for:
1. Mapbox client and proxy endpoints
2. Cloudinary signing, upload and deletion
3. Admin upload endpoint
"""

import hashlib
from unittest import mock

import cloudinary.exceptions
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.models import User, AuditLog, AuditAction
from shipments.models import Shipment, PackageImage
from integrations.cloudinary import CloudinaryService, CloudinaryNotConfiguredError, UploadError
from integrations.mapbox import MapboxService, MapboxNotConfiguredError

CLOUDINARY_SETTINGS = {
    'CLOUDINARY_CLOUD_NAME': 'demo',
    'CLOUDINARY_API_KEY': '123456',
    'CLOUDINARY_API_SECRET': 'secret',
    'CLOUDINARY_UPLOAD_FOLDER': 'courier',
}

MAPBOX_FEATURE = {
    'id': 'place.123',
    'place_name': 'London, Greater London, England, United Kingdom',
    'text': 'London',
    'center': [-0.1276, 51.5072],
    'relevance': 0.98,
}


def http_response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = str(payload)
    return response


def make_shipment():
    return Shipment.objects.create(
        tracking_code='CRR-ABCD1234-XY',
        sender_name='Sam Sender', sender_phone='+15550101',
        sender_email='sam@example.com', sender_address='1 Origin Street',
        receiver_name='Rita Receiver', receiver_phone='+15550102',
        receiver_email='rita@example.com', receiver_address='2 Destination Road',
        package_weight=2.5, package_length=30, package_width=20, package_height=10,
        origin='Lagos, Nigeria', destination='London, UK',
    )


# ===========================================
# MAPBOX
# ===========================================

@override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
class TestMapboxService(TestCase):

    @mock.patch('integrations.mapbox.requests.get')
    def test_autocomplete_parameters(self, mock_get):
        mock_get.return_value = http_response(payload={'features': [MAPBOX_FEATURE]})

        features = MapboxService().autocomplete('London Bridge')

        self.assertEqual(features, [MAPBOX_FEATURE])
        args, kwargs = mock_get.call_args
        self.assertTrue(args[0].endswith('/mapbox.places/London%20Bridge.json'))
        self.assertEqual(kwargs['params']['access_token'], 'pk.test')
        self.assertEqual(kwargs['params']['autocomplete'], 'true')
        self.assertEqual(kwargs['params']['limit'], 8)
        self.assertEqual(kwargs['params']['types'], 'address,place,locality,region,country')
        self.assertEqual(kwargs['params']['language'], 'en')

    @mock.patch('integrations.mapbox.requests.get')
    def test_geocode_best_match(self, mock_get):
        mock_get.return_value = http_response(payload={'features': [MAPBOX_FEATURE]})

        result = MapboxService().geocode('London')

        self.assertEqual(result['coordinates'], {'lat': 51.5072, 'lng': -0.1276})
        self.assertEqual(result['relevance'], 0.98)
        self.assertEqual(mock_get.call_args[1]['params']['limit'], 1)

    @mock.patch('integrations.mapbox.requests.get')
    def test_geocode_no_match(self, mock_get):
        mock_get.return_value = http_response(payload={'features': []})
        self.assertIsNone(MapboxService().geocode('Nowhere at all'))

    def test_not_configured(self):
        with self.assertRaises(MapboxNotConfiguredError):
            MapboxService(access_token='').autocomplete('London')


class TestMapboxAPI(TestCase):
    """Tests for the public /api/mapbox/ proxy."""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    @override_settings(MAPBOX_ACCESS_TOKEN='')
    def test_not_configured(self):
        response = self.client.get('/api/mapbox/autocomplete/?q=London')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['error'], 'Mapbox service not configured')

    @override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
    def test_query_length(self):
        response = self.client.get('/api/mapbox/autocomplete/?q=L')
        self.assertEqual(response.status_code, 400)

        response = self.client.get('/api/mapbox/geocode/?q=' + 'x' * 201)
        self.assertEqual(response.status_code, 400)

    @override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
    @mock.patch('integrations.mapbox.requests.get')
    def test_autocomplete(self, mock_get):
        mock_get.return_value = http_response(payload={'features': [MAPBOX_FEATURE]})

        response = self.client.get('/api/mapbox/autocomplete/?q=London')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Cache-Control'], 'public, max-age=300')
        self.assertEqual(response.json()['data']['features'][0]['id'], 'place.123')

    @override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
    @mock.patch('integrations.mapbox.requests.get')
    def test_geocode(self, mock_get):
        mock_get.return_value = http_response(payload={'features': [MAPBOX_FEATURE]})

        response = self.client.get('/api/mapbox/geocode/?q=London')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Cache-Control'], 'public, max-age=3600')
        self.assertEqual(response.json()['data']['place_name'], MAPBOX_FEATURE['place_name'])

    @override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
    @mock.patch('integrations.mapbox.requests.get')
    def test_geocode_not_found(self, mock_get):
        mock_get.return_value = http_response(payload={'features': []})

        response = self.client.get('/api/mapbox/geocode/?q=Nowhere')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Address not found')

    @override_settings(MAPBOX_ACCESS_TOKEN='pk.test')
    @mock.patch('integrations.mapbox.requests.get')
    def test_provider_failure(self, mock_get):
        mock_get.return_value = http_response(status_code=401, payload={'message': 'Not Authorized'})

        response = self.client.get('/api/mapbox/autocomplete/?q=London')

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()['error'], 'Address lookup failed')


# ===========================================
# CLOUDINARY
# ===========================================

@override_settings(**CLOUDINARY_SETTINGS)
class TestCloudinaryService(TestCase):

    UPLOAD_RESULT = {
        'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1/courier/package_images/box.png',
        'public_id': 'courier/package_images/box',
    }

    @mock.patch('integrations.cloudinary.time.time', return_value=1700000000)
    def test_signature_payload(self, mock_time):
        payload = CloudinaryService().generate_upload_signature()

        self.assertEqual(payload['cloud_name'], 'demo')
        self.assertEqual(payload['api_key'], '123456')
        self.assertEqual(payload['folder'], 'courier/package_images')
        self.assertEqual(payload['timestamp'], 1700000000)
        self.assertEqual(payload['constraints']['max_bytes'], 5 * 1024 * 1024)
        self.assertIn('webp', payload['constraints']['allowed_formats'])
        # Sorted params joined with '&', secret appended, SHA-1
        expected = hashlib.sha1(b'folder=courier/package_images&timestamp=1700000000secret').hexdigest()
        self.assertEqual(payload['signature'], expected)

    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_upload(self, mock_upload):
        mock_upload.return_value = self.UPLOAD_RESULT

        result = CloudinaryService().upload('data:image/png;base64,iVBORw0KGgo=', 'box.png')

        self.assertEqual(result, {'url': self.UPLOAD_RESULT['secure_url'], 'public_id': 'courier/package_images/box'})
        args, kwargs = mock_upload.call_args
        self.assertEqual(args[0], 'data:image/png;base64,iVBORw0KGgo=')
        self.assertEqual(kwargs['folder'], 'courier/package_images')
        self.assertEqual(kwargs['resource_type'], 'auto')
        self.assertTrue(kwargs['public_id'].endswith('_box'))
        self.assertEqual(kwargs['cloud_name'], 'demo')
        self.assertEqual(kwargs['api_secret'], 'secret')

    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_upload_without_filename_lets_cloudinary_pick_id(self, mock_upload):
        mock_upload.return_value = self.UPLOAD_RESULT

        CloudinaryService().upload('https://example.com/box.png')

        self.assertNotIn('public_id', mock_upload.call_args[1])

    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_upload_error(self, mock_upload):
        mock_upload.side_effect = cloudinary.exceptions.Error('Invalid image file')

        with self.assertRaises(UploadError) as ctx:
            CloudinaryService().upload('data:image/png;base64,xxx')
        self.assertEqual(ctx.exception.message, 'Invalid image file')

    @override_settings(CLOUDINARY_API_SECRET='')
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_upload_not_configured(self, mock_upload):
        with self.assertRaises(CloudinaryNotConfiguredError):
            CloudinaryService().upload('data:image/png;base64,xxx')
        mock_upload.assert_not_called()

    @mock.patch('integrations.cloudinary.cloudinary.uploader.destroy')
    def test_delete(self, mock_destroy):
        mock_destroy.return_value = {'result': 'ok'}

        self.assertTrue(CloudinaryService().delete('courier/package_images/box'))
        args, kwargs = mock_destroy.call_args
        self.assertEqual(args[0], 'courier/package_images/box')
        self.assertEqual(kwargs['api_key'], '123456')

    @mock.patch('integrations.cloudinary.cloudinary.uploader.destroy')
    def test_delete_not_found_counts_as_success(self, mock_destroy):
        mock_destroy.return_value = {'result': 'not found'}
        self.assertTrue(CloudinaryService().delete('courier/package_images/gone'))

    @mock.patch('integrations.cloudinary.cloudinary.uploader.destroy')
    def test_delete_failure(self, mock_destroy):
        mock_destroy.return_value = {'result': 'error'}
        with self.assertRaises(UploadError):
            CloudinaryService().delete('courier/package_images/box')

    @mock.patch('integrations.cloudinary.cloudinary.uploader.destroy')
    def test_delete_sdk_error(self, mock_destroy):
        mock_destroy.side_effect = cloudinary.exceptions.Error('Server returned unexpected status code - 500')
        with self.assertRaises(UploadError):
            CloudinaryService().delete('courier/package_images/box')


class TestUploadAPI(TestCase):
    """Tests for POST /api/admin/uploads/."""

    UPLOAD_RESULT = {
        'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1/courier/package_images/box.png',
        'public_id': 'courier/package_images/box',
    }

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@example.com', password='Secret123', name='Admin Test'
        )
        self.client.force_authenticate(user=self.admin)
        self.shipment = make_shipment()

    @override_settings(**CLOUDINARY_SETTINGS)
    def test_signature_request(self):
        response = self.client.post('/api/admin/uploads/', {}, format='json')

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['folder'], 'courier/package_images')
        self.assertIn('signature', data)

    @override_settings(CLOUDINARY_CLOUD_NAME='', CLOUDINARY_API_KEY='', CLOUDINARY_API_SECRET='')
    def test_not_configured(self):
        response = self.client.post('/api/admin/uploads/', {}, format='json')
        self.assertEqual(response.status_code, 503)

    @override_settings(**CLOUDINARY_SETTINGS)
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_base64_upload_attached_to_shipment(self, mock_upload):
        mock_upload.return_value = self.UPLOAD_RESULT

        response = self.client.post('/api/admin/uploads/', {
            'file': 'data:image/png;base64,iVBORw0KGgo=',
            'filename': 'box.png',
            'shipment_id': str(self.shipment.pk),
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['public_id'], 'courier/package_images/box')
        image = PackageImage.objects.get(shipment=self.shipment)
        self.assertEqual(image.url, self.UPLOAD_RESULT['secure_url'])
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.FILE_UPLOADED).exists())

    @override_settings(**CLOUDINARY_SETTINGS)
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_image_limit(self, mock_upload):
        for i in range(5):
            PackageImage.objects.create(shipment=self.shipment, url=f'https://img.test/{i}.png', public_id=f'img{i}')

        response = self.client.post('/api/admin/uploads/', {
            'file': 'data:image/png;base64,iVBORw0KGgo=',
            'shipment_id': str(self.shipment.pk),
        }, format='json')

        self.assertEqual(response.status_code, 400)
        mock_upload.assert_not_called()

    @override_settings(**CLOUDINARY_SETTINGS)
    def test_unknown_shipment(self):
        response = self.client.post('/api/admin/uploads/', {
            'file': 'data:image/png;base64,iVBORw0KGgo=',
            'shipment_id': '00000000-0000-0000-0000-000000000000',
        }, format='json')
        self.assertEqual(response.status_code, 404)

    @override_settings(**CLOUDINARY_SETTINGS)
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_multipart_upload(self, mock_upload):
        mock_upload.return_value = self.UPLOAD_RESULT
        photo = SimpleUploadedFile('box.png', b'\x89PNG fake image', content_type='image/png')

        response = self.client.post('/api/admin/uploads/', {'file': photo}, format='multipart')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['filename'], 'box.png')
        uploaded = mock_upload.call_args[0][0]
        self.assertEqual(uploaded.name, 'box.png')
        self.assertTrue(mock_upload.call_args[1]['public_id'].endswith('_box'))

    @override_settings(**CLOUDINARY_SETTINGS)
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_multipart_wrong_format(self, mock_upload):
        document = SimpleUploadedFile('invoice.pdf', b'%PDF-1.4', content_type='application/pdf')

        response = self.client.post('/api/admin/uploads/', {'file': document}, format='multipart')

        self.assertEqual(response.status_code, 400)
        mock_upload.assert_not_called()

    @override_settings(**CLOUDINARY_SETTINGS)
    @mock.patch('integrations.cloudinary.MAX_UPLOAD_BYTES', 10)
    @mock.patch('integrations.cloudinary.cloudinary.uploader.upload')
    def test_multipart_too_large(self, mock_upload):
        photo = SimpleUploadedFile('big.jpg', b'x' * 20, content_type='image/jpeg')

        response = self.client.post('/api/admin/uploads/', {'file': photo}, format='multipart')

        self.assertEqual(response.status_code, 400)
        mock_upload.assert_not_called()

    def test_requires_admin(self):
        self.client.force_authenticate(user=None)
        response = self.client.post('/api/admin/uploads/', {}, format='json')
        self.assertEqual(response.status_code, 401)
