"""
Cloudinary upload client for Courier Express

Package images live in <CLOUDINARY_UPLOAD_FOLDER>/package_images. The admin
dashboard either uploads through the server or asks for a signature and
uploads directly.
"""

import logging
import os
import time
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils
from django.conf import settings
from rest_framework import status

from core.exceptions import ServiceError

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = ['jpg', 'jpeg', 'png', 'gif', 'webp']
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB per image


class UploadError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Upload failed'


class CloudinaryNotConfiguredError(UploadError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Upload service not configured'


class InvalidUploadError(UploadError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid file'


def validate_upload_file(uploaded_file):
    """Reject files over 5MB or with an extension outside ALLOWED_FORMATS."""
    if uploaded_file.size > MAX_UPLOAD_BYTES:
        raise InvalidUploadError(f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB)")

    extension = os.path.splitext(uploaded_file.name or '')[1].lower().lstrip('.')
    if extension not in ALLOWED_FORMATS:
        raise InvalidUploadError(f"Unsupported file format. Allowed: {', '.join(ALLOWED_FORMATS)}")


class CloudinaryService:
    """
    Signed uploads and deletions through the Cloudinary SDK.

    Credentials come from settings and are passed with every call, so the
    SDK's global configuration is never relied upon.
    """

    def __init__(self, cloud_name=None, api_key=None, api_secret=None):
        self.cloud_name = cloud_name if cloud_name is not None else settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key if api_key is not None else settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.CLOUDINARY_API_SECRET
        self.folder = f"{settings.CLOUDINARY_UPLOAD_FOLDER}/package_images"

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def credentials(self) -> dict:
        return {
            'cloud_name': self.cloud_name,
            'api_key': self.api_key,
            'api_secret': self.api_secret,
        }

    def _require_config(self):
        if not self.is_configured:
            raise CloudinaryNotConfiguredError()

    def generate_upload_signature(self) -> dict:
        """Signature payload for a direct upload from the browser."""
        self._require_config()
        timestamp = int(time.time())
        signature = cloudinary.utils.api_sign_request(
            {'timestamp': timestamp, 'folder': self.folder},
            self.api_secret
        )
        return {
            'signature': signature,
            'timestamp': timestamp,
            'cloud_name': self.cloud_name,
            'api_key': self.api_key,
            'folder': self.folder,
            'constraints': {
                'allowed_formats': list(ALLOWED_FORMATS),
                'max_bytes': MAX_UPLOAD_BYTES,
            },
        }

    def upload(self, file, filename: Optional[str] = None) -> dict:
        """
        Upload a file.

        Args:
            file: base64 data URI / remote URL string, or an uploaded file object
            filename: used to build the public_id (extension dropped)

        Returns:
            {'url': secure_url, 'public_id': public_id}
        """
        self._require_config()

        options = {'folder': self.folder, 'resource_type': 'auto'}
        if filename:
            options['public_id'] = f"{int(time.time() * 1000)}_{os.path.splitext(filename)[0]}"

        try:
            result = cloudinary.uploader.upload(file, **options, **self.credentials)
        except cloudinary.exceptions.Error as e:
            logger.error(f"[CLOUDINARY] Upload error: {e}")
            raise UploadError(str(e) or None)

        logger.info(f"[CLOUDINARY] Uploaded {result.get('public_id')}")
        return {'url': result.get('secure_url'), 'public_id': result.get('public_id')}

    def delete(self, public_id: str) -> bool:
        """Delete an image. 'ok' and 'not found' both count as success."""
        self._require_config()

        try:
            result = cloudinary.uploader.destroy(public_id, **self.credentials)
        except cloudinary.exceptions.Error as e:
            logger.error(f"[CLOUDINARY] Delete error for {public_id}: {e}")
            raise UploadError(str(e) or None)

        outcome = result.get('result')
        if outcome in ('ok', 'not found'):
            logger.info(f"[CLOUDINARY] Deleted {public_id} ({outcome})")
            return True
        raise UploadError(f"Deletion failed: {outcome}")
