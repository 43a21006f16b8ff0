"""
Mapbox Geocoding client for Courier Express

The access token stays on the server; the public site goes through the
/api/mapbox/ proxy views.
"""

import logging
import requests
from typing import List, Optional
from urllib.parse import quote
from django.conf import settings
from rest_framework import status

from core.exceptions import ServiceError

logger = logging.getLogger(__name__)


class MapboxNotConfiguredError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Mapbox service not configured'


class MapboxServiceError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = 'Address lookup failed'


class MapboxService:
    """
    Mapbox Geocoding API v5 (mapbox.places).

    API Documentation: https://docs.mapbox.com/api/search/geocoding-v5/
    """

    AUTOCOMPLETE_LIMIT = 8
    AUTOCOMPLETE_TYPES = 'address,place,locality,region,country'
    GEOCODE_TYPES = 'country,region,district,place,locality,neighborhood,address,postcode'
    TIMEOUT = 10

    def __init__(self, access_token=None, base_url=None):
        self.access_token = access_token if access_token is not None else settings.MAPBOX_ACCESS_TOKEN
        self.base_url = (base_url or settings.MAPBOX_GEOCODING_URL).rstrip('/')

    def _query(self, q: str, params: dict, error_message: str) -> dict:
        if not self.access_token:
            raise MapboxNotConfiguredError()

        url = f"{self.base_url}/{quote(q, safe='')}.json"
        try:
            response = requests.get(
                url,
                params={'access_token': self.access_token, **params},
                timeout=self.TIMEOUT
            )
        except requests.RequestException as e:
            logger.error(f"[MAPBOX] Request failed for '{q}': {e}")
            raise MapboxServiceError(error_message)

        if response.status_code != 200:
            logger.error(f"[MAPBOX] API error {response.status_code}: {response.text[:200]}")
            raise MapboxServiceError(error_message)

        return response.json()

    def autocomplete(self, q: str) -> List[dict]:
        """Address suggestions as raw Mapbox features (up to 8)."""
        data = self._query(q, {
            'autocomplete': 'true',
            'limit': self.AUTOCOMPLETE_LIMIT,
            'types': self.AUTOCOMPLETE_TYPES,
            'fuzzyMatch': 'true',
            'language': 'en',
        }, 'Address lookup failed')
        return data.get('features') or []

    def geocode(self, q: str) -> Optional[dict]:
        """
        Best match for an address.

        Returns:
            {'place_name', 'coordinates': {'lat', 'lng'}, 'relevance'} or None
        """
        data = self._query(q, {
            'limit': 1,
            'types': self.GEOCODE_TYPES,
        }, 'Geocoding failed')

        features = data.get('features') or []
        if not features:
            return None

        feature = features[0]
        lng, lat = feature['center'][0], feature['center'][1]
        return {
            'place_name': feature.get('place_name', ''),
            'coordinates': {'lat': lat, 'lng': lng},
            'relevance': feature.get('relevance') or 1,
        }
