"""
Integrations App URLs
"""

from django.urls import path

from .views import MapboxAutocompleteView, MapboxGeocodeView, UploadView

urlpatterns = [
    # Public geocoding proxy
    path('mapbox/autocomplete/', MapboxAutocompleteView.as_view(), name='mapbox-autocomplete'),
    path('mapbox/geocode/', MapboxGeocodeView.as_view(), name='mapbox-geocode'),

    # Admin uploads
    path('admin/uploads/', UploadView.as_view(), name='upload'),
]
