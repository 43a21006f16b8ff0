"""
Shipments App URLs
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import ShipmentViewSet, CarrierViewSet, TrackingView

router = SimpleRouter()
router.register(r'admin/shipments', ShipmentViewSet, basename='shipment')
router.register(r'admin/carriers', CarrierViewSet, basename='carrier')

urlpatterns = [
    # Public tracking
    path('tracking/', TrackingView.as_view(), name='tracking'),

    # Admin router URLs
    path('', include(router.urls)),
]
