"""
Quotes App URLs
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import QuoteViewSet, QuoteRequestView

router = SimpleRouter()
router.register(r'admin/quotes', QuoteViewSet, basename='quote')

urlpatterns = [
    # Public quote requests
    path('quotes/', QuoteRequestView.as_view(), name='quote-request'),

    path('', include(router.urls)),
]
