"""
Courier Express Main URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.health import health_check, readiness_check


# ===========================================
# ADMIN SITE CUSTOMIZATION
# ===========================================
admin.site.site_header = "Courier Express Control Tower"
admin.site.site_title = "Courier Express Admin"
admin.site.index_title = "Shipments & Operations"


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'Courier Express API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'token': '/api/auth/token/',
                'refresh': '/api/auth/token/refresh/',
                'logout': '/api/auth/logout/',
                'me': '/api/auth/me/',
            },
            'public': {
                'tracking': '/api/tracking/?code=CRR-XXXXXXXX-XX',
                'quotes': '/api/quotes/',
                'settings': '/api/settings/',
                'mapbox': {
                    'autocomplete': '/api/mapbox/autocomplete/?q=',
                    'geocode': '/api/mapbox/geocode/?q=',
                },
            },
            'admin': {
                'shipments': '/api/admin/shipments/',
                'carriers': '/api/admin/carriers/',
                'quotes': '/api/admin/quotes/',
                'emails': '/api/admin/emails/',
                'uploads': '/api/admin/uploads/',
                'settings': '/api/admin/settings/',
                'password': '/api/admin/settings/password/',
            },
        }
    })


urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # Monitoring
    path('health/', health_check, name='health'),
    path('health/ready/', readiness_check, name='health-ready'),

    # API Root & Docs
    path('api/', api_root, name='api-root'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # App URLs
    path('api/', include('core.urls')),
    path('api/', include('shipments.urls')),
    path('api/', include('quotes.urls')),
    path('api/', include('communications.urls')),
    path('api/', include('integrations.urls')),
]
