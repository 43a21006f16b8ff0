"""
Core App URLs
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    AdminTokenObtainPairView, LogoutView, MeView,
    ChangePasswordView, CompanySettingsView, PublicCompanySettingsView
)

urlpatterns = [
    # JWT Authentication
    path('auth/token/', AdminTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout/', LogoutView.as_view(), name='auth-logout'),
    path('auth/me/', MeView.as_view(), name='auth-me'),

    # Company settings
    path('admin/settings/', CompanySettingsView.as_view(), name='admin-settings'),
    path('admin/settings/password/', ChangePasswordView.as_view(), name='admin-change-password'),
    path('settings/', PublicCompanySettingsView.as_view(), name='public-settings'),
]
