"""
Communications App URLs
"""

from django.urls import path

from .views import EmailLogListView, SendEmailView

urlpatterns = [
    path('admin/emails/', EmailLogListView.as_view(), name='email-list'),
    path('admin/emails/send/', SendEmailView.as_view(), name='email-send'),
]
