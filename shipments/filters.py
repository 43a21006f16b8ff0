"""
Query filters for the admin shipment and carrier lists.
"""

from django_filters import rest_framework as filters
from django.db.models import Q

from .constants import ShipmentStatus, ServiceType
from .models import Shipment, Carrier


class ShipmentFilter(filters.FilterSet):
    """?status=&service_type=&search= (search is a case-insensitive substring match)."""

    status = filters.ChoiceFilter(choices=ShipmentStatus.choices)
    service_type = filters.ChoiceFilter(choices=ServiceType.choices)
    search = filters.CharFilter(method='filter_search')

    class Meta:
        model = Shipment
        fields = ['status', 'service_type']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(tracking_code__icontains=value)
            | Q(sender_name__icontains=value)
            | Q(receiver_name__icontains=value)
            | Q(origin__icontains=value)
            | Q(destination__icontains=value)
        )


class CarrierFilter(filters.FilterSet):
    active = filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = Carrier
        fields = ['active']
