from django_filters import rest_framework as filters

from shipments.constants import ServiceType
from .models import Quote, QuoteStatus


class QuoteFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=QuoteStatus.choices)
    service_type = filters.ChoiceFilter(choices=ServiceType.choices)

    class Meta:
        model = Quote
        fields = ['status', 'service_type']
