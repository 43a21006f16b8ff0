from django_filters import rest_framework as filters

from .models import EmailLog, EmailStatus


class EmailLogFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=EmailStatus.choices)

    class Meta:
        model = EmailLog
        fields = ['status']
