from django.contrib import admin
from .models import EmailLog


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    """Read-only view of the email log."""

    list_display = ('subject', 'to', 'status', 'related_shipment', 'sent_by', 'created_at')
    list_filter = ('status',)
    search_fields = ('to', 'subject', 'related_shipment__tracking_code')
    readonly_fields = [f.name for f in EmailLog._meta.fields]
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False
