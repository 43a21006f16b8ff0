from django.contrib import admin
from .models import Quote


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'origin', 'destination', 'service_type', 'estimated_price', 'status', 'created_at')
    list_filter = ('status', 'service_type')
    search_fields = ('name', 'email', 'origin', 'destination')
    readonly_fields = ('responded_by', 'responded_at', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Contact', {
            'fields': ('name', 'email', 'phone')
        }),
        ('Request', {
            'fields': ('origin', 'destination', 'service_type',
                       'package_weight', 'package_length', 'package_width', 'package_height',
                       'package_value', 'package_currency', 'package_description')
        }),
        ('Response', {
            'fields': ('status', 'estimated_price', 'admin_response', 'responded_by', 'responded_at')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
