"""
Django Admin configuration for SHIPMENTS app.
"""

from django.contrib import admin
from .models import Carrier, Shipment, FreightCharges, PackageImage, TrackingEvent


class FreightChargesInline(admin.StackedInline):
    model = FreightCharges
    can_delete = True
    extra = 0


class PackageImageInline(admin.TabularInline):
    model = PackageImage
    extra = 0
    max_num = 5
    readonly_fields = ('uploaded_at',)


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    extra = 0
    fields = ('status', 'location', 'description', 'created_at')
    readonly_fields = ('created_at',)
    ordering = ('-created_at',)


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    """Admin for shipments with freight, images and tracking history inline."""

    list_display = (
        'tracking_code', 'status', 'service_type', 'sender_name',
        'receiver_name', 'origin', 'destination', 'created_at'
    )
    list_filter = ('status', 'service_type', 'shipment_type', 'shipment_mode')
    search_fields = ('tracking_code', 'sender_name', 'receiver_name', 'origin', 'destination')
    readonly_fields = ('tracking_code', 'created_by', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'
    inlines = [FreightChargesInline, PackageImageInline, TrackingEventInline]

    fieldsets = (
        (None, {
            'fields': ('tracking_code', 'status', 'current_location', 'estimated_delivery_date')
        }),
        ('Classification', {
            'fields': ('consignment_type', 'shipment_type', 'shipment_mode', 'service_type')
        }),
        ('Sender', {
            'fields': ('sender_name', 'sender_phone', 'sender_email', 'sender_address',
                       'sender_latitude', 'sender_longitude'),
            'classes': ('collapse',)
        }),
        ('Receiver', {
            'fields': ('receiver_name', 'receiver_phone', 'receiver_email', 'receiver_address',
                       'receiver_latitude', 'receiver_longitude'),
            'classes': ('collapse',)
        }),
        ('Package', {
            'fields': ('package_weight', 'package_length', 'package_width', 'package_height',
                       'package_value', 'package_currency', 'package_description')
        }),
        ('Route', {
            'fields': ('origin', 'destination',
                       'origin_city', 'origin_state', 'origin_country', 'origin_latitude', 'origin_longitude',
                       'destination_city', 'destination_state', 'destination_country',
                       'destination_latitude', 'destination_longitude')
        }),
        ('Carrier', {
            'fields': ('carrier', 'carrier_tracking_code')
        }),
        ('Audit', {
            'fields': ('created_by', 'created_at', 'updated_at'),
        }),
    )


@admin.register(Carrier)
class CarrierAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'contact_email', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'code')
    ordering = ('name',)


@admin.register(TrackingEvent)
class TrackingEventAdmin(admin.ModelAdmin):
    list_display = ('shipment', 'status', 'location', 'created_at')
    list_filter = ('status',)
    search_fields = ('shipment__tracking_code', 'location')
    raw_id_fields = ('shipment',)
