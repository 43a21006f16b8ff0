import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ('CREATED', 'Created'), ('PICKUP_SCHEDULED', 'Pickup Scheduled'), ('PICKED_UP', 'Picked Up'),
    ('RECEIVED_AT_ORIGIN_HUB', 'Received at Origin Hub'), ('STORED', 'Stored'),
    ('READY_FOR_DISPATCH', 'Ready for Dispatch'), ('IN_TRANSIT', 'In Transit'),
    ('ARRIVED_AT_DESTINATION_HUB', 'Arrived at Destination Hub'), ('OUT_FOR_DELIVERY', 'Out for Delivery'),
    ('DELIVERED', 'Delivered'), ('ON_HOLD', 'On Hold'), ('DELIVERY_FAILED', 'Delivery Failed'),
    ('RETURNED_TO_SENDER', 'Returned to Sender'), ('CANCELLED', 'Cancelled'), ('DAMAGED', 'Damaged'),
    ('SEIZED', 'Seized'),
]

CURRENCY_CHOICES = [
    ('USD', 'US Dollar'), ('EUR', 'Euro'), ('GBP', 'British Pound'), ('CAD', 'Canadian Dollar'),
    ('AUD', 'Australian Dollar'), ('JPY', 'Japanese Yen'), ('CNY', 'Chinese Yuan'), ('INR', 'Indian Rupee'),
    ('NGN', 'Nigerian Naira'), ('ZAR', 'South African Rand'), ('AED', 'UAE Dirham'),
    ('SGD', 'Singapore Dollar'), ('CHF', 'Swiss Franc'), ('BRL', 'Brazilian Real'), ('MXN', 'Mexican Peso'),
]


def money(**kwargs):
    return models.DecimalField(
        decimal_places=2, max_digits=12,
        validators=[django.core.validators.MinValueValidator(Decimal('0'))],
        **kwargs
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Carrier',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(2)], verbose_name='Carrier name')),
                ('code', models.CharField(max_length=20, unique=True, validators=[django.core.validators.MinLengthValidator(2)], verbose_name='Carrier code')),
                ('contact_email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Contact email')),
                ('contact_phone', models.CharField(blank=True, default='', max_length=30, verbose_name='Contact phone')),
                ('website', models.URLField(blank=True, default='', verbose_name='Website')),
                ('tracking_url_template', models.CharField(blank=True, default='', help_text='Use {trackingCode} where the carrier tracking number goes', max_length=500, verbose_name='Tracking URL template')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_carriers', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
            ],
            options={
                'verbose_name': 'Carrier',
                'verbose_name_plural': 'Carriers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Shipment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tracking_code', models.CharField(max_length=20, unique=True, verbose_name='Tracking code')),
                ('consignment_type', models.CharField(choices=[('SHIPMENT', 'Shipment'), ('CONSIGNMENT', 'Consignment')], default='SHIPMENT', max_length=20, verbose_name='Consignment type')),
                ('shipment_type', models.CharField(choices=[('DOMESTIC', 'Domestic'), ('INTERNATIONAL', 'International'), ('LOCAL', 'Local'), ('IMPORT', 'Import'), ('EXPORT', 'Export')], default='DOMESTIC', max_length=20, verbose_name='Shipment type')),
                ('shipment_mode', models.CharField(choices=[('AIR', 'Air'), ('SEA', 'Sea'), ('ROAD', 'Road'), ('RAIL', 'Rail'), ('COURIER', 'Courier'), ('MULTIMODAL', 'Multimodal')], default='ROAD', max_length=20, verbose_name='Shipment mode')),
                ('service_type', models.CharField(choices=[('ECONOMY', 'Economy'), ('STANDARD', 'Standard'), ('EXPRESS', 'Express'), ('PRIORITY', 'Priority'), ('SAME_DAY', 'Same Day'), ('NEXT_DAY', 'Next Day'), ('OVERNIGHT', 'Overnight')], default='STANDARD', max_length=20, verbose_name='Service type')),
                ('sender_name', models.CharField(max_length=100, verbose_name='Sender name')),
                ('sender_phone', models.CharField(max_length=20, verbose_name='Sender phone')),
                ('sender_email', models.EmailField(max_length=254, verbose_name='Sender email')),
                ('sender_address', models.CharField(max_length=500, verbose_name='Sender address')),
                ('sender_latitude', models.FloatField(blank=True, null=True)),
                ('sender_longitude', models.FloatField(blank=True, null=True)),
                ('receiver_name', models.CharField(max_length=100, verbose_name='Receiver name')),
                ('receiver_phone', models.CharField(max_length=20, verbose_name='Receiver phone')),
                ('receiver_email', models.EmailField(max_length=254, verbose_name='Receiver email')),
                ('receiver_address', models.CharField(max_length=500, verbose_name='Receiver address')),
                ('receiver_latitude', models.FloatField(blank=True, null=True)),
                ('receiver_longitude', models.FloatField(blank=True, null=True)),
                ('package_weight', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Weight (kg)')),
                ('package_length', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Length (cm)')),
                ('package_width', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Width (cm)')),
                ('package_height', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Height (cm)')),
                ('package_value', money(blank=True, null=True, verbose_name='Declared value')),
                ('package_currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3, verbose_name='Currency')),
                ('package_description', models.CharField(blank=True, default='', max_length=500, verbose_name='Description')),
                ('origin', models.CharField(max_length=200, verbose_name='Origin')),
                ('destination', models.CharField(max_length=200, verbose_name='Destination')),
                ('origin_city', models.CharField(blank=True, default='', max_length=100)),
                ('origin_state', models.CharField(blank=True, default='', max_length=100)),
                ('origin_country', models.CharField(blank=True, default='', max_length=100)),
                ('origin_latitude', models.FloatField(blank=True, null=True)),
                ('origin_longitude', models.FloatField(blank=True, null=True)),
                ('destination_city', models.CharField(blank=True, default='', max_length=100)),
                ('destination_state', models.CharField(blank=True, default='', max_length=100)),
                ('destination_country', models.CharField(blank=True, default='', max_length=100)),
                ('destination_latitude', models.FloatField(blank=True, null=True)),
                ('destination_longitude', models.FloatField(blank=True, null=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='CREATED', max_length=30, verbose_name='Status')),
                ('current_location', models.CharField(blank=True, default='', max_length=200, verbose_name='Current location')),
                ('estimated_delivery_date', models.DateField(blank=True, null=True, verbose_name='Estimated delivery date')),
                ('carrier_tracking_code', models.CharField(blank=True, default='', max_length=100, verbose_name='Carrier tracking code')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('carrier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shipments', to='shipments.carrier', verbose_name='Carrier')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_shipments', to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
            ],
            options={
                'verbose_name': 'Shipment',
                'verbose_name_plural': 'Shipments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='shipment_status_idx'),
                    models.Index(fields=['-created_at'], name='shipment_created_idx'),
                    models.Index(fields=['sender_email'], name='shipment_sender_email_idx'),
                    models.Index(fields=['receiver_email'], name='shipment_receiver_email_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FreightCharges',
            fields=[
                ('shipment', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='freight_charges', serialize=False, to='shipments.shipment')),
                ('base_charge', money()),
                ('fuel_surcharge', money(default=Decimal('0.00'))),
                ('handling_fee', money(default=Decimal('0.00'))),
                ('insurance_fee', money(default=Decimal('0.00'))),
                ('customs_duty', money(default=Decimal('0.00'))),
                ('tax', money(default=Decimal('0.00'))),
                ('discount', money(default=Decimal('0.00'))),
                ('total', money()),
                ('currency', models.CharField(choices=CURRENCY_CHOICES, default='USD', max_length=3)),
                ('is_paid', models.BooleanField(default=False, verbose_name='Paid')),
                ('payment_method', models.CharField(blank=True, choices=[('CASH', 'Cash'), ('BANK_TRANSFER', 'Bank Transfer'), ('CREDIT_CARD', 'Credit Card'), ('DEBIT_CARD', 'Debit Card'), ('PAYPAL', 'PayPal'), ('STRIPE', 'Stripe'), ('CRYPTO', 'Cryptocurrency'), ('INVOICE', 'Invoice'), ('COD', 'Cash on Delivery'), ('POD', 'Payment on Delivery'), ('PREPAID', 'Prepaid')], default='', max_length=20)),
                ('payment_status', models.CharField(choices=[('PENDING', 'Pending'), ('PAID', 'Paid'), ('PARTIAL', 'Partial'), ('REFUNDED', 'Refunded'), ('FAILED', 'Failed')], default='PENDING', max_length=20)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('payment_reference', models.CharField(blank=True, default='', max_length=100)),
            ],
            options={
                'verbose_name': 'Freight charges',
                'verbose_name_plural': 'Freight charges',
            },
        ),
        migrations.CreateModel(
            name='PackageImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(max_length=500)),
                ('public_id', models.CharField(max_length=255)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('shipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='package_images', to='shipments.shipment')),
            ],
            options={
                'verbose_name': 'Package image',
                'verbose_name_plural': 'Package images',
                'ordering': ['uploaded_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='TrackingEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=STATUS_CHOICES, max_length=30, verbose_name='Status')),
                ('location', models.CharField(max_length=200, verbose_name='Location')),
                ('description', models.CharField(blank=True, default='', max_length=500, verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tracking_events', to='shipments.shipment', verbose_name='Shipment')),
            ],
            options={
                'verbose_name': 'Tracking event',
                'verbose_name_plural': 'Tracking events',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['shipment', '-created_at'], name='event_shipment_created_idx'),
                ],
            },
        ),
    ]
