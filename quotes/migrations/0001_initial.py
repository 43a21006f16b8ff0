import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Quote',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(2)], verbose_name='Name')),
                ('email', models.EmailField(max_length=254, verbose_name='Email')),
                ('phone', models.CharField(max_length=20, validators=[django.core.validators.MinLengthValidator(5)], verbose_name='Phone')),
                ('origin', models.CharField(max_length=200, verbose_name='Origin')),
                ('destination', models.CharField(max_length=200, verbose_name='Destination')),
                ('package_weight', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Weight (kg)')),
                ('package_length', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Length (cm)')),
                ('package_width', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Width (cm)')),
                ('package_height', models.FloatField(validators=[django.core.validators.MinValueValidator(0)], verbose_name='Height (cm)')),
                ('package_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Declared value')),
                ('package_currency', models.CharField(choices=[('USD', 'US Dollar'), ('EUR', 'Euro'), ('GBP', 'British Pound'), ('CAD', 'Canadian Dollar'), ('AUD', 'Australian Dollar'), ('JPY', 'Japanese Yen'), ('CNY', 'Chinese Yuan'), ('INR', 'Indian Rupee'), ('NGN', 'Nigerian Naira'), ('ZAR', 'South African Rand'), ('AED', 'UAE Dirham'), ('SGD', 'Singapore Dollar'), ('CHF', 'Swiss Franc'), ('BRL', 'Brazilian Real'), ('MXN', 'Mexican Peso')], default='USD', max_length=3, verbose_name='Currency')),
                ('package_description', models.CharField(max_length=500, verbose_name='Description')),
                ('service_type', models.CharField(choices=[('ECONOMY', 'Economy'), ('STANDARD', 'Standard'), ('EXPRESS', 'Express'), ('PRIORITY', 'Priority'), ('SAME_DAY', 'Same Day'), ('NEXT_DAY', 'Next Day'), ('OVERNIGHT', 'Overnight')], default='STANDARD', max_length=20, verbose_name='Service type')),
                ('estimated_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Estimated price')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('RESPONDED', 'Responded'), ('CONVERTED', 'Converted')], db_index=True, default='PENDING', max_length=20, verbose_name='Status')),
                ('admin_response', models.TextField(blank=True, default='', max_length=1000, verbose_name='Admin response')),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('responded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='responded_quotes', to=settings.AUTH_USER_MODEL, verbose_name='Responded by')),
            ],
            options={
                'verbose_name': 'Quote',
                'verbose_name_plural': 'Quotes',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['-created_at'], name='quote_created_idx'),
                    models.Index(fields=['email'], name='quote_email_idx'),
                ],
            },
        ),
    ]
