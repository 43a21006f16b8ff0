import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(2)], verbose_name='Full name')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Email address')),
                ('role', models.CharField(choices=[('ADMIN', 'Administrator')], default='ADMIN', max_length=20, verbose_name='Role')),
                ('is_active', models.BooleanField(default=True)),
                ('is_staff', models.BooleanField(default=False)),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['-date_joined'],
            },
        ),
        migrations.CreateModel(
            name='CompanySettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(default='Courier Express', max_length=200, verbose_name='Company name')),
                ('office_address', models.CharField(blank=True, default='', max_length=500, verbose_name='Office address')),
                ('phone', models.CharField(blank=True, default='', max_length=50, verbose_name='Phone')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('website', models.URLField(blank=True, default='', verbose_name='Website')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Company settings',
                'verbose_name_plural': 'Company settings',
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('action', models.CharField(choices=[('SHIPMENT_CREATED', 'Shipment created'), ('SHIPMENT_UPDATED', 'Shipment updated'), ('SHIPMENT_DELETED', 'Shipment deleted'), ('SHIPMENT_STATUS_CHANGED', 'Shipment status changed'), ('QUOTE_CREATED', 'Quote created'), ('QUOTE_RESPONDED', 'Quote responded'), ('QUOTE_CONVERTED', 'Quote converted'), ('CARRIER_CREATED', 'Carrier created'), ('CARRIER_UPDATED', 'Carrier updated'), ('CARRIER_DELETED', 'Carrier deleted'), ('PAYMENT_RECORDED', 'Payment recorded'), ('PAYMENT_UPDATED', 'Payment updated'), ('EMAIL_SENT', 'Email sent'), ('EMAIL_FAILED', 'Email failed'), ('USER_LOGIN', 'User login'), ('USER_LOGOUT', 'User logout'), ('USER_LOGIN_FAILED', 'User login failed'), ('FILE_UPLOADED', 'File uploaded'), ('FILE_DELETED', 'File deleted')], db_index=True, max_length=40, verbose_name='Action')),
                ('entity_type', models.CharField(db_index=True, max_length=50, verbose_name='Entity type')),
                ('entity_id', models.CharField(blank=True, db_index=True, max_length=64, verbose_name='Entity ID')),
                ('user_email', models.EmailField(blank=True, max_length=254, verbose_name='User email')),
                ('ip_address', models.CharField(blank=True, max_length=64, verbose_name='IP address')),
                ('user_agent', models.CharField(blank=True, max_length=500, verbose_name='User agent')),
                ('previous_data', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('new_data', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('metadata', models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Audit log',
                'verbose_name_plural': 'Audit logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
                    models.Index(fields=['user', '-created_at'], name='audit_user_created_idx'),
                ],
            },
        ),
    ]
