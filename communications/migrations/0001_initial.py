import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('shipments', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='EmailLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('to', models.CharField(max_length=500, verbose_name='Recipient(s)')),
                ('subject', models.CharField(max_length=200, verbose_name='Subject')),
                ('html_content', models.TextField(verbose_name='HTML content')),
                ('status', models.CharField(choices=[('SENT', 'Sent'), ('FAILED', 'Failed')], max_length=10, verbose_name='Status')),
                ('error_message', models.TextField(blank=True, default='', verbose_name='Error message')),
                ('provider_message_id', models.CharField(blank=True, default='', max_length=100, verbose_name='Provider message ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('related_shipment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='emails', to='shipments.shipment', verbose_name='Related shipment')),
                ('sent_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_emails', to=settings.AUTH_USER_MODEL, verbose_name='Sent by')),
            ],
            options={
                'verbose_name': 'Email log',
                'verbose_name_plural': 'Email logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='email_status_idx'),
                    models.Index(fields=['-created_at'], name='email_created_idx'),
                ],
            },
        ),
    ]
