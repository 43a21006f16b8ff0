"""
Django management command to create the initial dashboard administrator.

Usage:
    python manage.py seed_admin --email admin@example.com --password 'Secret123'
"""
from django.core.management.base import BaseCommand, CommandError
from decouple import config

from core.models import User, UserRole


class Command(BaseCommand):
    help = 'Create the initial admin account if it does not exist'

    def add_arguments(self, parser):
        parser.add_argument('--name', default=config('ADMIN_NAME', default='Admin User'))
        parser.add_argument('--email', default=config('ADMIN_EMAIL', default=''))
        parser.add_argument('--password', default=config('ADMIN_PASSWORD', default=''))

    def handle(self, *args, **options):
        email = (options['email'] or '').strip().lower()
        password = options['password']

        if not email or not password:
            raise CommandError('An email and a password are required (--email/--password or ADMIN_EMAIL/ADMIN_PASSWORD)')

        if User.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f'Admin {email} already exists, nothing to do'))
            return

        User.objects.create_superuser(
            email=email,
            password=password,
            name=options['name'],
            role=UserRole.ADMIN,
        )
        self.stdout.write(self.style.SUCCESS(f'Created admin {email}'))
