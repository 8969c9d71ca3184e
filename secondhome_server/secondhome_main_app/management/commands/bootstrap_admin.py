"""Management command to create or promote the platform admin"""
from django.core.management.base import BaseCommand, CommandError

from secondhome_main_app.services import AuthService


class Command(BaseCommand):
    help = 'Create or update the admin account from ADMIN_EMAIL / ADMIN_PASSWORD'

    def add_arguments(self, parser):
        parser.add_argument('--email', help='Admin email (default: ADMIN_EMAIL)')
        parser.add_argument('--password', help='Admin password (default: ADMIN_PASSWORD)')
        parser.add_argument('--name', default='Admin', help='Display name for a new admin')

    def handle(self, *args, **options):
        result = AuthService().bootstrap_admin(
            email=options.get('email'),
            password=options.get('password'),
            name=options['name'],
        )
        if not result['success']:
            raise CommandError(result['error'])

        verb = 'Created' if result['created'] else 'Updated'
        self.stdout.write(self.style.SUCCESS(f"{verb} admin account {result['email']}"))
