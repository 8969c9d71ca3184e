from io import StringIO

from django.core.management import call_command
from django.test import TestCase


class MigrationStateTest(TestCase):
    def test_models_match_committed_migrations(self):
        out = StringIO()
        try:
            call_command('makemigrations', 'secondhome_main_app', check=True, dry_run=True, stdout=out)
        except SystemExit:
            self.fail('Models have changes without a migration:\n' + out.getvalue())
