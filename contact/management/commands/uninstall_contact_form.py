"""
Uninstall Contact Form Command

Irreversibly deletes every contact submission and drops the table.

Usage:
    python manage.py uninstall_contact_form             # Asks for confirmation
    python manage.py uninstall_contact_form --noinput   # No prompt
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import DEFAULT_DB_ALIAS

from contact.exceptions import StoreError
from contact.lifecycle import on_uninstall
from contact.store import SubmissionStore


class Command(BaseCommand):
    help = 'Delete all contact submissions and drop the submissions table'

    def add_arguments(self, parser):
        parser.add_argument(
            '--noinput', '--no-input',
            action='store_false',
            dest='interactive',
            help='Do not prompt for confirmation',
        )
        parser.add_argument(
            '--database',
            default=DEFAULT_DB_ALIAS,
            help='Database alias to uninstall from',
        )

    def handle(self, *args, **options):
        store = SubmissionStore(using=options['database'])

        if options['interactive']:
            answer = input(
                f'This will permanently delete every submission in {store.table_name}.\n'
                "Type 'yes' to continue: "
            )
            if answer != 'yes':
                self.stdout.write(self.style.WARNING('Uninstall cancelled'))
                return

        try:
            on_uninstall(store)
        except StoreError as e:
            raise CommandError(f'Could not uninstall contact form: {e}')

        self.stdout.write(self.style.SUCCESS('Contact form data removed'))
