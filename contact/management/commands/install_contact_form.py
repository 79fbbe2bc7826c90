"""
Install Contact Form Command

Creates the contact submissions table if it is missing. Safe to run more
than once.

Usage:
    python manage.py install_contact_form
    python manage.py install_contact_form --database replica
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import DEFAULT_DB_ALIAS

from contact.exceptions import StoreError
from contact.lifecycle import on_install
from contact.store import SubmissionStore


class Command(BaseCommand):
    help = 'Create the contact submissions table if it does not exist'

    def add_arguments(self, parser):
        parser.add_argument(
            '--database',
            default=DEFAULT_DB_ALIAS,
            help='Database alias to install into',
        )

    def handle(self, *args, **options):
        store = SubmissionStore(using=options['database'])

        try:
            created = on_install(store)
        except StoreError as e:
            raise CommandError(f'Could not install contact form: {e}')

        if created:
            self.stdout.write(self.style.SUCCESS(f'Created table {store.table_name}'))
        else:
            self.stdout.write(f'Table {store.table_name} already exists - nothing to do')
