"""
Submission Store

Append-only persistence for contact form submissions on top of the
Django ORM, plus the schema install/teardown used by the lifecycle hooks.
"""
import logging

from django.db import (
    DEFAULT_DB_ALIAS,
    DatabaseError,
    InterfaceError,
    OperationalError,
    connections,
    transaction,
)

from .exceptions import StoreUnavailable, StoreWriteFailed
from .models import Submission

logger = logging.getLogger(__name__)

# Upper bound on any listing, whatever the caller asks for
MAX_LIST_LIMIT = 500


class SubmissionStore:
    """
    Durable backing for contact submissions.

    Ids come from the table's auto-increment column, so concurrent inserts
    get distinct, ordered ids without any locking on our side.

    Usage:
        store = SubmissionStore()
        submission_id = store.insert(validated_fields)
        latest = store.list_recent(20)
    """

    model = Submission

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    @property
    def connection(self):
        return connections[self.using]

    @property
    def table_name(self):
        return self.model._meta.db_table

    def exists(self):
        """Return True if the submissions table is present."""
        try:
            with self.connection.cursor() as cursor:
                tables = self.connection.introspection.table_names(cursor)
        except (DatabaseError, InterfaceError) as e:
            raise StoreUnavailable(f"Could not inspect database tables: {e}") from e
        return self.table_name in tables

    def ensure_schema(self):
        """
        Create the submissions table if it is missing.

        Returns:
            bool: True if the table was created, False if it already existed
        """
        if self.exists():
            return False

        try:
            with self.connection.schema_editor() as schema_editor:
                schema_editor.create_model(self.model)
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailable(f"Could not create {self.table_name}: {e}") from e
        except DatabaseError as e:
            raise StoreWriteFailed(f"Could not create {self.table_name}: {e}") from e

        logger.info(f"Created contact submissions table {self.table_name}")
        return True

    def insert(self, fields):
        """
        Store a validated submission.

        Args:
            fields: ValidatedFields from the validator

        Returns:
            int: id of the new submission

        Raises:
            StoreUnavailable: the database could not be reached
            StoreWriteFailed: the insert was rejected
        """
        try:
            with transaction.atomic(using=self.using):
                submission = self.model.objects.using(self.using).create(
                    name=fields.name,
                    email=fields.email,
                    message=fields.message,
                )
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailable(f"Insert into {self.table_name} failed: {e}") from e
        except DatabaseError as e:
            raise StoreWriteFailed(f"Insert into {self.table_name} failed: {e}") from e

        return submission.pk

    def list_recent(self, limit):
        """
        Most recent submissions first, ties broken by id.

        Args:
            limit: positive integer, capped at MAX_LIST_LIMIT

        Returns:
            list of Submission
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        limit = min(limit, MAX_LIST_LIMIT)

        # Nothing to read once the table has been dropped
        if not self.exists():
            return []

        queryset = self.model.objects.using(self.using).order_by('-created_at', '-id')
        try:
            return list(queryset[:limit])
        except (DatabaseError, InterfaceError) as e:
            raise StoreUnavailable(f"Read from {self.table_name} failed: {e}") from e

    def drop_all(self):
        """
        Irreversibly remove every submission and the table holding them.

        Safe to call when nothing is installed.
        """
        if not self.exists():
            logger.info(f"Contact submissions table {self.table_name} already absent")
            return

        try:
            with self.connection.schema_editor() as schema_editor:
                schema_editor.delete_model(self.model)
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailable(f"Could not drop {self.table_name}: {e}") from e
        except DatabaseError as e:
            raise StoreWriteFailed(f"Could not drop {self.table_name}: {e}") from e

        logger.warning(f"Dropped contact submissions table {self.table_name}")
