"""
Shared pytest fixtures for contact form tests.
"""
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from rest_framework.test import APIClient

from contact.store import SubmissionStore
from contact.validators import ValidatedFields

User = get_user_model()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def csrf_client():
    """API client that enforces CSRF checks like a real browser session."""
    return APIClient(enforce_csrf_checks=True)


@pytest.fixture
def store():
    return SubmissionStore()


@pytest.fixture
def valid_fields():
    return ValidatedFields(
        name='Jane Doe',
        email='jane@example.com',
        message='Hello, I would like more information.'
    )


@pytest.fixture
def reinstall_store(transactional_db):
    """
    Store for tests that drop the submissions table.

    Recreates the table afterwards so later tests still have it.
    """
    store = SubmissionStore()
    yield store
    store.ensure_schema()


@pytest.fixture
def staff_user(db):
    user = User.objects.create_user(
        username='staff',
        email='staff@test.com',
        password='testpass123',
        is_staff=True
    )
    user.user_permissions.add(
        Permission.objects.get(content_type__app_label='contact', codename='view_submission')
    )
    return user


@pytest.fixture
def staff_without_permission(db):
    return User.objects.create_user(
        username='helpdesk',
        email='helpdesk@test.com',
        password='testpass123',
        is_staff=True
    )


@pytest.fixture
def regular_user(db):
    return User.objects.create_user(
        username='visitor',
        email='visitor@test.com',
        password='testpass123'
    )
