"""
Tests for the contact form pipeline: store, service, endpoints and
lifecycle commands.
"""
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.db import IntegrityError, OperationalError
from django.db.models.query import QuerySet
from rest_framework import status

from contact.exceptions import (
    ImmutableSubmissionError,
    StoreUnavailable,
    StoreWriteFailed,
)
from contact.lifecycle import on_install, on_uninstall
from contact.models import Submission
from contact.services import (
    DEFAULT_ERROR_MESSAGE,
    DEFAULT_SUCCESS_MESSAGE,
    Accepted,
    Failed,
    Rejected,
    SubmissionService,
)
from contact.store import MAX_LIST_LIMIT, SubmissionStore
from contact.validators import INVALID_FORMAT, REQUIRED, TOO_SHORT, ValidatedFields

SUBMIT_URL = '/api/contact/submit'
LIST_URL = '/api/contact/submissions'
FORM_PAGE_URL = '/contact/'
SUBMISSIONS_PAGE_URL = '/contact/submissions/'

VALID_DATA = {
    'name': 'Jane Doe',
    'email': 'jane@example.com',
    'message': 'Hello, I would like more information.',
}


def make_fields(label):
    return ValidatedFields(
        name=f'Sender {label}',
        email=f'{label.lower()}@example.com',
        message=f'Message number {label} for the team.'
    )


class RecordingStore:
    """Stand-in store that records inserts and can be told to fail."""

    def __init__(self, error=None):
        self.error = error
        self.inserted = []

    def insert(self, fields):
        if self.error:
            raise self.error
        self.inserted.append(fields)
        return len(self.inserted)

    def list_recent(self, limit):
        return list(reversed(self.inserted))[:limit]


@pytest.mark.django_db
class TestSubmissionStore:
    """Test persistence and listing of submissions."""

    def test_insert_returns_new_id(self, store, valid_fields):
        submission_id = store.insert(valid_fields)

        submission = Submission.objects.get(pk=submission_id)
        assert submission.name == 'Jane Doe'
        assert submission.email == 'jane@example.com'
        assert submission.message == 'Hello, I would like more information.'
        assert submission.created_at is not None

    def test_ids_strictly_increase(self, store):
        ids = [store.insert(make_fields(label)) for label in 'ABCD']
        assert ids == sorted(ids)
        assert len(set(ids)) == 4

    def test_list_recent_newest_first(self, store):
        for label in 'ABC':
            store.insert(make_fields(label))

        names = [submission.name for submission in store.list_recent(3)]

        assert names == ['Sender C', 'Sender B', 'Sender A']

    def test_list_recent_respects_limit(self, store):
        for label in 'ABC':
            store.insert(make_fields(label))

        assert [s.name for s in store.list_recent(2)] == ['Sender C', 'Sender B']

    def test_list_recent_is_idempotent(self, store):
        for label in 'AB':
            store.insert(make_fields(label))

        assert store.list_recent(10) == store.list_recent(10)

    def test_list_recent_capped(self, store):
        Submission.objects.bulk_create([
            Submission(name=f'Sender {i}', email=f's{i}@example.com', message='Bulk test message')
            for i in range(MAX_LIST_LIMIT + 5)
        ])

        assert len(store.list_recent(MAX_LIST_LIMIT + 100)) == MAX_LIST_LIMIT

    @pytest.mark.parametrize('limit', [0, -1, True, '10', 2.5, None])
    def test_list_recent_rejects_bad_limit(self, store, limit):
        with pytest.raises(ValueError):
            store.list_recent(limit)

    def test_integrity_error_is_write_failure(self, store, valid_fields):
        with mock.patch.object(QuerySet, 'create', side_effect=IntegrityError('constraint')):
            with pytest.raises(StoreWriteFailed):
                store.insert(valid_fields)

    def test_operational_error_is_unavailable(self, store, valid_fields):
        with mock.patch.object(QuerySet, 'create', side_effect=OperationalError('connection lost')):
            with pytest.raises(StoreUnavailable):
                store.insert(valid_fields)

    def test_exists(self, store):
        assert store.exists() is True

    def test_ensure_schema_when_installed(self, store):
        assert store.ensure_schema() is False


@pytest.mark.django_db(transaction=True)
class TestSubmissionStoreTeardown:
    """drop_all removes the records and the table."""

    def test_drop_all_then_list_is_empty(self, reinstall_store, valid_fields):
        reinstall_store.insert(valid_fields)

        reinstall_store.drop_all()

        assert reinstall_store.exists() is False
        assert reinstall_store.list_recent(500) == []

    def test_drop_all_is_idempotent(self, reinstall_store):
        reinstall_store.drop_all()
        reinstall_store.drop_all()

        assert reinstall_store.exists() is False

    def test_ensure_schema_recreates_table(self, reinstall_store, valid_fields):
        reinstall_store.drop_all()

        assert reinstall_store.ensure_schema() is True
        assert reinstall_store.ensure_schema() is False

        reinstall_store.insert(valid_fields)
        assert len(reinstall_store.list_recent(10)) == 1

    def test_insert_after_drop_fails_cleanly(self, reinstall_store, valid_fields):
        reinstall_store.drop_all()

        with pytest.raises((StoreUnavailable, StoreWriteFailed)):
            reinstall_store.insert(valid_fields)


@pytest.mark.django_db
class TestSubmissionModel:
    """Stored submissions cannot change."""

    def test_update_is_refused(self, store, valid_fields):
        submission = Submission.objects.get(pk=store.insert(valid_fields))
        submission.name = 'Someone Else'

        with pytest.raises(ImmutableSubmissionError):
            submission.save()

        submission.refresh_from_db()
        assert submission.name == 'Jane Doe'

    def test_delete_is_refused(self, store, valid_fields):
        submission = Submission.objects.get(pk=store.insert(valid_fields))

        with pytest.raises(ImmutableSubmissionError):
            submission.delete()

        assert Submission.objects.filter(pk=submission.pk).exists()

    def test_str(self, store, valid_fields):
        submission = Submission.objects.get(pk=store.insert(valid_fields))
        assert str(submission) == f'#{submission.pk} Jane Doe <jane@example.com>'


@pytest.mark.django_db
class TestSubmissionService:
    """Test the validate-then-store pipeline."""

    def test_accepted_submission_is_listed(self):
        service = SubmissionService()

        outcome = service.submit('Jane Doe', 'jane@example.com', 'Hello, I would like more information.')

        assert isinstance(outcome, Accepted)
        assert outcome.message == DEFAULT_SUCCESS_MESSAGE
        latest = service.list_submissions(1)
        assert len(latest) == 1
        assert latest[0].pk == outcome.submission_id
        assert latest[0].name == 'Jane Doe'
        assert latest[0].email == 'jane@example.com'
        assert latest[0].message == 'Hello, I would like more information.'

    def test_rejected_submission_reports_every_field(self):
        service = SubmissionService()

        outcome = service.submit('', 'not-an-email', 'short')

        assert isinstance(outcome, Rejected)
        assert outcome.errors.codes == {
            'name': REQUIRED,
            'email': INVALID_FORMAT,
            'message': TOO_SHORT,
        }
        assert service.list_submissions(500) == []

    def test_store_failure_is_failed(self):
        service = SubmissionService()

        with mock.patch.object(QuerySet, 'create', side_effect=IntegrityError('constraint "x" violated')):
            outcome = service.submit(**VALID_DATA)

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, StoreWriteFailed)
        assert outcome.message == DEFAULT_ERROR_MESSAGE
        assert 'constraint' not in outcome.message
        assert service.list_submissions(500) == []

    def test_unavailable_store_is_failed(self):
        service = SubmissionService()

        with mock.patch.object(QuerySet, 'create', side_effect=OperationalError('server closed the connection')):
            outcome = service.submit(**VALID_DATA)

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, StoreUnavailable)
        assert outcome.as_payload() == {'success': False, 'data': DEFAULT_ERROR_MESSAGE}

    def test_default_listing_limit(self, settings):
        settings.CONTACT_FORM = {'LIST_LIMIT': 2}
        service = SubmissionService()
        for label in 'ABC':
            service.store.insert(make_fields(label))

        assert [s.name for s in service.list_submissions()] == ['Sender C', 'Sender B']

    def test_configured_messages(self, settings):
        settings.CONTACT_FORM = {
            'SUCCESS_MESSAGE': 'Got it.',
            'ERROR_MESSAGE': 'Please retry later.',
        }

        accepted = SubmissionService().submit(**VALID_DATA)
        failed = SubmissionService(RecordingStore(StoreWriteFailed('disk full'))).submit(**VALID_DATA)

        assert accepted.message == 'Got it.'
        assert failed.message == 'Please retry later.'


class TestSubmissionServiceWithoutDatabase:
    """Service behaviour against a stand-in store."""

    def test_store_untouched_on_rejection(self):
        store = RecordingStore()

        outcome = SubmissionService(store).submit('J', 'jane@', '')

        assert isinstance(outcome, Rejected)
        assert store.inserted == []

    def test_store_receives_trimmed_values(self):
        store = RecordingStore()

        outcome = SubmissionService(store).submit('  Jane Doe ', ' jane@example.com ', ' Hello, I would like more information. ')

        assert isinstance(outcome, Accepted)
        assert store.inserted == [ValidatedFields(**VALID_DATA)]

    def test_payload_shapes(self):
        store = RecordingStore()
        service = SubmissionService(store)

        accepted = service.submit(**VALID_DATA).as_payload()
        rejected = service.submit('', 'not-an-email', 'short').as_payload()

        assert accepted['success'] is True
        assert isinstance(accepted['data'], str)
        assert rejected == {
            'success': False,
            'data': {
                'name': 'Name is required.',
                'email': 'Please enter a valid email address.',
                'message': 'Message must be at least 10 characters long.',
            },
        }


@pytest.mark.django_db
class TestContactFormSubmission:
    """Test the public AJAX submission endpoint."""

    def test_submit_valid_contact_form(self, api_client):
        response = api_client.post(SUBMIT_URL, VALID_DATA)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data == {'success': True, 'data': DEFAULT_SUCCESS_MESSAGE}
        assert Submission.objects.count() == 1

    def test_submit_json_payload(self, api_client):
        response = api_client.post(SUBMIT_URL, VALID_DATA, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Submission.objects.get().email == 'jane@example.com'

    def test_submit_invalid_fields(self, api_client):
        response = api_client.post(SUBMIT_URL, {'name': '', 'email': 'not-an-email', 'message': 'short'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert set(response.data['data']) == {'name', 'email', 'message'}
        assert Submission.objects.count() == 0

    def test_submit_missing_fields(self, api_client):
        response = api_client.post(SUBMIT_URL, {'name': 'Test User'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['data'] == {
            'email': 'Email is required.',
            'message': 'Message is required.',
        }

    def test_submit_non_string_field(self, api_client):
        response = api_client.post(SUBMIT_URL, {**VALID_DATA, 'name': 12}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['data'] == {'name': 'Name must be text.'}
        assert Submission.objects.count() == 0

    def test_submit_non_object_payload(self, api_client):
        response = api_client.post(SUBMIT_URL, ['Jane'], format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False

    def test_store_failure_returns_generic_message(self, api_client):
        with mock.patch.object(QuerySet, 'create', side_effect=OperationalError('could not connect to server at 10.0.0.5')):
            response = api_client.post(SUBMIT_URL, VALID_DATA)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'success': False, 'data': DEFAULT_ERROR_MESSAGE}
        assert '10.0.0.5' not in response.content.decode()

    def test_get_not_allowed(self, api_client):
        response = api_client.get(SUBMIT_URL)
        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


@pytest.mark.django_db
class TestCsrfVerification:
    """Submissions must prove they come from our own form."""

    def test_missing_token_rejected(self, csrf_client):
        response = csrf_client.post(SUBMIT_URL, VALID_DATA)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {'success': False, 'data': 'Security check failed.'}
        assert Submission.objects.count() == 0

    def test_token_from_form_page_accepted(self, csrf_client):
        page = csrf_client.get(FORM_PAGE_URL)
        token = page.cookies['csrftoken'].value

        response = csrf_client.post(SUBMIT_URL, VALID_DATA, HTTP_X_CSRFTOKEN=token)

        assert response.status_code == status.HTTP_201_CREATED
        assert Submission.objects.count() == 1

    def test_failure_outside_contact_api_uses_default_page(self, csrf_client):
        response = csrf_client.post('/admin/login/', {'username': 'staff', 'password': 'secret'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response['Content-Type'].startswith('text/html')
        assert 'Security check failed.' not in response.content.decode()


@pytest.mark.django_db
class TestSubmissionListView:
    """Test the staff JSON listing."""

    def test_unauthenticated_access_denied(self, api_client):
        response = api_client.get(LIST_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_regular_user_denied(self, api_client, regular_user):
        api_client.force_authenticate(user=regular_user)
        response = api_client.get(LIST_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_without_permission_denied(self, api_client, staff_without_permission):
        api_client.force_authenticate(user=staff_without_permission)
        response = api_client.get(LIST_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_can_list_submissions(self, api_client, staff_user, store):
        for label in 'ABC':
            store.insert(make_fields(label))
        api_client.force_authenticate(user=staff_user)

        response = api_client.get(LIST_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert [row['name'] for row in response.data['results']] == ['Sender C', 'Sender B', 'Sender A']
        assert set(response.data['results'][0]) == {'id', 'name', 'email', 'message', 'created_at'}

    def test_limit_parameter(self, api_client, staff_user, store):
        for label in 'ABC':
            store.insert(make_fields(label))
        api_client.force_authenticate(user=staff_user)

        response = api_client.get(LIST_URL, {'limit': 1})

        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'Sender C'

    @pytest.mark.parametrize('limit', ['0', '501', 'many'])
    def test_invalid_limit(self, api_client, staff_user, limit):
        api_client.force_authenticate(user=staff_user)
        response = api_client.get(LIST_URL, {'limit': limit})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_store_unavailable(self, api_client, staff_user):
        api_client.force_authenticate(user=staff_user)

        with mock.patch.object(SubmissionStore, 'list_recent', side_effect=StoreUnavailable('db down')):
            response = api_client.get(LIST_URL)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert 'db down' not in response.content.decode()


@pytest.mark.django_db
class TestPages:
    """Test the form page and the staff submissions table."""

    def test_form_page(self, client):
        response = client.get(FORM_PAGE_URL)

        content = response.content.decode()
        assert response.status_code == 200
        assert 'action="/api/contact/submit"' in content
        assert 'csrfmiddlewaretoken' in content
        assert 'maxlength="5000"' in content
        assert 'csrftoken' in response.cookies

    def test_submissions_page_requires_login(self, client):
        response = client.get(SUBMISSIONS_PAGE_URL)

        assert response.status_code == 302
        assert '/admin/login/' in response['Location']

    def test_submissions_page_requires_permission(self, client, staff_without_permission):
        client.force_login(staff_without_permission)
        response = client.get(SUBMISSIONS_PAGE_URL)
        assert response.status_code == 403

    def test_submissions_page_empty(self, client, staff_user):
        client.force_login(staff_user)
        response = client.get(SUBMISSIONS_PAGE_URL)

        assert response.status_code == 200
        assert 'No submissions yet.' in response.content.decode()

    def test_submissions_page_escapes_values(self, client, staff_user, store):
        store.insert(ValidatedFields(
            name='<script>alert(1)</script>',
            email='jane@example.com',
            message='Hello <img src=x onerror=alert(1)> & goodbye'
        ))
        client.force_login(staff_user)

        content = client.get(SUBMISSIONS_PAGE_URL).content.decode()

        assert '<script>alert(1)</script>' not in content
        assert '&lt;script&gt;alert(1)&lt;/script&gt;' in content
        assert '<img src=x' not in content
        assert 'mailto:jane@example.com' in content

    def test_submissions_page_truncates_messages(self, client, staff_user, store):
        words = ' '.join(f'word{i}' for i in range(30))
        store.insert(ValidatedFields(name='Jane Doe', email='jane@example.com', message=words))
        client.force_login(staff_user)

        content = client.get(SUBMISSIONS_PAGE_URL).content.decode()

        assert 'word19' in content
        assert 'word20' not in content

    def test_submissions_page_store_unavailable(self, client, staff_user):
        client.force_login(staff_user)

        with mock.patch.object(SubmissionStore, 'list_recent', side_effect=StoreUnavailable('db down at 10.0.0.5')):
            response = client.get(SUBMISSIONS_PAGE_URL)

        content = response.content.decode()
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert 'Submissions are temporarily unavailable.' in content
        assert '10.0.0.5' not in content
        assert 'db down' not in content
        assert 'No submissions yet.' not in content


@pytest.mark.django_db
class TestLifecycleCommands:
    """Test install/uninstall management commands."""

    def test_install_when_present(self):
        out = StringIO()
        call_command('install_contact_form', stdout=out)
        assert 'already exists' in out.getvalue()

    def test_on_install_when_present(self, store):
        assert on_install(store) is False

    def test_uninstall_cancelled(self, monkeypatch, store, valid_fields):
        store.insert(valid_fields)
        monkeypatch.setattr('builtins.input', lambda prompt: 'no')
        out = StringIO()

        call_command('uninstall_contact_form', stdout=out)

        assert 'cancelled' in out.getvalue()
        assert store.exists() is True
        assert len(store.list_recent(10)) == 1


@pytest.mark.django_db(transaction=True)
class TestLifecycleTeardown:

    def test_uninstall_then_install(self, reinstall_store, valid_fields):
        reinstall_store.insert(valid_fields)
        out = StringIO()

        call_command('uninstall_contact_form', '--noinput', stdout=out)

        assert 'removed' in out.getvalue()
        assert reinstall_store.exists() is False

        call_command('install_contact_form', stdout=out)

        assert 'Created table contact_submissions' in out.getvalue()
        assert reinstall_store.list_recent(500) == []

    def test_on_uninstall_is_idempotent(self, reinstall_store):
        on_uninstall(reinstall_store)
        on_uninstall(reinstall_store)

        assert reinstall_store.list_recent(500) == []
        assert on_install(reinstall_store) is True
