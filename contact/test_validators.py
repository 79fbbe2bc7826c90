"""
Tests for contact form field validation
"""
import pytest

from contact.exceptions import SubmissionValidationError
from contact.validators import (
    INVALID_FORMAT,
    REQUIRED,
    TOO_LONG,
    TOO_SHORT,
    ValidatedFields,
    check_submission,
    strip_control_characters,
    validate_submission,
)

VALID_NAME = 'Jane Doe'
VALID_EMAIL = 'jane@example.com'
VALID_MESSAGE = 'Hello, I would like more information.'


class TestValidSubmissions:
    """Inputs that satisfy every rule."""

    def test_returns_validated_fields(self):
        fields = validate_submission(VALID_NAME, VALID_EMAIL, VALID_MESSAGE)

        assert fields == ValidatedFields(VALID_NAME, VALID_EMAIL, VALID_MESSAGE)

    def test_values_are_trimmed(self):
        fields = validate_submission(
            '  Jane Doe  ',
            '\tjane@example.com\n',
            '\n  Hello, I would like more information.  \n'
        )

        assert fields.name == 'Jane Doe'
        assert fields.email == 'jane@example.com'
        assert fields.message == 'Hello, I would like more information.'

    def test_control_characters_are_stripped(self):
        fields = validate_submission('Ja\x00ne\x07 Doe', 'jane@exa\x1bmple.com', VALID_MESSAGE)

        assert fields.name == 'Jane Doe'
        assert fields.email == 'jane@example.com'

    def test_message_keeps_line_breaks(self):
        message = 'First line of the message\nSecond line\tindented'

        fields = validate_submission(VALID_NAME, VALID_EMAIL, message)

        assert fields.message == message

    def test_markup_is_not_altered(self):
        """Escaping happens on output, so the stored value is the raw text."""
        fields = validate_submission('<b>Jane</b> & Co', VALID_EMAIL, 'Is "5 < 6" true? Tell me.')

        assert fields.name == '<b>Jane</b> & Co'
        assert fields.message == 'Is "5 < 6" true? Tell me.'

    def test_check_submission_reports_no_errors(self):
        fields, errors = check_submission(VALID_NAME, VALID_EMAIL, VALID_MESSAGE)

        assert fields is not None
        assert errors == {}


class TestLengthBoundaries:
    """Inclusive length limits on name and message."""

    @pytest.mark.parametrize('length', [2, 100])
    def test_name_length_accepted(self, length):
        fields = validate_submission('n' * length, VALID_EMAIL, VALID_MESSAGE)
        assert len(fields.name) == length

    @pytest.mark.parametrize('length, code', [(1, TOO_SHORT), (101, TOO_LONG)])
    def test_name_length_rejected(self, length, code):
        _, errors = check_submission('n' * length, VALID_EMAIL, VALID_MESSAGE)
        assert errors.codes == {'name': code}

    @pytest.mark.parametrize('length', [10, 5000])
    def test_message_length_accepted(self, length):
        fields = validate_submission(VALID_NAME, VALID_EMAIL, 'm' * length)
        assert len(fields.message) == length

    @pytest.mark.parametrize('length, code', [(9, TOO_SHORT), (5001, TOO_LONG)])
    def test_message_length_rejected(self, length, code):
        _, errors = check_submission(VALID_NAME, VALID_EMAIL, 'm' * length)
        assert errors.codes == {'message': code}

    def test_length_counted_after_trimming(self):
        _, errors = check_submission(' n ', VALID_EMAIL, '   short   ')

        assert errors.codes == {'name': TOO_SHORT, 'message': TOO_SHORT}

    def test_length_counts_characters_not_bytes(self):
        fields = validate_submission('é' * 100, VALID_EMAIL, VALID_MESSAGE)
        assert fields.name == 'é' * 100


class TestRequiredFields:

    @pytest.mark.parametrize('value', ['', '   ', None, '\x00\x01'])
    def test_empty_values_are_required(self, value):
        _, errors = check_submission(value, value, value)

        assert errors.codes == {'name': REQUIRED, 'email': REQUIRED, 'message': REQUIRED}
        assert errors['name'] == 'Name is required.'
        assert errors['email'] == 'Email is required.'
        assert errors['message'] == 'Message is required.'


class TestEmailFormat:

    @pytest.mark.parametrize('email', [
        'not-an-email',
        'jane@example',
        'jane@localhost',
        'jane doe@example.com',
        'jane@exa mple.com',
        '@example.com',
        'jane@',
        'jane@[::1]',
        '"jane\\ doe"@example.com',
        '" jane"@example.com',
    ])
    def test_invalid_addresses(self, email):
        _, errors = check_submission(VALID_NAME, email, VALID_MESSAGE)

        assert errors.codes == {'email': INVALID_FORMAT}
        assert errors['email'] == 'Please enter a valid email address.'

    @pytest.mark.parametrize('email', [
        'jane@example.com',
        'jane.doe+contact@mail.example.co.uk',
        'JANE@EXAMPLE.COM',
    ])
    def test_valid_addresses(self, email):
        fields = validate_submission(VALID_NAME, email, VALID_MESSAGE)
        assert fields.email == email

    def test_ip_literal_domain_rejected(self):
        _, errors = check_submission(VALID_NAME, 'jane@[127.0.0.1]', VALID_MESSAGE)
        assert errors.codes == {'email': INVALID_FORMAT}

    def test_overlong_address(self):
        _, errors = check_submission(VALID_NAME, 'a' * 250 + '@example.com', VALID_MESSAGE)
        assert errors.codes == {'email': TOO_LONG}


class TestFieldTypes:
    """Only text is accepted; numbers and other JSON values are not coerced."""

    @pytest.mark.parametrize('value', [12, 1.5, True, ['Jane'], {'first': 'Jane'}])
    def test_non_string_name_rejected(self, value):
        _, errors = check_submission(value, VALID_EMAIL, VALID_MESSAGE)

        assert errors.codes == {'name': INVALID_FORMAT}
        assert errors['name'] == 'Name must be text.'

    def test_non_string_email_and_message_rejected(self):
        _, errors = check_submission(VALID_NAME, 12, 1234567890123)

        assert errors.codes == {'email': INVALID_FORMAT, 'message': INVALID_FORMAT}
        assert errors['message'] == 'Message must be text.'


class TestErrorCollection:
    """Every invalid field is reported, not just the first one."""

    def test_all_fields_reported(self):
        with pytest.raises(SubmissionValidationError) as exc_info:
            validate_submission('', 'not-an-email', 'short')

        errors = exc_info.value.errors
        assert errors.codes == {
            'name': REQUIRED,
            'email': INVALID_FORMAT,
            'message': TOO_SHORT,
        }
        assert errors == {
            'name': 'Name is required.',
            'email': 'Please enter a valid email address.',
            'message': 'Message must be at least 10 characters long.',
        }

    def test_two_invalid_fields(self):
        _, errors = check_submission('J', VALID_EMAIL, 'm' * 5001)

        assert set(errors) == {'name', 'message'}
        assert errors['name'] == 'Name must be at least 2 characters long.'
        assert errors['message'] == 'Message cannot exceed 5000 characters.'

    def test_check_submission_returns_no_fields_on_error(self):
        fields, errors = check_submission('', VALID_EMAIL, VALID_MESSAGE)

        assert fields is None
        assert list(errors) == ['name']


class TestStripControlCharacters:

    def test_removes_control_characters(self):
        assert strip_control_characters('a\x00b\x1fc\x7fd') == 'abcd'

    def test_line_breaks_removed_by_default(self):
        assert strip_control_characters('a\nb\tc') == 'abc'

    def test_line_breaks_kept_on_request(self):
        assert strip_control_characters('a\r\nb\tc\x00', keep_line_breaks=True) == 'a\r\nb\tc'

    def test_printable_unicode_untouched(self):
        assert strip_control_characters('Zoë 日本 ✓') == 'Zoë 日本 ✓'
