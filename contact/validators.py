"""
Contact Form Field Validation

Sanitizes and validates the raw name, email and message of a contact form
submission. Nothing here touches the database, so every rule can be tested
in isolation.

Values are NOT html-escaped here. Anything that echoes them into markup
must escape them (Django templates do this through autoescaping).
"""
import unicodedata
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.core.validators import EmailValidator
from rest_framework import serializers
from rest_framework.fields import empty

from .exceptions import SubmissionValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 5000

# Field error codes
REQUIRED = 'required'
TOO_SHORT = 'too_short'
TOO_LONG = 'too_long'
INVALID_FORMAT = 'invalid_format'

# DRF/Django error codes mapped onto field error codes
ERROR_CODES = {
    'required': REQUIRED,
    'blank': REQUIRED,
    'null': REQUIRED,
    'min_length': TOO_SHORT,
    'max_length': TOO_LONG,
    'invalid': INVALID_FORMAT,
}

FIELDS = ('name', 'email', 'message')

INVALID_EMAIL_MESSAGE = 'Please enter a valid email address.'


def strip_control_characters(value, keep_line_breaks=False):
    """
    Remove control characters (Unicode category Cc) from a string.

    With keep_line_breaks, newlines and tabs survive so multi-line messages
    keep their layout.
    """
    allowed = '\n\r\t' if keep_line_breaks else ''
    return ''.join(
        char for char in value
        if char in allowed or unicodedata.category(char) != 'Cc'
    )


def validate_email_shape(value):
    """
    Reject addresses EmailValidator lets through but a contact form should not:
    any whitespace (quoted local parts) and domains without a dot (IP literals).
    """
    domain = value.rpartition('@')[2]
    if any(char.isspace() for char in value) or '.' not in domain or domain.startswith('['):
        raise ValidationError(INVALID_EMAIL_MESSAGE, code='invalid')


@dataclass(frozen=True)
class ValidatedFields:
    """Sanitized contact form fields, ready to be stored."""
    name: str
    email: str
    message: str


class ValidationErrorSet(dict):
    """
    Field name -> human-readable error message for one rejected submission.

    The machine-readable code of each error (required, too_short, too_long,
    invalid_format) is kept in `codes`.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.codes = {}

    def add(self, field, code, message):
        self[field] = message
        self.codes[field] = code


class SanitizedCharField(serializers.CharField):
    """
    CharField that only takes text and drops control characters before any
    other check runs.
    """

    def __init__(self, keep_line_breaks=False, **kwargs):
        self.keep_line_breaks = keep_line_breaks
        super().__init__(**kwargs)

    def run_validation(self, data=empty):
        if data is not empty and data is not None and not isinstance(data, str):
            self.fail('invalid')
        if isinstance(data, str):
            data = strip_control_characters(data, self.keep_line_breaks)
        return super().run_validation(data)


class ContactFormSubmitSerializer(serializers.Serializer):
    """
    Public contact form submission serializer.

    Every field is checked independently, so a payload with several bad
    fields reports all of them at once.
    """

    name = SanitizedCharField(
        min_length=NAME_MIN_LENGTH,
        max_length=NAME_MAX_LENGTH,
        error_messages={
            'required': 'Name is required.',
            'blank': 'Name is required.',
            'null': 'Name is required.',
            'min_length': f'Name must be at least {NAME_MIN_LENGTH} characters long.',
            'max_length': f'Name cannot exceed {NAME_MAX_LENGTH} characters.',
            'invalid': 'Name must be text.',
        },
    )

    email = SanitizedCharField(
        max_length=EMAIL_MAX_LENGTH,
        validators=[
            # Empty allowlist: bare hosts such as "localhost" are not accepted
            EmailValidator(message=INVALID_EMAIL_MESSAGE, allowlist=[]),
            validate_email_shape,
        ],
        error_messages={
            'required': 'Email is required.',
            'blank': 'Email is required.',
            'null': 'Email is required.',
            'max_length': f'Email cannot exceed {EMAIL_MAX_LENGTH} characters.',
            'invalid': INVALID_EMAIL_MESSAGE,
        },
    )

    message = SanitizedCharField(
        keep_line_breaks=True,
        min_length=MESSAGE_MIN_LENGTH,
        max_length=MESSAGE_MAX_LENGTH,
        error_messages={
            'required': 'Message is required.',
            'blank': 'Message is required.',
            'null': 'Message is required.',
            'min_length': f'Message must be at least {MESSAGE_MIN_LENGTH} characters long.',
            'max_length': f'Message cannot exceed {MESSAGE_MAX_LENGTH} characters.',
            'invalid': 'Message must be text.',
        },
    )


def check_submission(name, email, message):
    """
    Validate raw contact form input without raising.

    Returns:
        tuple: (ValidatedFields or None, ValidationErrorSet)
    """
    serializer = ContactFormSubmitSerializer(
        data={'name': name, 'email': email, 'message': message}
    )
    errors = ValidationErrorSet()

    if serializer.is_valid():
        return ValidatedFields(**serializer.validated_data), errors

    for field in FIELDS:
        details = serializer.errors.get(field)
        if not details:
            continue
        detail = details[0]
        errors.add(field, ERROR_CODES.get(detail.code, INVALID_FORMAT), str(detail))

    return None, errors


def validate_submission(name, email, message):
    """
    Validate raw contact form input.

    Returns:
        ValidatedFields with the sanitized values

    Raises:
        SubmissionValidationError: if any field is invalid
    """
    fields, errors = check_submission(name, email, message)
    if errors:
        raise SubmissionValidationError(errors)
    return fields
