"""
Contact Submission Service

Runs field validation, stores accepted submissions and reports one of
three outcomes back to the caller:

- Accepted: validated and stored
- Rejected: validation failed, nothing was stored
- Failed: validated, but the store could not save it
"""
import logging
from dataclasses import dataclass
from typing import Union

from django.conf import settings

from .exceptions import StoreError, SubmissionValidationError
from .store import MAX_LIST_LIMIT, SubmissionStore
from .validators import ValidationErrorSet, validate_submission

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_MESSAGE = "Thank you! Your message has been sent successfully."
DEFAULT_ERROR_MESSAGE = "An error occurred while saving your message. Please try again."


@dataclass(frozen=True)
class Accepted:
    message: str
    submission_id: int

    def as_payload(self):
        return {'success': True, 'data': self.message}


@dataclass(frozen=True)
class Rejected:
    errors: ValidationErrorSet

    def as_payload(self):
        return {'success': False, 'data': dict(self.errors)}


@dataclass(frozen=True)
class Failed:
    """Store failure. `message` is safe to show users, `error` is for operators."""
    message: str
    error: StoreError

    def as_payload(self):
        return {'success': False, 'data': self.message}


SubmitOutcome = Union[Accepted, Rejected, Failed]


class SubmissionService:
    """
    Validate-then-store pipeline for contact form submissions.

    Holds no state of its own; every submit() is an independent transaction.

    Usage:
        service = SubmissionService(SubmissionStore())
        outcome = service.submit(name, email, message)
        payload = outcome.as_payload()
    """

    def __init__(self, store=None):
        self.store = store if store is not None else SubmissionStore()

    @property
    def config(self):
        return getattr(settings, 'CONTACT_FORM', {})

    def submit(self, name, email, message) -> SubmitOutcome:
        """Validate raw form input and store it if every field is valid."""
        try:
            fields = validate_submission(name, email, message)
        except SubmissionValidationError as e:
            invalid = ', '.join(f"{field}={code}" for field, code in sorted(e.errors.codes.items()))
            logger.info(f"Contact submission rejected: {invalid}")
            return Rejected(e.errors)

        try:
            submission_id = self.store.insert(fields)
        except StoreError as e:
            logger.exception(f"Failed to store contact submission: {e}")
            return Failed(self.config.get('ERROR_MESSAGE', DEFAULT_ERROR_MESSAGE), e)

        return Accepted(
            self.config.get('SUCCESS_MESSAGE', DEFAULT_SUCCESS_MESSAGE),
            submission_id,
        )

    def list_submissions(self, limit=None):
        """Most recent submissions for the staff listing, newest first."""
        if limit is None:
            limit = self.config.get('LIST_LIMIT', MAX_LIST_LIMIT)
        return self.store.list_recent(limit)
