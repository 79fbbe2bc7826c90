"""
Contact Form Exceptions

Error types raised by the validation and persistence layers of the
contact form pipeline.
"""


class SubmissionValidationError(Exception):
    """
    Raised when one or more submitted fields fail validation.

    `errors` is a ValidationErrorSet holding one message per invalid field.
    """

    def __init__(self, errors):
        self.errors = errors
        super().__init__(f"Invalid contact form fields: {', '.join(sorted(errors))}")


class StoreError(Exception):
    """Base class for submission store failures."""
    pass


class StoreWriteFailed(StoreError):
    """The database rejected or failed a write."""
    pass


class StoreUnavailable(StoreError):
    """The database could not be reached."""
    pass


class ImmutableSubmissionError(Exception):
    """Raised on any attempt to edit or individually delete a stored submission."""
    pass
