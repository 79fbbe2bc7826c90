"""
Contact Form Models

Database schema for contact form submissions.
"""
from django.db import models

from .exceptions import ImmutableSubmissionError


class Submission(models.Model):
    """
    A validated contact form submission.

    Rows are append-only: they are created once through the submission
    service and never edited. They are only removed in bulk, when the
    contact form is uninstalled.
    """

    id = models.BigAutoField(primary_key=True)

    # Contact Information
    name = models.CharField(
        max_length=100,
        help_text="Name of the person contacting us"
    )

    email = models.EmailField(
        max_length=254,
        help_text="Email address for follow-up"
    )

    # Message Details
    message = models.TextField(
        help_text="The message content (10-5000 characters)"
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the message was submitted"
    )

    class Meta:
        db_table = 'contact_submissions'
        ordering = ['-created_at', '-id']
        verbose_name = 'Contact Submission'
        verbose_name_plural = 'Contact Submissions'

    def __str__(self):
        return f"#{self.pk} {self.name} <{self.email}>"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableSubmissionError(
                f"Contact submission {self.pk} is immutable and cannot be updated"
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableSubmissionError(
            "Contact submissions can only be removed by uninstalling the contact form"
        )
