"""
Contact Form Django Admin Configuration
"""
from django.contrib import admin
from django.utils.text import Truncator

from .models import Submission


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """Read-only admin interface for contact submissions."""

    list_display = [
        'id', 'name', 'email', 'short_message', 'created_at'
    ]

    list_filter = [
        'created_at'
    ]

    search_fields = [
        'name', 'email', 'message'
    ]

    readonly_fields = [
        'id', 'name', 'email', 'message', 'created_at'
    ]

    ordering = ['-created_at', '-id']

    def short_message(self, obj):
        """First 20 words of the message."""
        return Truncator(obj.message).words(20)
    short_message.short_description = 'Message'

    def has_add_permission(self, request):
        """Submissions only come in through the contact form."""
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
