"""
Contact Form Serializers

Read-only output serializers for the staff listing of submissions.
"""
from rest_framework import serializers

from .models import Submission
from .store import MAX_LIST_LIMIT


class SubmissionSerializer(serializers.ModelSerializer):
    """
    Serializer for listing contact submissions.

    Text fields are returned as stored; consumers embedding them in
    markup must escape them.
    """

    class Meta:
        model = Submission
        fields = ['id', 'name', 'email', 'message', 'created_at']
        read_only_fields = fields


class SubmissionListQuerySerializer(serializers.Serializer):
    """Query parameters accepted by the submission listing."""

    limit = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=MAX_LIST_LIMIT,
        help_text=f"Number of submissions to return (1-{MAX_LIST_LIMIT})"
    )
