"""
Contact Form Permissions

Access to stored submissions is delegated to Django's own staff flag and
model permissions.
"""
from rest_framework import permissions

VIEW_SUBMISSION_PERMISSION = 'contact.view_submission'


class CanViewSubmissions(permissions.BasePermission):
    """
    Permission for staff users allowed to read contact submissions.
    """

    def has_permission(self, request, view):
        """Check if user is authenticated staff with the view permission."""
        user = request.user
        return bool(
            user and
            user.is_authenticated and
            user.is_staff and
            user.has_perm(VIEW_SUBMISSION_PERMISSION)
        )
