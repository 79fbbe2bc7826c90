"""
Contact Form URL Configuration

The store and service are built once here and handed to every view that
needs them.
"""
from django.urls import path

from .services import SubmissionService
from .store import SubmissionStore
from .views import (
    ContactFormPageView,
    ContactFormSubmitView,
    SubmissionListView,
    submission_list_page,
)

submission_service = SubmissionService(SubmissionStore())

# API URLs, mounted under /api/contact/
api_urlpatterns = [
    path('submit', ContactFormSubmitView.as_view(service=submission_service), name='submit'),
    path('submissions', SubmissionListView.as_view(service=submission_service), name='submission-list'),
]

# Page URLs, mounted under /contact/
page_urlpatterns = [
    path('', ContactFormPageView.as_view(), name='form'),
    path('submissions/', submission_list_page, {'service': submission_service}, name='submissions-page'),
]
