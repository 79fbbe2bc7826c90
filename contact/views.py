"""
Contact Form Views

Public form page, the AJAX submission endpoint and the staff listing of
stored submissions.
"""
import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.contrib.auth.decorators import permission_required
from django.http import JsonResponse
from django.shortcuts import render
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_protect, ensure_csrf_cookie
from django.views.csrf import csrf_failure as default_csrf_failure
from django.views.generic import TemplateView
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import StoreError
from .permissions import VIEW_SUBMISSION_PERMISSION, CanViewSubmissions
from .serializers import SubmissionListQuerySerializer, SubmissionSerializer
from .services import Accepted, Rejected
from .validators import (
    EMAIL_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    NAME_MAX_LENGTH,
)

logger = logging.getLogger(__name__)

CONTACT_API_PREFIX = '/api/contact/'
SECURITY_CHECK_FAILED = 'Security check failed.'
INVALID_PAYLOAD = 'Invalid request payload.'
SUBMISSIONS_UNAVAILABLE = 'Submissions are temporarily unavailable.'


def csrf_failure(request, reason=''):
    """
    CSRF failure view.

    Contact API callers get the submission payload shape; every other path
    (admin, host pages) keeps Django's default 403 page.
    """
    if not request.path.startswith(CONTACT_API_PREFIX):
        return default_csrf_failure(request, reason=reason)

    logger.warning(f"CSRF verification failed for {request.path}: {reason}")
    return JsonResponse(
        {'success': False, 'data': SECURITY_CHECK_FAILED},
        status=status.HTTP_403_FORBIDDEN
    )


@method_decorator(ensure_csrf_cookie, name='dispatch')
class ContactFormPageView(TemplateView):
    """
    Public contact form page.

    GET /contact/

    Sets the CSRF cookie the AJAX submission has to send back.
    """

    template_name = 'contact/form.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['limits'] = {
            'name': NAME_MAX_LENGTH,
            'email': EMAIL_MAX_LENGTH,
            'message': MESSAGE_MAX_LENGTH,
        }
        context['form_config'] = {
            'messages': {
                'sending': 'Sending...',
                'error': 'An error occurred. Please try again.',
                'requiredFields': 'Please fill in all required fields.',
            },
        }
        return context


@method_decorator(csrf_protect, name='dispatch')
class ContactFormSubmitView(APIView):
    """
    Public endpoint for contact form submissions.

    POST /api/contact/submit

    No authentication required, but the request must carry a valid CSRF
    token (form field or X-CSRFToken header).
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    service = None

    def post(self, request):
        """Submit a contact form."""
        data = request.data
        if not hasattr(data, 'get'):
            return Response(
                {'success': False, 'data': INVALID_PAYLOAD},
                status=status.HTTP_400_BAD_REQUEST
            )

        outcome = self.service.submit(
            data.get('name'),
            data.get('email'),
            data.get('message'),
        )

        if isinstance(outcome, Accepted):
            response_status = status.HTTP_201_CREATED
        elif isinstance(outcome, Rejected):
            response_status = status.HTTP_400_BAD_REQUEST
        else:
            response_status = status.HTTP_500_INTERNAL_SERVER_ERROR

        return Response(outcome.as_payload(), status=response_status)


class SubmissionListView(APIView):
    """
    List recent contact submissions (staff only).

    GET /api/contact/submissions

    Query Parameters:
    - limit: Number of submissions to return (1-500, default: 500)
    """

    permission_classes = [CanViewSubmissions]
    service = None

    def get(self, request):
        """Get recent submissions, newest first."""
        query = SubmissionListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {'error': 'Invalid query parameters', 'fields': query.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            submissions = self.service.list_submissions(query.validated_data.get('limit'))
        except StoreError as e:
            logger.exception(f"Failed to list contact submissions: {e}")
            return Response(
                {'error': SUBMISSIONS_UNAVAILABLE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response({
            'count': len(submissions),
            'results': SubmissionSerializer(submissions, many=True).data,
        })


@staff_member_required
@permission_required(VIEW_SUBMISSION_PERMISSION, raise_exception=True)
def submission_list_page(request, service):
    """
    Staff page with a table of recent submissions.

    GET /contact/submissions/
    """
    try:
        submissions = service.list_submissions()
    except StoreError as e:
        logger.exception(f"Failed to list contact submissions: {e}")
        return render(
            request,
            'contact/submissions.html',
            {'submissions': [], 'unavailable_notice': SUBMISSIONS_UNAVAILABLE},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return render(request, 'contact/submissions.html', {'submissions': submissions})
