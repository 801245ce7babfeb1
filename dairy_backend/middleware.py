"""
Custom middleware for handling invalid HTTP_HOST headers.
"""
from django.core.exceptions import DisallowedHost
from django.http import HttpResponseBadRequest
import logging

logger = logging.getLogger(__name__)


class SuppressDisallowedHostMiddleware:
    """
    Answer requests carrying a bad Host header with a plain 400 instead of
    letting Django log a DisallowedHost error for each one.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        try:
            request.get_host()
        except DisallowedHost as exc:
            logger.debug(
                f"Rejected request with invalid HTTP_HOST: {exc}. "
                f"Remote address: {request.META.get('REMOTE_ADDR', 'unknown')}"
            )
            return HttpResponseBadRequest("Invalid HTTP_HOST header")
        return self.get_response(request)
