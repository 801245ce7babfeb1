"""
Custom exception handler for DRF: milk ledger errors become JSON bodies with
their own status, everything else is logged with the request details.
"""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import MilkLedgerError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    request = context.get('request')
    view = context.get('view')
    endpoint = f"{request.method} {request.path}" if request else 'unknown endpoint'
    view_name = view.__class__.__name__ if view else 'Unknown'

    if isinstance(exc, MilkLedgerError):
        if exc.status_code >= 500:
            logger.error(f"{endpoint} ({view_name}) failed: {exc.__class__.__name__}: {exc.message}")
        else:
            logger.info(f"{endpoint} ({view_name}) refused: {exc.__class__.__name__}: {exc.message}")
        return Response(exc.as_dict(), status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled error on {endpoint} ({view_name}): {exc}", exc_info=exc)
        return Response({
            'error': str(exc),
            'error_type': exc.__class__.__name__,
            'retryable': False,
            'detail': 'An unexpected error occurred. Please check server logs.'
        }, status=500)

    if isinstance(response.data, dict):
        response.data['error_type'] = exc.__class__.__name__
    return response
