"""
API error envelope.

Every error leaving the API has the shape ``{success: false, message, errors?}``
so clients branch on ``success`` alone.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('garment.api')


class DomainError(Exception):
    """A business rule rejected the request; carries the HTTP status to answer with"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class NotAuthorizedError(DomainError):
    """Signed in, but not allowed to touch this object"""
    status_code = status.HTTP_403_FORBIDDEN


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def envelope_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        return Response({'success': False, 'message': exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
        return Response(
            {'success': False, 'message': 'Something went wrong!', 'error': str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {
            'success': False,
            'message': _first_message(exc.detail),
            'errors': exc.detail,
        }
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
        response.data = {'success': False, 'message': str(detail) if detail else 'Request failed'}
    return response
