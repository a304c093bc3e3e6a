# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework.exceptions import NotFound
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class TenantNotFound(NotFound):
    """Raised when the authenticated user owns no restaurant"""
    default_detail = 'Restaurante não encontrado para este usuário.'
    default_code = 'tenant_not_found'


STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    500: 'Internal server error',
}


def error_payload(message, details, status_code):
    return {
        'error': True,
        'message': message,
        'details': details,
        'status_code': status_code,
    }


def custom_exception_handler(exc, context):
    """
    Wrap every API error into {error, message, details, status_code}
    """
    response = exception_handler(exc, context)

    if response is not None:
        message = STATUS_MESSAGES.get(response.status_code, 'An error occurred')
        if response.status_code >= 400 and response.status_code != 404:
            logger.info(f"API error {response.status_code} on {context.get('view').__class__.__name__}: {response.data}")
        response.data = error_payload(message, response.data, response.status_code)

    elif isinstance(exc, ValidationError):
        logger.error(f"Validation Error: {exc}")
        response = Response(
            error_payload('Validation error', {'non_field_errors': exc.messages}, 400),
            status=status.HTTP_400_BAD_REQUEST,
        )

    elif isinstance(exc, IntegrityError):
        logger.error(f"Integrity Error: {exc}")
        response = Response(
            error_payload(
                'Database integrity error',
                {'error': 'This operation violates database constraints'},
                400,
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )

    else:
        logger.exception(f"Unexpected Error: {exc}")
        response = Response(
            error_payload(
                'An unexpected error occurred',
                {'error': str(exc)} if settings.DEBUG else {},
                500,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
