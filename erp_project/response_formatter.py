"""
Custom Response Formatter for Standardized API Responses

Ensures all API responses follow the format:
{
    "success": true | false,
    ...payload keys...            (success)
    "error": "message",           (failure)
    "details": "extra context"    (failure, optional)
}
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status as http_status
from rest_framework.renderers import JSONRenderer

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that formats all error responses consistently.

    - DRF exceptions keep their status code.
    - Django ValidationError raised by model business methods becomes 400.
    - Anything else is logged and returned as 500 with the exception text
      in "details".
    """
    if isinstance(exc, DjangoValidationError):
        return Response(
            {
                'success': False,
                'error': format_validation_error(exc),
            },
            status=http_status.HTTP_400_BAD_REQUEST
        )

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        response.data = format_error_response(response.data, response.status_code)
        return response

    view = context.get('view') if context else None
    logger.exception(
        "Unhandled error in %s",
        view.__class__.__name__ if view is not None else 'unknown view'
    )
    return Response(
        {
            'success': False,
            'error': 'Internal server error',
            'details': str(exc),
        },
        status=http_status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def format_validation_error(exc):
    """Flatten a Django ValidationError into one message."""
    if hasattr(exc, 'message_dict'):
        return format_nested_errors(exc.message_dict)
    return ", ".join(str(m) for m in exc.messages)


def format_error_response(errors, status_code):
    """
    Format error responses into standard format.

    Handles various error formats:
    - {"field": ["error1", "error2"]} -> "field: error1, error2"
    - {"detail": "message"} -> "message"
    - ["error1", "error2"] -> "error1, error2"
    """
    if isinstance(errors, dict) and 'error' in errors:
        formatted = dict(errors)
        formatted['success'] = False
        return formatted

    message = ""

    if isinstance(errors, dict):
        # Handle field-specific errors
        error_messages = []
        for field, field_errors in errors.items():
            if field == 'detail':
                # Direct detail message
                message = str(field_errors)
            elif isinstance(field_errors, list):
                # Field validation errors
                field_msg = f"{field}: {', '.join(str(e) for e in field_errors)}"
                error_messages.append(field_msg)
            elif isinstance(field_errors, dict):
                # Nested errors
                nested_msg = f"{field}: {format_nested_errors(field_errors)}"
                error_messages.append(nested_msg)
            else:
                error_messages.append(f"{field}: {str(field_errors)}")

        if error_messages:
            message = "; ".join(error_messages)

    elif isinstance(errors, list):
        # List of errors
        message = ", ".join(str(e) for e in errors)

    else:
        # Single error message
        message = str(errors)

    return {
        "success": False,
        "error": message,
    }


def format_nested_errors(errors_dict):
    """Format nested error dictionaries."""
    messages = []
    for key, value in errors_dict.items():
        if isinstance(value, list):
            messages.append(f"{key}: {', '.join(str(v) for v in value)}")
        elif isinstance(value, dict):
            messages.append(f"{key}: {format_nested_errors(value)}")
        else:
            messages.append(f"{key}: {str(value)}")
    return "; ".join(messages)


class StandardizedJSONRenderer(JSONRenderer):
    """
    Custom JSON renderer that makes sure every body carries "success".

    Automatically wraps responses that aren't already formatted.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        """
        Render data into JSON, ensuring standard format.
        """
        response = renderer_context.get('response') if renderer_context else None
        # Don't wrap 204 No Content responses - they should have no body
        if response is not None and response.status_code == 204:
            return b''
        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data, response.status_code)
            else:
                data = self.format_success_response(data)

        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        """Check if response is already in our standard format."""
        return isinstance(data, dict) and 'success' in data

    def format_success_response(self, data):
        """
        Format success response data into standard format.
        """
        if isinstance(data, dict):
            formatted = {'success': True}
            formatted.update(data)
            return formatted
        return {
            'success': True,
            'data': data,
        }


def error_response(message, details=None, status_code=http_status.HTTP_400_BAD_REQUEST, **extra):
    """
    Helper function to create standardized error responses.

    Usage:
        from erp_project.response_formatter import error_response

        return error_response(
            "Card not found",
            status_code=status.HTTP_404_NOT_FOUND
        )
    """
    body = {
        'success': False,
        'error': message,
    }
    if details is not None:
        body['details'] = details
    body.update(extra)
    return Response(body, status=status_code)
