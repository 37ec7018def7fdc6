"""
Permission decorators for function-based views.
"""
import logging
from functools import wraps

from rest_framework.response import Response
from rest_framework import status

from core.job_roles.services import user_can_access

logger = logging.getLogger(__name__)


def _authentication_required():
    return Response(
        {'success': False, 'error': 'Authentication required'},
        status=status.HTTP_401_UNAUTHORIZED
    )


def _access_denied(reason):
    return Response(
        {'success': False, 'error': 'Access denied', 'details': reason},
        status=status.HTTP_403_FORBIDDEN
    )


def require_roles(*roles, require_active=True):
    """
    Decorator to restrict a function-based view to a set of roles.

    Args:
        roles: Allowed role strings. With no roles every role is allowed
               and only the status check applies.
        require_active: Reject users whose status is not 'active'

    Usage:
        @api_view(['GET', 'POST'])
        @require_roles(Roles.CFO, Roles.ADMIN)
        def banks_handler(request):
            ...

    Different roles per method are expressed by stacking the check inside
    the view with ``check_roles``.
    """
    allowed_roles = roles or None

    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user or not request.user.is_authenticated:
                return _authentication_required()

            allowed, reason = user_can_access(request.user, allowed_roles, require_active)
            if not allowed:
                logger.warning(
                    "Access denied for %s on %s: %s",
                    request.user.email, request.path, reason
                )
                return _access_denied(reason)

            return view_func(request, *args, **kwargs)

        # Add metadata for introspection/documentation
        wrapper.allowed_roles = allowed_roles
        return wrapper
    return decorator


def require_active_user(view_func):
    """
    Decorator for endpoints open to every role but only to active users.

    Usage:
        @api_view(['GET'])
        @require_active_user
        def casinos_handler(request):
            ...
    """
    return require_roles(require_active=True)(view_func)


def require_method_roles(method_roles, require_active=True):
    """
    Decorator for handlers whose allowed roles differ per HTTP method.

    Args:
        method_roles: Dict of HTTP method -> iterable of roles
                      (None means every active user)

    Usage:
        @api_view(['GET', 'POST'])
        @require_method_roles({
            'GET': MANAGEMENT_ROLES + [Roles.TESTER],
            'POST': FINANCE_ROLES,
        })
        def banks_handler(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user or not request.user.is_authenticated:
                return _authentication_required()

            roles = method_roles.get(request.method)
            allowed, reason = user_can_access(request.user, roles, require_active)
            if not allowed:
                logger.warning(
                    "Access denied for %s on %s %s: %s",
                    request.user.email, request.method, request.path, reason
                )
                return _access_denied(reason)

            return view_func(request, *args, **kwargs)

        wrapper.method_roles = method_roles
        return wrapper
    return decorator


def check_roles(request, *roles, require_active=True):
    """
    Inline variant for ViewSet actions and branches inside a handler.

    Returns:
        None when allowed, otherwise a 401/403 Response to return as-is.

    Usage:
        denied = check_roles(request, Roles.CFO, Roles.ADMIN)
        if denied:
            return denied
    """
    if not request.user or not request.user.is_authenticated:
        return _authentication_required()

    allowed, reason = user_can_access(request.user, roles or None, require_active)
    if not allowed:
        logger.warning(
            "Access denied for %s on %s %s: %s",
            request.user.email, request.method, request.path, reason
        )
        return _access_denied(reason)
    return None
