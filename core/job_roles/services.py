"""
Service layer for role checking.
Contains the helpers the decorators and views share.
"""
from typing import Tuple

from .core_config import UserStatus


def is_active_user(user) -> bool:
    """True when the user is authenticated and their status is active."""
    if not user or not user.is_authenticated:
        return False
    return getattr(user, 'status', None) == UserStatus.ACTIVE


def user_has_role(user, *roles) -> bool:
    """True when the user's role is one of ``roles``."""
    if not user or not user.is_authenticated:
        return False
    return getattr(user, 'role', None) in roles


def user_can_access(user, roles=None, require_active=True) -> Tuple[bool, str]:
    """
    Check whether a user may call an endpoint restricted to ``roles``.

    Args:
        user: The requesting user
        roles: Iterable of allowed role strings; None allows every role
        require_active: Reject users whose status is not active

    Returns:
        (allowed, reason) tuple; reason is empty when allowed
    """
    if require_active and not is_active_user(user):
        return False, f"User status is '{getattr(user, 'status', None)}', must be 'active'"

    if roles is not None and user.role not in roles:
        return False, f"Role '{user.role}' is not allowed for this operation"

    return True, ''


def get_client_ip(request) -> str:
    """
    Get the caller's IP: first X-Forwarded-For entry, then REMOTE_ADDR,
    falling back to 127.0.0.1.
    """
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR') or '127.0.0.1'
