"""
Action history service.
Every state-changing handler records what it did through ``log_action``.
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from core.job_roles.services import get_client_ip
from .models import ActionHistory

logger = logging.getLogger(__name__)


def _json_safe(values):
    """Round-trip through DjangoJSONEncoder so Decimals and dates fit a JSONField."""
    if values is None:
        return None
    return json.loads(json.dumps(values, cls=DjangoJSONEncoder))


def log_action(request, action_type, entity_type, entity_id='', entity_name='',
               change_description='', old_values=None, new_values=None, performed_by=None):
    """
    Record an audited operation.

    Args:
        request: Current request; supplies performer, IP and user agent
        action_type: What happened (e.g. 'withdrawal_approved')
        entity_type: Kind of record touched (e.g. 'work_withdrawal')
        entity_id: Primary key of the record
        entity_name: Human readable label for the record
        change_description: Free text summary
        old_values / new_values: Dicts of changed fields
        performed_by: Overrides request.user (public endpoints pass None)

    Returns:
        ActionHistory or None when the write failed. Audit failures never
        abort the calling operation.
    """
    user = performed_by
    if user is None and request is not None and request.user.is_authenticated:
        user = request.user

    try:
        with transaction.atomic():
            return ActionHistory.objects.create(
                action_type=action_type,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else '',
                entity_name=(entity_name or '')[:255],
                change_description=change_description or '',
                old_values=_json_safe(old_values),
                new_values=_json_safe(new_values),
                performed_by=user,
                ip_address=get_client_ip(request) if request is not None else None,
                user_agent=request.META.get('HTTP_USER_AGENT', '') if request is not None else '',
            )
    except Exception:
        logger.exception("Failed to log action %s on %s %s", action_type, entity_type, entity_id)
        return None
