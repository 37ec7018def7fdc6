"""
Work and withdrawal state changes.
Every status move goes through here so its history row is never skipped.
"""
import logging

from django.db import transaction
from django.utils import timezone

from core.job_roles.core_config import Roles
from .models import WorkStatusHistory, WorkWithdrawal, WithdrawalStatusHistory

logger = logging.getLogger(__name__)


@transaction.atomic
def change_work_status(work, new_status, user, notes=''):
    """
    Move a work to ``new_status`` and record it.

    Returns:
        WorkStatusHistory or None when the status did not change
    """
    old_status = work.status
    if old_status == new_status:
        return None
    work.status = new_status
    work.save(update_fields=['status', 'updated_at'])
    return WorkStatusHistory.objects.create(
        work=work,
        old_status=old_status,
        new_status=new_status,
        changed_by=user,
        notes=notes or '',
    )


@transaction.atomic
def change_withdrawal_status(withdrawal, new_status, user, comment='', **fields):
    """
    Move a withdrawal to ``new_status``, set any extra ``fields`` and record
    the change in its status history.

    Returns:
        WithdrawalStatusHistory
    """
    old_status = withdrawal.status
    withdrawal.status = new_status
    for name, value in fields.items():
        setattr(withdrawal, name, value)
    withdrawal.save()

    entry = WithdrawalStatusHistory.objects.create(
        withdrawal=withdrawal,
        old_status=old_status,
        new_status=new_status,
        changed_by=user,
        comment=comment or '',
    )
    logger.info(
        "Withdrawal %s: %s -> %s by %s",
        withdrawal.pk, old_status, new_status, getattr(user, 'email', None)
    )
    return entry


def manager_check(withdrawal, new_status, user, comment=''):
    """Manager decision on a pending withdrawal: received, problem or blocked."""
    return change_withdrawal_status(
        withdrawal, new_status, user, comment,
        checked_by=user,
        checked_at=timezone.now(),
        manager_comment=comment or withdrawal.manager_comment,
    )


def can_view_junior(user, junior):
    """Management roles see every junior; a team lead only their own."""
    if user.role in (Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN):
        return True
    if user.role == Roles.TEAMLEAD:
        return junior.team_lead_id == user.pk
    return user.pk == junior.pk


def pending_withdrawal_exists(work):
    return work.withdrawals.filter(status__in=WorkWithdrawal.PENDING_STATUSES).exists()
