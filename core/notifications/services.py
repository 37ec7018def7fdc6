"""
Notification service.
Creates notifications for active recipients and provides the domain-specific
helpers handlers call after state changes.
"""
import logging
from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from core.job_roles.core_config import Roles, UserStatus
from .models import Notification

logger = logging.getLogger(__name__)


def send_notification(user_ids: Iterable, type: str, title: str, message: str,
                      sender=None, priority: str = Notification.PRIORITY_NORMAL,
                      metadata: Optional[dict] = None, action_url: Optional[str] = None,
                      show_sound: bool = True, show_popup: bool = True) -> int:
    """
    Create one notification per active recipient.

    Args:
        user_ids: Recipient user ids; inactive or unknown ids are skipped
        type: Notification category (e.g. 'withdrawal')
        title / message: Text shown to the recipient
        sender: Optional user who triggered it
        priority: low | normal | high | urgent
        metadata: Extra JSON payload
        action_url: Link the client opens on click

    Returns:
        int: Number of notifications created
    """
    User = get_user_model()
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return 0

    recipients = User.objects.filter(pk__in=ids, status=UserStatus.ACTIVE).values_list('pk', flat=True)
    notifications = [
        Notification(
            user_id=recipient_id,
            sender=sender,
            type=type,
            title=title,
            message=message,
            priority=priority,
            metadata=metadata or {},
            action_url=action_url,
            show_sound=show_sound,
            show_popup=show_popup,
        )
        for recipient_id in recipients
    ]
    Notification.objects.bulk_create(notifications)
    logger.info("Sent %s '%s' notification(s): %s", len(notifications), type, title)
    return len(notifications)


def mark_as_read(user, notification_ids=None) -> int:
    """
    Mark the user's unread notifications as read.

    Args:
        user: Owner of the notifications
        notification_ids: Limit to these ids; None marks all

    Returns:
        int: Number of notifications updated
    """
    queryset = Notification.objects.for_user(user).unread()
    if notification_ids is not None:
        queryset = queryset.filter(pk__in=notification_ids)
    return queryset.update(is_read=True, read_at=timezone.now())


def get_role_user_ids(*roles):
    """Ids of active users holding any of ``roles``."""
    User = get_user_model()
    return list(
        User.objects.filter(role__in=roles, status=UserStatus.ACTIVE).values_list('pk', flat=True)
    )


# ============================================================================
# Domain helpers
# ============================================================================

def notify_card_assignment(junior, card, sender=None):
    return send_notification(
        [junior.pk],
        type='card_assignment',
        title='New card assigned',
        message=f'Card {card.card_number_mask} was assigned to you',
        sender=sender,
        metadata={'card_id': card.pk, 'card_mask': card.card_number_mask},
        action_url='/dashboard/junior/cards',
    )


def notify_bank_assignment(user, bank, sender=None):
    return send_notification(
        [user.pk],
        type='bank_assignment',
        title='New bank assigned',
        message=f'Bank {bank.name} was assigned to you',
        sender=sender,
        metadata={'bank_id': bank.pk},
    )


def notify_withdrawal_pending(withdrawal, junior, amount, casino_name, source_type='junior'):
    """Tell the junior's team lead and every manager a withdrawal awaits review."""
    recipients = get_role_user_ids(Roles.MANAGER)
    if junior.team_lead_id:
        recipients.append(junior.team_lead_id)
    return send_notification(
        recipients,
        type='withdrawal',
        title='New withdrawal awaiting review',
        message=f'{junior.display_name} requested ${amount} from {casino_name}',
        sender=junior,
        priority=Notification.PRIORITY_HIGH,
        metadata={'withdrawal_id': withdrawal.pk, 'source_type': source_type, 'amount': str(amount)},
        action_url='/dashboard/manager/withdrawals',
    )


def notify_withdrawal_decision(withdrawal, junior, new_status, sender=None, comment=''):
    message = f'Your withdrawal #{withdrawal.pk} is now "{new_status}"'
    if comment:
        message = f'{message}: {comment}'
    return send_notification(
        [junior.pk],
        type='withdrawal',
        title='Withdrawal status changed',
        message=message,
        sender=sender,
        priority=Notification.PRIORITY_HIGH if new_status in ('problem', 'blocked') else Notification.PRIORITY_NORMAL,
        metadata={'withdrawal_id': withdrawal.pk, 'status': new_status},
    )


def notify_task_assigned(task, sender=None):
    if task.assignee_id is None:
        return 0
    return send_notification(
        [task.assignee_id],
        type='task',
        title='New task',
        message=f'You were assigned the task "{task.title}"',
        sender=sender,
        priority=Notification.PRIORITY_HIGH if task.priority in ('high', 'urgent') else Notification.PRIORITY_NORMAL,
        metadata={'task_id': task.pk},
        action_url=f'/dashboard/tasks/{task.pk}',
    )


def notify_nda_signed(agreement):
    return send_notification(
        get_role_user_ids(Roles.HR, Roles.ADMIN),
        type='nda',
        title='NDA signed',
        message=f'{agreement.full_name} signed the NDA',
        metadata={'agreement_id': agreement.pk},
    )
