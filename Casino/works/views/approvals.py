"""
Withdrawal approval chain.

Team leads move their juniors' withdrawals from ``new`` to ``waiting`` (or
``problem``); managers settle them. The manager queue merges card work,
PayPal and tester withdrawals into one list.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from Casino.casinos.models import CasinoTest, TestWithdrawal
from core.action_history.services import log_action
from core.job_roles.core_config import Roles, UserStatus
from core.job_roles.decorators import require_roles, require_method_roles
from core.notifications.services import notify_withdrawal_decision, notify_task_assigned
from erp_project.response_formatter import error_response
from Finance.paypal.models import PayPalWithdrawal
from HR.tasks.models import Task
from HR.tasks.services import create_task
from ..models import WorkWithdrawal
from ..serializers import WorkWithdrawalSerializer
from ..services import change_withdrawal_status
from .withdrawals import withdrawals_queryset

logger = logging.getLogger(__name__)
User = get_user_model()

SOURCE_JUNIOR = 'junior'
SOURCE_PAYPAL = 'paypal'
SOURCE_TESTER = 'tester'

# role -> actions allowed through the universal endpoint
UNIVERSAL_PERMISSIONS = {
    Roles.TEAMLEAD: {'approve', 'reject', 'comment'},
    Roles.MANAGER: {'approve', 'reject', 'comment', 'block', 'create_task'},
    Roles.ADMIN: {'approve', 'reject', 'comment', 'block', 'create_task'},
    Roles.HR: {'comment', 'block', 'create_task'},
    Roles.CFO: {'comment', 'block', 'create_task'},
}

DECISION_STATUS = {
    'approve': WorkWithdrawal.STATUS_RECEIVED,
    'reject': WorkWithdrawal.STATUS_PROBLEM,
    'block': WorkWithdrawal.STATUS_BLOCKED,
}


def _denied(details):
    return error_response('Access denied', details=details, status_code=status.HTTP_403_FORBIDDEN)


# ============================================================================
# Team lead
# ============================================================================

@api_view(['GET'])
@require_roles(Roles.TEAMLEAD)
def teamlead_withdrawals(request):
    """
    GET /casino/teamlead/withdrawals/
    - Withdrawals of the team lead's active juniors
    - Query: status
    """
    queryset = withdrawals_queryset().filter(
        work__junior__team_lead=request.user,
        work__junior__status=UserStatus.ACTIVE,
        work__junior__role=Roles.JUNIOR,
    )
    if request.query_params.get('status'):
        queryset = queryset.filter(status=request.query_params['status'])

    data = WorkWithdrawalSerializer(queryset, many=True).data
    return Response({
        'success': True,
        'withdrawals': data,
        'count': len(data),
        'pending_count': sum(1 for item in data if item['status'] == WorkWithdrawal.STATUS_NEW),
    })


def _teamlead_withdrawal(request, withdrawal_id):
    """Fetch a withdrawal a team lead may decide on; returns (withdrawal, error_response)."""
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    junior = withdrawal.work.junior
    if junior.role != Roles.JUNIOR or junior.team_lead_id != request.user.pk:
        return None, _denied('You can only review withdrawals of your own juniors')
    if withdrawal.status != WorkWithdrawal.STATUS_NEW:
        return None, error_response(
            'Withdrawal already processed',
            details=f'Withdrawal status: {withdrawal.status}'
        )
    return withdrawal, None


@api_view(['PATCH'])
@require_roles(Roles.TEAMLEAD)
def teamlead_withdrawal_approve(request, withdrawal_id):
    """
    PATCH /casino/teamlead/withdrawals/{id}/approve/
    - Request body: { "comment": "..." }
    """
    withdrawal, error = _teamlead_withdrawal(request, withdrawal_id)
    if error:
        return error

    comment = (request.data.get('comment') or '').strip() or f'Approved by Team Lead {request.user.email}'
    change_withdrawal_status(
        withdrawal, WorkWithdrawal.STATUS_WAITING, request.user, comment,
        teamlead_comment=comment,
        checked_by_teamlead=request.user,
    )
    log_action(
        request, 'withdrawal_teamlead_approved', 'work_withdrawal', withdrawal.pk,
        withdrawal.work.junior.display_name,
        change_description=comment,
        old_values={'status': WorkWithdrawal.STATUS_NEW},
        new_values={'status': WorkWithdrawal.STATUS_WAITING},
    )
    return Response({
        'success': True,
        'message': 'Withdrawal approved',
        'withdrawal': WorkWithdrawalSerializer(withdrawal).data,
    })


@api_view(['PATCH'])
@require_roles(Roles.TEAMLEAD)
def teamlead_withdrawal_reject(request, withdrawal_id):
    """
    PATCH /casino/teamlead/withdrawals/{id}/reject/
    - Request body: { "comment": "..." } (required)
    """
    comment = (request.data.get('comment') or '').strip()
    if not comment:
        return error_response('A comment is required to reject a withdrawal')

    withdrawal, error = _teamlead_withdrawal(request, withdrawal_id)
    if error:
        return error

    teamlead_comment = f'Rejected by Team Lead {request.user.email}: {comment}'
    change_withdrawal_status(
        withdrawal, WorkWithdrawal.STATUS_PROBLEM, request.user, comment,
        teamlead_comment=teamlead_comment,
        checked_by_teamlead=request.user,
    )
    notify_withdrawal_decision(
        withdrawal, withdrawal.work.junior, WorkWithdrawal.STATUS_PROBLEM,
        sender=request.user, comment=comment,
    )
    log_action(
        request, 'withdrawal_teamlead_rejected', 'work_withdrawal', withdrawal.pk,
        withdrawal.work.junior.display_name,
        change_description=teamlead_comment,
        old_values={'status': WorkWithdrawal.STATUS_NEW},
        new_values={'status': WorkWithdrawal.STATUS_PROBLEM},
    )
    return Response({
        'success': True,
        'message': 'Withdrawal rejected',
        'withdrawal': WorkWithdrawalSerializer(withdrawal).data,
    })


# ============================================================================
# Manager queue
# ============================================================================

def _flatten_junior(withdrawal):
    work = withdrawal.work
    return {
        'id': withdrawal.pk,
        'source_type': SOURCE_JUNIOR,
        'user_id': work.junior_id,
        'user_name': work.junior.display_name,
        'user_email': work.junior.email,
        'user_role': work.junior.role,
        'casino_name': work.casino.name,
        'casino_currency': work.casino.currency,
        'card_mask': work.card.card_number_mask,
        'bank_name': work.card.bank_account.bank.name,
        'deposit_amount': work.deposit_amount,
        'amount': withdrawal.withdrawal_amount,
        'status': withdrawal.status,
        'comment': withdrawal.comment,
        'teamlead_comment': withdrawal.teamlead_comment,
        'manager_comment': withdrawal.manager_comment,
        'created_at': withdrawal.created_at,
    }


def _flatten_paypal(withdrawal):
    return {
        'id': withdrawal.pk,
        'source_type': SOURCE_PAYPAL,
        'user_id': withdrawal.user_id,
        'user_name': withdrawal.user.display_name,
        'user_email': withdrawal.user.email,
        'user_role': withdrawal.user.role,
        'casino_name': withdrawal.casino.name,
        'casino_currency': withdrawal.casino.currency,
        'card_mask': None,
        'bank_name': 'PayPal',
        'paypal_email': withdrawal.paypal_account.email,
        'deposit_amount': withdrawal.work.deposit_amount,
        'amount': withdrawal.withdrawal_amount,
        'status': withdrawal.status,
        'manager_status': withdrawal.manager_status,
        'teamlead_status': withdrawal.teamlead_status,
        'comment': withdrawal.comment,
        'manager_comment': withdrawal.manager_comment,
        'created_at': withdrawal.created_at,
    }


def _flatten_tester(withdrawal):
    test = withdrawal.test
    card = test.card
    return {
        'id': withdrawal.pk,
        'source_type': SOURCE_TESTER,
        'user_id': test.tester_id,
        'user_name': test.tester.display_name,
        'user_email': test.tester.email,
        'user_role': test.tester.role,
        'casino_name': test.casino.name,
        'casino_currency': test.casino.currency,
        'card_mask': card.card_number_mask if card else None,
        'bank_name': card.bank_account.bank.name if card else None,
        'deposit_amount': test.deposit_amount,
        'amount': withdrawal.withdrawal_amount,
        'status': withdrawal.withdrawal_status,
        'comment': withdrawal.notes,
        'manager_comment': withdrawal.manager_comment,
        'created_at': withdrawal.requested_at,
    }


def _apply_bulk(request, item, bulk_action, comment):
    """
    Settle one queued item. Returns the source type when it changed, else None.
    """
    item_id, source_type = item.get('id'), item.get('source_type')
    approve = bulk_action == 'bulk_approve'

    if source_type == SOURCE_TESTER:
        withdrawal = TestWithdrawal.objects.select_related('test__casino').filter(pk=item_id).first()
        if withdrawal is None or not withdrawal.is_pending:
            return None
        old_status = withdrawal.withdrawal_status
        withdrawal.withdrawal_status = TestWithdrawal.STATUS_APPROVED if approve else TestWithdrawal.STATUS_REJECTED
        withdrawal.manager_comment = comment
        withdrawal.checked_by = request.user
        withdrawal.checked_at = timezone.now()
        withdrawal.save()
        if approve:
            withdrawal.test.complete(CasinoTest.RESULT_APPROVED)
        new_status, entity_type = withdrawal.withdrawal_status, 'test_withdrawal'

    elif source_type == SOURCE_PAYPAL:
        withdrawal = PayPalWithdrawal.objects.filter(pk=item_id).first()
        if withdrawal is None or not withdrawal.is_pending:
            return None
        old_status = withdrawal.status
        withdrawal.status = PayPalWithdrawal.STATUS_RECEIVED if approve else PayPalWithdrawal.STATUS_BLOCKED
        withdrawal.manager_status = withdrawal.status
        withdrawal.manager_comment = comment or withdrawal.manager_comment
        withdrawal.checked_by = request.user
        withdrawal.checked_at = timezone.now()
        withdrawal.save()
        new_status, entity_type = withdrawal.status, 'paypal_withdrawal'

    else:
        withdrawal = WorkWithdrawal.objects.filter(pk=item_id).first()
        if withdrawal is None or not withdrawal.is_pending:
            return None
        old_status = withdrawal.status
        new_status = WorkWithdrawal.STATUS_RECEIVED if approve else WorkWithdrawal.STATUS_BLOCKED
        change_withdrawal_status(
            withdrawal, new_status, request.user, comment,
            checked_by=request.user,
            checked_at=timezone.now(),
            manager_comment=comment or withdrawal.manager_comment,
        )
        source_type, entity_type = SOURCE_JUNIOR, 'work_withdrawal'

    log_action(
        request, f'withdrawal_{bulk_action}', entity_type, withdrawal.pk,
        change_description=comment or f'{bulk_action} -> {new_status}',
        old_values={'status': old_status},
        new_values={'status': new_status},
    )
    return source_type


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': [Roles.MANAGER, Roles.TEAMLEAD, Roles.HR, Roles.ADMIN, Roles.CFO, Roles.TESTER],
    'POST': [Roles.MANAGER],
})
def manager_withdrawals(request):
    """
    GET /casino/manager/withdrawals/
    - Junior, PayPal and tester withdrawals in one list, oldest first
    - Team leads only see their own juniors
    - Query: status

    POST /casino/manager/withdrawals/
    - Request body: { "action": "bulk_approve" | "bulk_reject",
                      "withdrawal_ids": [{"id": 1, "source_type": "junior"}, ...],
                      "comment": "..." }
    """
    if request.method == 'GET':
        user = request.user
        status_filter = request.query_params.get('status')

        junior_qs = withdrawals_queryset()
        paypal_qs = PayPalWithdrawal.objects.select_related('user', 'casino', 'paypal_account', 'work')
        tester_qs = TestWithdrawal.objects.select_related(
            'test__tester', 'test__casino', 'test__card__bank_account__bank'
        )
        if user.role == Roles.TEAMLEAD:
            junior_qs = junior_qs.filter(work__junior__team_lead=user)
            paypal_qs = paypal_qs.filter(user__team_lead=user)
            tester_qs = tester_qs.none()
        if status_filter:
            junior_qs = junior_qs.filter(status=status_filter)
            paypal_qs = paypal_qs.filter(status=status_filter)
            tester_qs = tester_qs.filter(withdrawal_status=status_filter)

        junior_items = [_flatten_junior(w) for w in junior_qs]
        paypal_items = [_flatten_paypal(w) for w in paypal_qs]
        tester_items = [_flatten_tester(w) for w in tester_qs]
        merged = sorted(junior_items + paypal_items + tester_items, key=lambda item: item['created_at'])

        return Response({
            'success': True,
            'data': merged,
            'count': len(merged),
            'tester_count': len(tester_items),
            'junior_count': len(junior_items),
            'paypal_count': len(paypal_items),
        })

    bulk_action = request.data.get('action')
    items = request.data.get('withdrawal_ids')
    comment = (request.data.get('comment') or '').strip()
    if bulk_action not in ('bulk_approve', 'bulk_reject'):
        return error_response('action must be bulk_approve or bulk_reject')
    if not isinstance(items, list) or not items:
        return error_response('withdrawal_ids must be a non-empty list')
    if not all(isinstance(item, dict) and item.get('id') for item in items):
        return error_response('Each withdrawal_ids item needs an id and a source_type')

    counts = {SOURCE_JUNIOR: 0, SOURCE_PAYPAL: 0, SOURCE_TESTER: 0}
    with transaction.atomic():
        for item in items:
            changed = _apply_bulk(request, item, bulk_action, comment)
            if changed:
                counts[changed] += 1

    updated = sum(counts.values())
    logger.info("%s of %s withdrawal(s) by %s", bulk_action, updated, request.user.email)
    return Response({
        'success': True,
        'updated_count': updated,
        'test_updated': counts[SOURCE_TESTER],
        'junior_updated': counts[SOURCE_JUNIOR],
        'paypal_updated': counts[SOURCE_PAYPAL],
    })


# ============================================================================
# Universal action endpoint
# ============================================================================

def _regular_action(request, withdrawal, action_name, comment):
    user = request.user
    comment_field = f'{user.role}_comment'

    if user.role == Roles.TEAMLEAD and withdrawal.work.junior.team_lead_id != user.pk:
        return _denied('You can only review withdrawals of your own juniors')

    if action_name == 'comment':
        if not comment:
            return error_response('comment is required')
        setattr(withdrawal, comment_field, comment)
        withdrawal.save(update_fields=[comment_field, 'updated_at'])
        return None

    if user.role in (Roles.MANAGER, Roles.ADMIN, Roles.TEAMLEAD):
        if not withdrawal.is_pending:
            return error_response(f'Withdrawal is already {withdrawal.status}')

        if user.role == Roles.TEAMLEAD and action_name == 'approve':
            new_status = WorkWithdrawal.STATUS_WAITING
            fields = {'teamlead_comment': comment or None, 'checked_by_teamlead': user}
        else:
            new_status = DECISION_STATUS[action_name]
            fields = {'checked_by': user, 'checked_at': timezone.now()}
            decision_field = 'teamlead_comment' if user.role == Roles.TEAMLEAD else 'manager_comment'
            fields[decision_field] = comment or getattr(withdrawal, decision_field)
        change_withdrawal_status(withdrawal, new_status, user, comment, **fields)
        notify_withdrawal_decision(withdrawal, withdrawal.work.junior, new_status, sender=user, comment=comment)
        return None

    # hr / cfo raise an alarm; only block changes the status
    fields = {
        'alarm_message': comment or f'{user.role.upper()}: {action_name}',
        comment_field: comment or getattr(withdrawal, comment_field, None),
        f'checked_by_{user.role}': user,
    }
    if action_name == 'block':
        change_withdrawal_status(withdrawal, WorkWithdrawal.STATUS_BLOCKED, user, comment, **fields)
    else:
        for name, value in fields.items():
            setattr(withdrawal, name, value)
        withdrawal.save()
    return None


def _paypal_action(request, withdrawal, action_name, comment):
    user = request.user
    comment_field = f'{user.role}_comment'

    if user.role == Roles.TEAMLEAD and withdrawal.user.team_lead_id != user.pk:
        return _denied('You can only review withdrawals of your own juniors')

    if action_name != 'comment':
        new_status = DECISION_STATUS[action_name]
        if user.role == Roles.MANAGER:
            withdrawal.manager_status = new_status
            withdrawal.checked_by = user
            withdrawal.checked_at = timezone.now()
        elif user.role == Roles.TEAMLEAD:
            withdrawal.teamlead_status = WorkWithdrawal.STATUS_WAITING if action_name == 'approve' else new_status
            withdrawal.checked_by_teamlead = user
        else:
            withdrawal.status = new_status
            if user.role in (Roles.HR, Roles.CFO):
                setattr(withdrawal, f'checked_by_{user.role}', user)
            else:
                withdrawal.checked_by = user
                withdrawal.checked_at = timezone.now()
    elif not comment:
        return error_response('comment is required')

    if comment:
        setattr(withdrawal, comment_field, comment)
    withdrawal.save()
    return None


@api_view(['POST'])
@require_roles(*UNIVERSAL_PERMISSIONS.keys())
def universal_withdrawal_action(request, withdrawal_id):
    """
    POST /casino/universal/withdrawals/{id}/action/
    - Request body: { "action": "approve" | "reject" | "block" | "comment" | "create_task",
                      "source_type": "regular" | "paypal", "comment": "...",
                      "title": "...", "description": "...", "priority": "...",
                      "assignee_id": 3 }
    """
    user = request.user
    action_name = request.data.get('action')
    source_type = request.data.get('source_type') or 'regular'
    comment = (request.data.get('comment') or '').strip()

    if not action_name:
        return error_response('action is required')
    if action_name not in ('approve', 'reject', 'block', 'comment', 'create_task'):
        return error_response('Invalid action')
    if source_type not in ('regular', 'paypal'):
        return error_response('source_type must be regular or paypal')
    if action_name not in UNIVERSAL_PERMISSIONS[user.role]:
        return _denied(f'Role {user.role} cannot {action_name} withdrawals')

    if source_type == 'paypal':
        withdrawal = get_object_or_404(PayPalWithdrawal.objects.select_related('user'), pk=withdrawal_id)
    else:
        withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)

    task = None
    if action_name == 'create_task':
        title = (request.data.get('title') or '').strip()
        if not title:
            return error_response('title is required')
        priority = request.data.get('priority') or Task.PRIORITY_MEDIUM
        if priority not in dict(Task.PRIORITY_CHOICES):
            return error_response('Invalid priority', details=f'Choose one of: {", ".join(dict(Task.PRIORITY_CHOICES))}')
        assignee = None
        if request.data.get('assignee_id'):
            assignee = User.objects.filter(
                pk=request.data['assignee_id'], status=UserStatus.ACTIVE
            ).first()
            if assignee is None:
                return error_response('Invalid assignee')
        description = request.data.get('description') or f'Task for withdrawal #{withdrawal.pk}'
        task = create_task(
            user,
            title,
            assignee=assignee,
            description=(
                f'{description}\n\n'
                f'withdrawal_id: {withdrawal.pk}\n'
                f'source_type: {source_type}\n'
                f'created_from: withdrawal_action'
            ),
            priority=priority,
            task_status=Task.STATUS_TODO if assignee else Task.STATUS_BACKLOG,
            tags=['withdrawal', source_type, 'urgent'],
        )
        notify_task_assigned(task, sender=user)
    else:
        handler = _paypal_action if source_type == 'paypal' else _regular_action
        with transaction.atomic():
            error = handler(request, withdrawal, action_name, comment)
        if error:
            return error

    log_action(
        request, f'withdrawal_{action_name}', f'{source_type}_withdrawal', withdrawal.pk,
        change_description=comment or action_name,
        new_values={'status': withdrawal.status, 'task_id': task.pk if task else None},
    )

    return Response({
        'success': True,
        'message': f'Task "{task.title}" created' if task else f'Action "{action_name}" completed',
        'action': action_name,
        'withdrawal': {'id': withdrawal.pk, 'status': withdrawal.status, 'source_type': source_type},
        'task_id': task.pk if task else None,
        'performed_by': {'id': user.pk, 'name': user.display_name, 'role': user.role},
    })
