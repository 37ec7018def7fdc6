"""
Work withdrawals: juniors request them, managers check them, HR and the CFO
annotate them.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.action_history.services import log_action
from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_roles
from core.notifications.services import notify_withdrawal_pending, notify_withdrawal_decision
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from ..models import Work, WorkWithdrawal
from ..serializers import (
    WithdrawalCreateSerializer,
    WithdrawalUpdateSerializer,
    WorkWithdrawalSerializer,
    WithdrawalStatusHistorySerializer,
)
from ..services import change_withdrawal_status, manager_check, pending_withdrawal_exists

logger = logging.getLogger(__name__)

# check action -> resulting status
CHECK_ACTIONS = {
    'received': WorkWithdrawal.STATUS_RECEIVED,
    'problem': WorkWithdrawal.STATUS_PROBLEM,
    'block': WorkWithdrawal.STATUS_BLOCKED,
}


def withdrawals_queryset():
    return WorkWithdrawal.objects.select_related(
        'work__junior', 'work__casino', 'work__card__bank_account__bank'
    )


@api_view(['POST'])
@require_roles(Roles.JUNIOR)
def work_withdrawal_create(request):
    """
    POST /casino/work-withdrawals/
    - Request body: { "work_id": 1, "withdrawal_amount": 250.00, "comment": "..." }
    """
    serializer = WithdrawalCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    work = get_object_or_404(Work.objects.select_related('casino'), pk=data['work_id'], junior=request.user)
    if work.status != Work.STATUS_ACTIVE:
        return error_response(f'Work is {work.status}')
    if pending_withdrawal_exists(work):
        return error_response('This work already has a pending withdrawal')

    withdrawal = WorkWithdrawal.objects.create(
        work=work,
        withdrawal_amount=data['withdrawal_amount'],
        comment=data['comment'],
    )
    withdrawal.status_history.create(
        old_status=None,
        new_status=WorkWithdrawal.STATUS_NEW,
        changed_by=request.user,
        comment='Withdrawal requested',
    )
    notify_withdrawal_pending(withdrawal, request.user, withdrawal.withdrawal_amount, work.casino.name)
    log_action(
        request, 'withdrawal_created', 'work_withdrawal', withdrawal.pk, work.casino.name,
        new_values={'withdrawal_amount': withdrawal.withdrawal_amount, 'work_id': work.pk},
    )
    return Response(
        {'success': True, 'withdrawal': WorkWithdrawalSerializer(withdrawal).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['PATCH', 'DELETE'])
@require_roles(Roles.JUNIOR)
def work_withdrawal_detail(request, withdrawal_id):
    """
    PATCH /casino/work-withdrawals/{id}/
    - Request body: { "withdrawal_amount": 250.00, "comment": "..." }

    DELETE /casino/work-withdrawals/{id}/

    Juniors only, on their own withdrawals while they are still ``new``.
    """
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    if withdrawal.work.junior_id != request.user.pk:
        return error_response(
            'Access denied',
            details='You can only change your own withdrawals',
            status_code=status.HTTP_403_FORBIDDEN
        )
    if withdrawal.status != WorkWithdrawal.STATUS_NEW:
        return error_response(
            'Only new withdrawals can be changed',
            details=f'Withdrawal status: {withdrawal.status}'
        )

    casino_name = withdrawal.work.casino.name
    if request.method == 'DELETE':
        log_action(
            request, 'withdrawal_deleted', 'work_withdrawal', withdrawal.pk, casino_name,
            old_values={'withdrawal_amount': withdrawal.withdrawal_amount, 'work_id': withdrawal.work_id},
        )
        withdrawal.delete()
        return Response({'success': True, 'message': 'Withdrawal deleted'})

    serializer = WithdrawalUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_values = {'withdrawal_amount': withdrawal.withdrawal_amount, 'comment': withdrawal.comment}
    for field, value in serializer.validated_data.items():
        setattr(withdrawal, field, value)
    withdrawal.save()
    log_action(
        request, 'withdrawal_updated', 'work_withdrawal', withdrawal.pk, casino_name,
        old_values=old_values,
        new_values={'withdrawal_amount': withdrawal.withdrawal_amount, 'comment': withdrawal.comment},
    )
    return Response({'success': True, 'withdrawal': WorkWithdrawalSerializer(withdrawal).data})


@api_view(['GET'])
@require_roles(Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN)
@auto_paginate
def withdrawals_list(request):
    """
    GET /casino/withdrawals/
    - Junior: own; team lead: own juniors; manager: pending by default;
      HR, CFO, admin: all
    - Query: status, junior_id
    """
    user = request.user
    queryset = withdrawals_queryset()
    status_filter = request.query_params.get('status')

    if user.role == Roles.JUNIOR:
        queryset = queryset.filter(work__junior=user)
    elif user.role == Roles.TEAMLEAD:
        queryset = queryset.filter(work__junior__team_lead=user)
    elif user.role == Roles.MANAGER and not status_filter:
        queryset = queryset.filter(status__in=WorkWithdrawal.PENDING_STATUSES)

    if status_filter:
        queryset = queryset.filter(status=status_filter)
    if user.role != Roles.JUNIOR and request.query_params.get('junior_id'):
        queryset = queryset.filter(work__junior_id=request.query_params['junior_id'])

    return Response(WorkWithdrawalSerializer(queryset, many=True).data)


@api_view(['GET'])
@require_roles(Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN)
def withdrawal_detail(request, withdrawal_id):
    """GET /casino/withdrawals/{id}/ - withdrawal with its status history"""
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    junior = withdrawal.work.junior
    user = request.user
    if (user.role == Roles.JUNIOR and junior.pk != user.pk) or (
        user.role == Roles.TEAMLEAD and junior.team_lead_id != user.pk
    ):
        return error_response('Access denied', status_code=status.HTTP_403_FORBIDDEN)

    return Response({
        'success': True,
        'withdrawal': WorkWithdrawalSerializer(withdrawal).data,
        'history': WithdrawalStatusHistorySerializer(
            withdrawal.status_history.select_related('changed_by'), many=True
        ).data,
    })


@api_view(['POST'])
@require_roles(Roles.MANAGER, Roles.ADMIN)
def withdrawal_check(request, withdrawal_id):
    """
    POST /casino/withdrawals/{id}/check/
    - Request body: { "action": "received" | "problem" | "block", "comment": "..." }
    """
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    check = request.data.get('action')
    comment = (request.data.get('comment') or '').strip()

    if check not in CHECK_ACTIONS:
        return error_response('action must be received, problem or block')
    if not withdrawal.is_pending:
        return error_response(f'Withdrawal is already {withdrawal.status}')

    old_status = withdrawal.status
    new_status = CHECK_ACTIONS[check]
    manager_check(withdrawal, new_status, request.user, comment)

    junior = withdrawal.work.junior
    notify_withdrawal_decision(withdrawal, junior, new_status, sender=request.user, comment=comment)
    log_action(
        request, f'withdrawal_{new_status}', 'work_withdrawal', withdrawal.pk, junior.display_name,
        change_description=comment or f'Withdrawal marked {new_status}',
        old_values={'status': old_status},
        new_values={'status': new_status},
    )
    return Response({'success': True, 'withdrawal': WorkWithdrawalSerializer(withdrawal).data})


@api_view(['PATCH'])
@require_roles(Roles.HR, Roles.ADMIN)
def withdrawal_hr_comment(request, withdrawal_id):
    """
    PATCH /casino/withdrawals/{id}/hr-comment/
    - Request body: { "hr_comment": "..." | null }
    """
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    hr_comment = request.data.get('hr_comment')
    if hr_comment is not None and not isinstance(hr_comment, str):
        return error_response('hr_comment must be a string or null')

    old_comment = withdrawal.hr_comment
    withdrawal.hr_comment = (hr_comment.strip() or None) if hr_comment is not None else None
    withdrawal.checked_by_hr = request.user
    withdrawal.save(update_fields=['hr_comment', 'checked_by_hr', 'updated_at'])

    log_action(
        request, 'withdrawal_hr_comment', 'work_withdrawal', withdrawal.pk,
        withdrawal.work.junior.display_name,
        old_values={'hr_comment': old_comment},
        new_values={'hr_comment': withdrawal.hr_comment},
    )
    return Response({'success': True, 'withdrawal': WorkWithdrawalSerializer(withdrawal).data})


@api_view(['POST'])
@require_roles(Roles.CFO)
def withdrawal_cfo_comment(request, withdrawal_id):
    """
    POST /casino/withdrawals/{id}/cfo-comment/
    - Request body: { "comment": "...", "action": "block" (optional) }
    """
    withdrawal = get_object_or_404(withdrawals_queryset(), pk=withdrawal_id)
    comment = (request.data.get('comment') or '').strip()
    if not comment:
        return error_response('comment is required')

    old_status = withdrawal.status
    if request.data.get('action') == 'block':
        change_withdrawal_status(
            withdrawal, WorkWithdrawal.STATUS_BLOCKED, request.user, comment,
            cfo_comment=comment, checked_by_cfo=request.user,
        )
    else:
        withdrawal.cfo_comment = comment
        withdrawal.checked_by_cfo = request.user
        withdrawal.save(update_fields=['cfo_comment', 'checked_by_cfo', 'updated_at'])

    log_action(
        request, 'withdrawal_cfo_comment', 'work_withdrawal', withdrawal.pk,
        withdrawal.work.junior.display_name,
        change_description=comment,
        old_values={'status': old_status},
        new_values={'status': withdrawal.status, 'cfo_comment': comment},
    )
    return Response({'success': True, 'withdrawal': WorkWithdrawalSerializer(withdrawal).data})
