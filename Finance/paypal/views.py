"""
PayPal accounts, works, withdrawals and account operations.
"""
import logging

from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from Casino.casinos.models import Casino, JuniorCasinoAssignment
from core.action_history.services import log_action
from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_roles, require_method_roles
from core.notifications.services import notify_withdrawal_pending
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from .models import PayPalAccount, PayPalWork, PayPalWithdrawal, PayPalOperation
from .serializers import (
    PayPalAccountSerializer,
    PayPalWorkSerializer,
    PayPalWorkCreateSerializer,
    PayPalWithdrawalSerializer,
    PayPalWithdrawalCreateSerializer,
    PayPalOperationSerializer,
    PayPalOperationCreateSerializer,
    PayPalOperationUpdateSerializer,
)

logger = logging.getLogger(__name__)

ACCOUNT_REQUIRED_FIELDS = ['name', 'email', 'password', 'phone_number', 'authenticator_url']
OPERATION_VIEW_ROLES = [Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.CFO, Roles.HR, Roles.TESTER, Roles.ADMIN]
OPERATION_REVIEW_ROLES = (Roles.MANAGER, Roles.TEAMLEAD, Roles.HR, Roles.CFO, Roles.ADMIN)


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': [Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.CFO, Roles.HR, Roles.TESTER, Roles.ADMIN],
    'POST': [Roles.JUNIOR],
})
@auto_paginate
def paypal_accounts_handler(request):
    """
    GET /finance/paypal/accounts/
    - Junior: own accounts; team lead: own juniors' and own accounts

    POST /finance/paypal/accounts/
    - Request body: { "name", "email", "password", "phone_number",
                      "authenticator_url", "date_created", "balance", "info" }
    """
    user = request.user

    if request.method == 'GET':
        queryset = PayPalAccount.objects.select_related('user')
        if user.role == Roles.JUNIOR:
            queryset = queryset.filter(user=user)
        elif user.role == Roles.TEAMLEAD:
            queryset = queryset.filter(Q(user__team_lead=user) | Q(user=user))
        if request.query_params.get('status'):
            queryset = queryset.filter(status=request.query_params['status'])
        return Response(PayPalAccountSerializer(queryset, many=True).data)

    missing = [field for field in ACCOUNT_REQUIRED_FIELDS if not request.data.get(field)]
    if missing:
        return error_response('Missing required fields', details=', '.join(missing))

    serializer = PayPalAccountSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    account = serializer.save(user=user, currency='GBP', status=PayPalAccount.STATUS_ACTIVE)

    log_action(
        request, 'paypal_account_created', 'paypal_account', account.pk, account.email,
        new_values={'name': account.name, 'email': account.email},
    )
    return Response(
        {'success': True, 'account': PayPalAccountSerializer(account).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['PUT', 'PATCH', 'DELETE'])
@require_roles(Roles.JUNIOR)
def paypal_account_detail(request, account_id):
    """
    PUT /finance/paypal/accounts/{id}/ - full update, same required fields as create
    PATCH /finance/paypal/accounts/{id}/ - partial update
    DELETE /finance/paypal/accounts/{id}/ - blocks the account, works keep their history
    """
    account = get_object_or_404(PayPalAccount, pk=account_id)
    if account.user_id != request.user.pk:
        return error_response(
            'Access denied', details='Not your account', status_code=status.HTTP_403_FORBIDDEN
        )

    if request.method == 'DELETE':
        account.status = PayPalAccount.STATUS_BLOCKED
        account.save(update_fields=['status', 'updated_at'])
        log_action(
            request, 'paypal_account_blocked', 'paypal_account', account.pk, account.email,
            new_values={'status': account.status},
        )
        logger.info("PayPal account %s blocked by %s", account.pk, request.user.email)
        return Response({'success': True, 'message': 'PayPal account blocked'})

    if request.method == 'PUT':
        missing = [field for field in ACCOUNT_REQUIRED_FIELDS if not request.data.get(field)]
        if missing:
            return error_response('Missing required fields', details=', '.join(missing))

    old_values = {'email': account.email, 'balance': account.balance}
    serializer = PayPalAccountSerializer(account, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    account = serializer.save()

    log_action(
        request, 'paypal_account_updated', 'paypal_account', account.pk, account.email,
        old_values=old_values,
        new_values={'email': account.email, 'balance': account.balance},
    )
    return Response({'success': True, 'account': PayPalAccountSerializer(account).data})


@api_view(['GET', 'POST'])
@require_roles(Roles.JUNIOR)
@auto_paginate
def paypal_works_handler(request):
    """
    GET /finance/paypal/works/
    - The junior's own PayPal works

    POST /finance/paypal/works/
    - Request body: { "paypal_account_id", "casino_id", "casino_email",
                      "casino_password", "deposit_amount" }
    - Requires an active casino assignment for the junior
    """
    user = request.user

    if request.method == 'GET':
        queryset = PayPalWork.objects.select_related('paypal_account', 'casino').filter(junior=user)
        if request.query_params.get('status'):
            queryset = queryset.filter(status=request.query_params['status'])
        return Response(PayPalWorkSerializer(queryset, many=True).data)

    serializer = PayPalWorkCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    account = get_object_or_404(PayPalAccount, pk=data['paypal_account_id'], user=user)
    if account.status != PayPalAccount.STATUS_ACTIVE:
        return error_response(f'PayPal account is {account.status}')
    casino = get_object_or_404(Casino, pk=data['casino_id'])

    assigned = JuniorCasinoAssignment.objects.filter(
        junior=user, casino=casino, status=JuniorCasinoAssignment.STATUS_ACTIVE
    ).exists()
    if not assigned:
        return error_response(
            'Casino is not assigned to you',
            status_code=status.HTTP_403_FORBIDDEN
        )

    work = PayPalWork.objects.create(
        junior=user,
        paypal_account=account,
        casino=casino,
        casino_email=data['casino_email'],
        casino_password=data['casino_password'],
        deposit_amount=data['deposit_amount'],
    )
    log_action(
        request, 'paypal_work_created', 'paypal_work', work.pk, casino.name,
        new_values={'deposit_amount': work.deposit_amount, 'paypal_account_id': account.pk},
    )
    return Response(
        {'success': True, 'work': PayPalWorkSerializer(work).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': [Roles.CFO, Roles.HR, Roles.ADMIN, Roles.MANAGER, Roles.TESTER],
    'POST': [Roles.JUNIOR],
})
@auto_paginate
def paypal_withdrawals_handler(request):
    """
    GET /finance/paypal/withdrawals/
    - Query: status, user_id

    POST /finance/paypal/withdrawals/
    - Request body: { "work_id": 1, "withdrawal_amount": 120.00, "comment": "..." }
    - Amount may not exceed ten times the work deposit
    """
    user = request.user

    if request.method == 'GET':
        queryset = PayPalWithdrawal.objects.select_related('user', 'paypal_account', 'casino', 'work')
        if request.query_params.get('status'):
            queryset = queryset.filter(status=request.query_params['status'])
        if request.query_params.get('user_id'):
            queryset = queryset.filter(user_id=request.query_params['user_id'])
        return Response(PayPalWithdrawalSerializer(queryset, many=True).data)

    serializer = PayPalWithdrawalCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    work = get_object_or_404(
        PayPalWork.objects.select_related('casino', 'paypal_account'), pk=data['work_id'], junior=user
    )
    if work.status != PayPalWork.STATUS_ACTIVE:
        return error_response(f'Work is {work.status}')

    limit = work.deposit_amount * PayPalWork.MAX_WITHDRAWAL_MULTIPLIER
    if data['withdrawal_amount'] > limit:
        return error_response(
            'Withdrawal amount is too large',
            details=f'Maximum is {limit} ({PayPalWork.MAX_WITHDRAWAL_MULTIPLIER}x the deposit)'
        )

    withdrawal = PayPalWithdrawal.objects.create(
        work=work,
        user=user,
        paypal_account=work.paypal_account,
        casino=work.casino,
        withdrawal_amount=data['withdrawal_amount'],
        comment=data['comment'],
    )
    notify_withdrawal_pending(
        withdrawal, user, withdrawal.withdrawal_amount, work.casino.name, source_type='paypal'
    )
    log_action(
        request, 'paypal_withdrawal_created', 'paypal_withdrawal', withdrawal.pk, work.casino.name,
        new_values={'withdrawal_amount': withdrawal.withdrawal_amount, 'work_id': work.pk},
    )
    return Response(
        {'success': True, 'withdrawal': PayPalWithdrawalSerializer(withdrawal).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@require_roles(Roles.CFO)
def paypal_withdrawal_cfo_comment(request, withdrawal_id):
    """
    POST /finance/paypal/withdrawals/{id}/cfo-comment/
    - Request body: { "comment": "...", "action": "block" (optional) }
    """
    withdrawal = get_object_or_404(
        PayPalWithdrawal.objects.select_related('user', 'work', 'paypal_account', 'casino'), pk=withdrawal_id
    )
    comment = (request.data.get('comment') or '').strip()
    if not comment:
        return error_response('comment is required')

    old_status = withdrawal.status
    withdrawal.cfo_comment = comment
    withdrawal.checked_by_cfo = request.user
    if request.data.get('action') == 'block':
        withdrawal.status = PayPalWithdrawal.STATUS_BLOCKED
        withdrawal.checked_at = timezone.now()
    withdrawal.save()

    log_action(
        request, 'paypal_withdrawal_cfo_comment', 'paypal_withdrawal', withdrawal.pk,
        withdrawal.user.display_name,
        change_description=comment,
        old_values={'status': old_status},
        new_values={'status': withdrawal.status, 'cfo_comment': comment},
    )
    return Response({'success': True, 'withdrawal': PayPalWithdrawalSerializer(withdrawal).data})


def _operations_queryset(user):
    queryset = PayPalOperation.objects.select_related('paypal_account', 'junior')
    if user.role == Roles.JUNIOR:
        return queryset.filter(junior=user)
    if user.role == Roles.TEAMLEAD:
        return queryset.filter(Q(junior__team_lead=user) | Q(junior=user))
    return queryset


def _filter_operations(queryset, params):
    if params.get('paypal_account_id'):
        queryset = queryset.filter(paypal_account_id=params['paypal_account_id'])
    if params.get('operation_type'):
        queryset = queryset.filter(operation_type=params['operation_type'])
    if params.get('status'):
        queryset = queryset.filter(status=params['status'])
    return queryset


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': OPERATION_VIEW_ROLES,
    'POST': [Roles.JUNIOR],
})
@auto_paginate
def paypal_operations_handler(request):
    """
    GET /finance/paypal/operations/
    - Query: paypal_account_id, operation_type, status
    - Junior: own operations; team lead: own juniors' and own

    POST /finance/paypal/operations/
    - Request body: { "paypal_account_id", "operation_type", "amount",
                      "recipient_paypal_email", "recipient_card_number",
                      "casino_name", "description" }
    - Debit operations need the account balance to cover the amount
    """
    user = request.user

    if request.method == 'GET':
        queryset = _filter_operations(_operations_queryset(user), request.query_params)
        return Response(PayPalOperationSerializer(queryset, many=True).data)

    serializer = PayPalOperationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    account = get_object_or_404(PayPalAccount, pk=data.pop('paypal_account_id'))
    if account.user_id != user.pk:
        return error_response(
            'Access denied', details='Not your account', status_code=status.HTTP_403_FORBIDDEN
        )
    if data['operation_type'] in PayPalOperation.DEBIT_TYPES and account.balance < data['amount']:
        return error_response(
            'Insufficient balance',
            details=f'Current balance: {account.balance} {account.currency}'
        )

    operation = PayPalOperation.objects.create(
        paypal_account=account,
        junior=user,
        currency=account.currency,
        **data
    )
    log_action(
        request, 'paypal_operation_created', 'paypal_operation', operation.pk, account.email,
        new_values={'operation_type': operation.operation_type, 'amount': operation.amount},
    )
    return Response(
        {'success': True, 'operation': PayPalOperationSerializer(operation).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET'])
@require_roles(*OPERATION_VIEW_ROLES)
def paypal_operation_stats(request):
    """
    GET /finance/paypal/operations/stats/
    - Same filters and scope as the list; totalAmount sums completed operations
    """
    queryset = _filter_operations(_operations_queryset(request.user), request.query_params)
    by_status = dict(queryset.order_by().values_list('status').annotate(count=Count('id')))
    by_type = dict(queryset.order_by().values_list('operation_type').annotate(count=Count('id')))
    total_amount = queryset.filter(
        status=PayPalOperation.STATUS_COMPLETED
    ).aggregate(total=Sum('amount'))['total'] or 0
    return Response({
        'success': True,
        'stats': {
            'total': sum(by_status.values()),
            'pending': by_status.get(PayPalOperation.STATUS_PENDING, 0),
            'completed': by_status.get(PayPalOperation.STATUS_COMPLETED, 0),
            'failed': by_status.get(PayPalOperation.STATUS_FAILED, 0),
            'totalAmount': total_amount,
            'byType': by_type,
        },
    })


@api_view(['GET', 'PATCH', 'DELETE'])
@require_roles(*OPERATION_VIEW_ROLES)
def paypal_operation_detail(request, operation_id):
    """
    GET /finance/paypal/operations/{id}/

    PATCH /finance/paypal/operations/{id}/
    - Request body: { "status", "transaction_id", "fee_amount", "description" }
    - Owner or reviewer; a junior may only cancel a pending operation

    DELETE /finance/paypal/operations/{id}/
    - HR or admin; completed operations are kept
    """
    user = request.user
    operation = get_object_or_404(_operations_queryset(user), pk=operation_id)

    if request.method == 'GET':
        return Response({'success': True, 'operation': PayPalOperationSerializer(operation).data})

    if request.method == 'DELETE':
        if user.role not in (Roles.HR, Roles.ADMIN):
            return error_response('Access denied', status_code=status.HTTP_403_FORBIDDEN)
        if operation.status == PayPalOperation.STATUS_COMPLETED:
            return error_response('Cannot delete completed operation')
        log_action(
            request, 'paypal_operation_deleted', 'paypal_operation', operation.pk,
            operation.paypal_account.email,
            old_values={'operation_type': operation.operation_type, 'amount': operation.amount},
        )
        operation.delete()
        return Response({'success': True, 'message': 'Operation deleted'})

    if operation.junior_id != user.pk and user.role not in OPERATION_REVIEW_ROLES:
        return error_response('Access denied', status_code=status.HTTP_403_FORBIDDEN)

    serializer = PayPalOperationUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    if user.role == Roles.JUNIOR and (
        set(data) - {'status'}
        or data.get('status') != PayPalOperation.STATUS_CANCELLED
        or operation.status != PayPalOperation.STATUS_PENDING
    ):
        return error_response(
            'Access denied',
            details='Junior can only cancel pending operations',
            status_code=status.HTTP_403_FORBIDDEN
        )

    old_status = operation.status
    for field, value in data.items():
        setattr(operation, field, value)
    if operation.status != old_status:
        operation.completed_at = timezone.now() if operation.status == PayPalOperation.STATUS_COMPLETED else None
    operation.save()

    log_action(
        request, 'paypal_operation_updated', 'paypal_operation', operation.pk,
        operation.paypal_account.email,
        old_values={'status': old_status},
        new_values={'status': operation.status, 'fee_amount': operation.fee_amount},
    )
    logger.info("PayPal operation %s set to %s by %s", operation.pk, operation.status, user.email)
    return Response({'success': True, 'operation': PayPalOperationSerializer(operation).data})
