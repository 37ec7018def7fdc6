"""
Casino API Views
Casinos, tester tests ("test works") and the manager review of test withdrawals.
"""
import logging

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.action_history.models import ActionHistory
from core.action_history.serializers import ActionHistorySerializer
from core.action_history.services import log_action
from core.job_roles.core_config import Roles, UserStatus
from core.job_roles.decorators import require_roles, require_method_roles
from core.user_accounts.models import CustomUser
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from Finance.cash_management.models import Card
from Finance.currency.services import guess_casino_currency
from .models import Casino, CasinoTest, TestWithdrawal, CardCasinoAssignment, JuniorCasinoAssignment
from .serializers import (
    CasinoSerializer,
    CasinoWriteSerializer,
    CasinoTestSerializer,
    CasinoTestUpdateSerializer,
    TestWorkCreateSerializer,
    TestWithdrawalCreateSerializer,
    TestWithdrawalSerializer,
    JuniorCasinoAssignmentSerializer,
)

logger = logging.getLogger(__name__)

CASINO_EDIT_ROLES = [Roles.TESTER, Roles.MANAGER, Roles.ADMIN]


# ============================================================================
# Casinos
# ============================================================================

@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': None,
    'POST': CASINO_EDIT_ROLES,
})
@auto_paginate
def casinos_handler(request):
    """
    GET /casino/casinos/
    - Query: status

    POST /casino/casinos/
    - Request body: { "name", "url", "promo", "company", "currency", ... }
    """
    if request.method == 'GET':
        queryset = Casino.objects.all()
        casino_status = request.query_params.get('status')
        if casino_status:
            queryset = queryset.filter(status=casino_status)
        return Response(CasinoSerializer(queryset, many=True).data)

    if not request.data.get('name') or not request.data.get('url'):
        return error_response('name and url are required')

    serializer = CasinoWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    casino = serializer.save(
        currency=data.get('currency') or guess_casino_currency(data['name']),
        status=Casino.STATUS_NEW,
        created_by=request.user,
        updated_by=request.user,
    )
    log_action(
        request, 'casino_created', 'casino', casino.pk, casino.name,
        change_description=f'Casino "{casino.name}" created',
        new_values=CasinoSerializer(casino).data,
    )
    return Response(
        {'success': True, 'casino': CasinoSerializer(casino).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_method_roles({
    'GET': None,
    'PATCH': CASINO_EDIT_ROLES,
    'DELETE': [Roles.ADMIN],
})
def casino_detail(request, casino_id):
    """
    GET/PATCH/DELETE /casino/casinos/{id}/
    """
    casino = get_object_or_404(Casino, pk=casino_id)

    if request.method == 'GET':
        return Response({'success': True, 'casino': CasinoSerializer(casino).data})

    if request.method == 'PATCH':
        old_values = CasinoSerializer(casino).data
        serializer = CasinoWriteSerializer(casino, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        casino = serializer.save(updated_by=request.user)
        log_action(
            request, 'casino_updated', 'casino', casino.pk, casino.name,
            change_description=f'Casino "{casino.name}" updated',
            old_values=old_values,
            new_values=CasinoSerializer(casino).data,
        )
        return Response({'success': True, 'casino': CasinoSerializer(casino).data})

    name = casino.name
    casino.delete()
    log_action(request, 'casino_deleted', 'casino', casino_id, name, change_description=f'Casino "{name}" deleted')
    return Response({'success': True, 'message': f'Casino "{name}" deleted'})


@api_view(['POST'])
@require_roles(Roles.MANAGER, Roles.TEAMLEAD, Roles.ADMIN)
def casino_assign_junior(request, casino_id):
    """
    POST /casino/casinos/{id}/assign-junior/
    - Request body: { "junior_id": 7, "notes": "..." }
    """
    casino = get_object_or_404(Casino, pk=casino_id)
    junior_id = request.data.get('junior_id')
    if not junior_id:
        return error_response('junior_id is required')

    junior = get_object_or_404(CustomUser, pk=junior_id)
    if junior.role != Roles.JUNIOR or junior.status != UserStatus.ACTIVE:
        return error_response('Casinos can only be assigned to active juniors')
    if request.user.role == Roles.TEAMLEAD and junior.team_lead_id != request.user.pk:
        return error_response('Access denied', details='Junior is not in your team', status_code=status.HTTP_403_FORBIDDEN)

    if JuniorCasinoAssignment.objects.filter(
        junior=junior, casino=casino, status=JuniorCasinoAssignment.STATUS_ACTIVE
    ).exists():
        return error_response('Junior is already assigned to this casino', status_code=status.HTTP_409_CONFLICT)

    assignment = JuniorCasinoAssignment.objects.create(
        junior=junior,
        casino=casino,
        assigned_by=request.user,
        notes=request.data.get('notes') or '',
    )
    log_action(
        request, 'junior_assigned_to_casino', 'casino', casino.pk, casino.name,
        change_description=f'{junior.display_name} assigned to {casino.name}',
        new_values={'junior_id': junior.pk, 'assignment_id': assignment.pk},
    )
    return Response(
        {'success': True, 'assignment': JuniorCasinoAssignmentSerializer(assignment).data},
        status=status.HTTP_201_CREATED
    )


# ============================================================================
# Casino tests
# ============================================================================

def _tests_queryset():
    return CasinoTest.objects.select_related(
        'casino', 'tester', 'card__bank_account__bank'
    ).prefetch_related('withdrawals__checked_by')


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': None,
    'POST': [Roles.TESTER],
})
def casino_tests_handler(request):
    """
    GET /casino/casino-tests/
    - Testers see their own tests; manager/admin may filter tester_id
    - Query: casino_id, tester_id

    POST /casino/casino-tests/
    - Request body: { "casino_id": 1, "card_id": 2, "test_type": "full" }
    """
    if request.method == 'GET':
        queryset = _tests_queryset()
        if request.user.role == Roles.TESTER:
            queryset = queryset.filter(tester=request.user)
        elif request.user.role in (Roles.MANAGER, Roles.ADMIN) and request.query_params.get('tester_id'):
            queryset = queryset.filter(tester_id=request.query_params['tester_id'])
        if request.query_params.get('casino_id'):
            queryset = queryset.filter(casino_id=request.query_params['casino_id'])
        return Response({'success': True, 'tests': CasinoTestSerializer(queryset, many=True).data})

    casino_id = request.data.get('casino_id')
    if not casino_id:
        return error_response('casino_id is required')
    casino = get_object_or_404(Casino, pk=casino_id)
    if casino.has_active_test():
        return error_response('Casino already has an active test')

    card = None
    if request.data.get('card_id'):
        card = get_object_or_404(Card, pk=request.data['card_id'])
        if card.status != Card.STATUS_ACTIVE:
            return error_response(f'Card is {card.status}')

    with transaction.atomic():
        test = CasinoTest.objects.create(
            casino=casino,
            tester=request.user,
            card=card,
            test_type=request.data.get('test_type') or 'full',
            status=CasinoTest.STATUS_PENDING,
        )
        casino.status = Casino.STATUS_TESTING
        casino.save(update_fields=['status', 'updated_at'])

    log_action(
        request, 'casino_test_created', 'casino_test', test.pk, casino.name,
        change_description=f'Test of "{casino.name}" started',
    )
    return Response(
        {'success': True, 'test': CasinoTestSerializer(test).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_method_roles({
    'GET': None,
    'PATCH': [Roles.TESTER],
    'DELETE': [Roles.ADMIN],
})
def casino_test_detail(request, test_id):
    """
    GET/PATCH/DELETE /casino/casino-tests/{id}/

    PATCH is limited to the tester who owns the test. Completing the test
    moves the casino to the test result.
    """
    if request.method == 'PATCH':
        test = get_object_or_404(_tests_queryset(), pk=test_id, tester=request.user)
    else:
        test = get_object_or_404(_tests_queryset(), pk=test_id)

    if request.method == 'GET':
        if request.user.role == Roles.TESTER and test.tester_id != request.user.pk:
            return error_response('Access denied', details='Not your test', status_code=status.HTTP_403_FORBIDDEN)
        return Response({'success': True, 'test': CasinoTestSerializer(test).data})

    if request.method == 'DELETE':
        casino_name = test.casino.name
        test.delete()
        log_action(request, 'casino_test_deleted', 'casino_test', test_id, casino_name)
        return Response({'success': True, 'message': 'Test deleted'})

    serializer = CasinoTestUpdateSerializer(test, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        test = serializer.save()
        if serializer.validated_data.get('status') == CasinoTest.STATUS_COMPLETED:
            test.complete(test.test_result)

    log_action(
        request, 'casino_test_updated', 'casino_test', test.pk, test.casino.name,
        change_description=f'Test updated: status {test.status}',
        new_values=dict(request.data),
    )
    test.refresh_from_db()
    return Response({'success': True, 'test': CasinoTestSerializer(test).data})


# ============================================================================
# Test works (tester plays the casino with a card)
# ============================================================================

@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': None,
    'POST': [Roles.TESTER],
})
def test_works_handler(request):
    """
    GET /casino/test-works/
    - Testers see their own works

    POST /casino/test-works/
    - Request body: { "casino_id", "card_id", "login", "password", "deposit_amount" }
    """
    if request.method == 'GET':
        queryset = _tests_queryset().exclude(card__isnull=True)
        if request.user.role == Roles.TESTER:
            queryset = queryset.filter(tester=request.user)
        return Response({'success': True, 'works': CasinoTestSerializer(queryset, many=True).data})

    serializer = TestWorkCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('casino_id, card_id, login, password and deposit_amount are required',
                              details=serializer.errors)

    data = serializer.validated_data
    casino = get_object_or_404(Casino, pk=data['casino_id'])
    card = get_object_or_404(Card, pk=data['card_id'])

    if card.status != Card.STATUS_ACTIVE:
        return error_response(f'Card is {card.status}')
    if not card.casino_assignments.filter(
        casino=casino, status=CardCasinoAssignment.STATUS_ACTIVE
    ).exists():
        return error_response('Card is not assigned to this casino')

    with transaction.atomic():
        test = CasinoTest.objects.create(
            casino=casino,
            tester=request.user,
            card=card,
            test_type='full',
            status=CasinoTest.STATUS_IN_PROGRESS,
            login=data['login'],
            password=data['password'],
            deposit_amount=data['deposit_amount'],
            started_at=timezone.now(),
        )
        casino.status = Casino.STATUS_TESTING
        casino.save(update_fields=['status', 'updated_at'])

    log_action(
        request, 'test_work_created', 'casino_test', test.pk, casino.name,
        change_description=f'Test work on "{casino.name}" with card {card.card_number_mask}',
        new_values={'deposit_amount': data['deposit_amount'], 'card_id': card.pk},
    )
    return Response(
        {'success': True, 'work': CasinoTestSerializer(test).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@require_roles(Roles.TESTER)
def test_work_withdrawal_create(request):
    """
    POST /casino/test-works/withdrawal/
    - Request body: { "work_id": 1, "withdrawal_amount": 150.00, "notes": "..." }
    """
    serializer = TestWithdrawalCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    test = get_object_or_404(CasinoTest, pk=data['work_id'], tester=request.user)

    withdrawal = TestWithdrawal.objects.create(
        test=test,
        withdrawal_amount=data['withdrawal_amount'],
        notes=data['notes'],
    )
    log_action(
        request, 'test_withdrawal_created', 'test_withdrawal', withdrawal.pk, test.casino.name,
        new_values={'withdrawal_amount': withdrawal.withdrawal_amount},
    )
    return Response(
        {'success': True, 'withdrawal': TestWithdrawalSerializer(withdrawal).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['PATCH'])
@require_roles(Roles.TESTER)
def test_work_withdrawal_update(request, test_id):
    """
    PATCH /casino/test-works/{id}/withdrawal/
    - Request body: { "withdrawal_status": "waiting", "notes": "..." }
    """
    test = get_object_or_404(CasinoTest, pk=test_id, tester=request.user)
    new_status = request.data.get('withdrawal_status')
    if new_status not in TestWithdrawal.TESTER_STATUSES:
        return error_response(f'withdrawal_status must be one of: {", ".join(TestWithdrawal.TESTER_STATUSES)}')

    withdrawal = test.latest_withdrawal()
    if withdrawal is None:
        return error_response('This test has no withdrawal')

    old_status = withdrawal.withdrawal_status
    withdrawal.withdrawal_status = new_status
    if 'notes' in request.data:
        withdrawal.notes = request.data.get('notes') or ''
    withdrawal.save()

    log_action(
        request, 'test_withdrawal_updated', 'test_withdrawal', withdrawal.pk, test.casino.name,
        old_values={'withdrawal_status': old_status},
        new_values={'withdrawal_status': new_status},
    )
    return Response({'success': True, 'withdrawal': TestWithdrawalSerializer(withdrawal).data})


# ============================================================================
# Manager review of test withdrawals
# ============================================================================

@api_view(['GET', 'PATCH'])
@require_method_roles({
    'GET': [Roles.MANAGER, Roles.ADMIN, Roles.CFO, Roles.HR],
    'PATCH': [Roles.MANAGER],
})
def manager_test_withdrawal(request, withdrawal_id):
    """
    GET /casino/manager/test-withdrawals/{id}/
    - Withdrawal, its test, action history and the tester's statistics

    PATCH /casino/manager/test-withdrawals/{id}/
    - Request body: { "action": "approve" | "reject", "comment": "..." }
    """
    withdrawal = get_object_or_404(
        TestWithdrawal.objects.select_related('test__casino', 'test__tester', 'checked_by'),
        pk=withdrawal_id
    )
    test = withdrawal.test

    if request.method == 'GET':
        history = ActionHistory.objects.filter(
            entity_type='test_withdrawal', entity_id=str(withdrawal.pk)
        ).select_related('performed_by')
        tester_tests = CasinoTest.objects.filter(tester=test.tester)
        tester_stats = tester_tests.aggregate(
            total_tests=Count('id'),
            completed_tests=Count('id', filter=Q(status=CasinoTest.STATUS_COMPLETED)),
            approved_tests=Count('id', filter=Q(test_result=CasinoTest.RESULT_APPROVED)),
        )
        tester_stats['total_withdrawn'] = TestWithdrawal.objects.filter(
            test__tester=test.tester,
            withdrawal_status__in=[TestWithdrawal.STATUS_APPROVED, TestWithdrawal.STATUS_RECEIVED],
        ).aggregate(total=Sum('withdrawal_amount'))['total'] or 0

        return Response({
            'success': True,
            'withdrawal': TestWithdrawalSerializer(withdrawal).data,
            'test': CasinoTestSerializer(test).data,
            'history': ActionHistorySerializer(history, many=True).data,
            'tester_stats': tester_stats,
        })

    decision = request.data.get('action')
    comment = request.data.get('comment') or ''
    if decision not in ('approve', 'reject'):
        return error_response('Invalid action')
    if not withdrawal.is_pending:
        return error_response(
            'Withdrawal already processed',
            current_status=withdrawal.withdrawal_status,
        )

    old_status = withdrawal.withdrawal_status
    with transaction.atomic():
        withdrawal.withdrawal_status = (
            TestWithdrawal.STATUS_APPROVED if decision == 'approve' else TestWithdrawal.STATUS_REJECTED
        )
        withdrawal.manager_comment = comment
        withdrawal.checked_by = request.user
        withdrawal.checked_at = timezone.now()
        withdrawal.save()
        if decision == 'approve':
            test.complete(CasinoTest.RESULT_APPROVED)

    log_action(
        request, f'test_withdrawal_{withdrawal.withdrawal_status}', 'test_withdrawal',
        withdrawal.pk, test.casino.name,
        change_description=comment or f'Test withdrawal {withdrawal.withdrawal_status}',
        old_values={'withdrawal_status': old_status},
        new_values={'withdrawal_status': withdrawal.withdrawal_status},
    )
    logger.info("Test withdrawal %s %s by %s", withdrawal.pk, withdrawal.withdrawal_status, request.user.email)
    return Response({'success': True, 'withdrawal': TestWithdrawalSerializer(withdrawal).data})
