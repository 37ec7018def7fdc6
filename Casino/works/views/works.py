"""
Junior works: deposits at approved casinos with an issued card.
"""
import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from Casino.casinos.models import Casino
from core.action_history.services import log_action
from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_method_roles
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from Finance.cash_management.models import Card
from ..models import Work, WorkStatusHistory, WorkWithdrawal
from ..serializers import WorkSerializer, WorkCreateSerializer, WorkUpdateSerializer, WorkStatusHistorySerializer
from ..services import change_work_status, can_view_junior

logger = logging.getLogger(__name__)

WORK_READ_ROLES = [Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN]


def _works_queryset():
    return Work.objects.select_related(
        'junior', 'casino', 'card__bank_account__bank'
    ).prefetch_related('withdrawals')


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': WORK_READ_ROLES,
    'POST': [Roles.JUNIOR],
})
@auto_paginate
def works_handler(request):
    """
    GET /casino/works/
    - Juniors see their own works; team leads their juniors' works
    - Query: junior_id, status

    POST /casino/works/
    - Request body: { "casino_id", "card_id", "deposit_amount",
                      "casino_login", "casino_password", "notes" }
    """
    user = request.user

    if request.method == 'GET':
        queryset = _works_queryset()
        if user.role == Roles.JUNIOR:
            queryset = queryset.filter(junior=user)
        else:
            if user.role == Roles.TEAMLEAD:
                queryset = queryset.filter(junior__team_lead=user)
            if request.query_params.get('junior_id'):
                queryset = queryset.filter(junior_id=request.query_params['junior_id'])
        if request.query_params.get('status'):
            queryset = queryset.filter(status=request.query_params['status'])
        return Response(WorkSerializer(queryset, many=True).data)

    serializer = WorkCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    casino = get_object_or_404(Casino, pk=data['casino_id'])
    card = get_object_or_404(Card.objects.select_related('bank_account'), pk=data['card_id'])

    if casino.status != Casino.STATUS_APPROVED:
        return error_response(f'Casino is {casino.status}; works are only allowed on approved casinos')
    if card.assigned_to_id != user.pk:
        return error_response('Card is not assigned to you', status_code=status.HTTP_403_FORBIDDEN)
    if card.status != Card.STATUS_ACTIVE:
        return error_response(f'Card is {card.status}')
    if not card.bank_account.cards_available:
        return error_response('Account balance is too low for new works')

    with transaction.atomic():
        work = Work.objects.create(
            junior=user,
            casino=casino,
            card=card,
            deposit_amount=data['deposit_amount'],
            casino_login=data['casino_login'],
            casino_password=data['casino_password'],
            notes=data['notes'],
        )
        WorkStatusHistory.objects.create(
            work=work, old_status=None, new_status=Work.STATUS_ACTIVE, changed_by=user, notes='Work created'
        )
    log_action(
        request, 'work_created', 'work', work.pk, casino.name,
        change_description=f'Deposit {work.deposit_amount} at {casino.name} with {card.card_number_mask}',
        new_values={'deposit_amount': work.deposit_amount, 'card_id': card.pk, 'casino_id': casino.pk},
    )
    return Response(
        {'success': True, 'work': WorkSerializer(work).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_method_roles({
    'GET': WORK_READ_ROLES,
    'PATCH': [Roles.JUNIOR, Roles.MANAGER, Roles.ADMIN],
    'DELETE': [Roles.JUNIOR],
})
def work_detail(request, work_id):
    """
    GET /casino/works/{id}/
    PATCH /casino/works/{id}/
    - Request body: { "status": "completed", "notes": "..." }
    DELETE /casino/works/{id}/
    - Owner only; refused when a withdrawal is received or waiting
    """
    work = get_object_or_404(_works_queryset(), pk=work_id)
    user = request.user

    if user.role == Roles.JUNIOR and work.junior_id != user.pk:
        return error_response('Access denied', details='Not your work', status_code=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        if not can_view_junior(user, work.junior):
            return error_response('Access denied', status_code=status.HTTP_403_FORBIDDEN)
        return Response({
            'success': True,
            'work': WorkSerializer(work).data,
            'status_history': WorkStatusHistorySerializer(work.status_history.all(), many=True).data,
        })

    if request.method == 'DELETE':
        if work.withdrawals.filter(
            status__in=[WorkWithdrawal.STATUS_RECEIVED, WorkWithdrawal.STATUS_WAITING]
        ).exists():
            return error_response('Work has received or waiting withdrawals and cannot be deleted')
        with transaction.atomic():
            work.withdrawals.all().delete()
            work.delete()
        log_action(request, 'work_deleted', 'work', work_id, work.casino.name)
        return Response({'success': True, 'message': 'Work deleted'})

    serializer = WorkUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    new_status = data.get('status')
    if new_status and new_status != work.status:
        if work.status == Work.STATUS_COMPLETED:
            return error_response('Completed works cannot change status')
        if new_status == Work.STATUS_COMPLETED and not work.withdrawals.filter(
            status=WorkWithdrawal.STATUS_RECEIVED
        ).exists():
            return error_response('A work needs at least one received withdrawal to be completed')

    old_status = work.status
    with transaction.atomic():
        for field in ('notes', 'casino_login', 'casino_password'):
            if field in data:
                setattr(work, field, data[field])
        work.save()
        if new_status:
            change_work_status(work, new_status, user, notes=data.get('notes', ''))

    log_action(
        request, 'work_updated', 'work', work.pk, work.casino.name,
        old_values={'status': old_status},
        new_values={'status': work.status},
    )
    return Response({'success': True, 'work': WorkSerializer(work).data})
