"""
Cash Management API Views
Provides REST API endpoints for banks, bank accounts (with balance history)
and payment cards.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.action_history.services import log_action
from core.job_roles.core_config import Roles, UserStatus, FINANCE_ROLES, PRIVILEGED_REVEAL_ROLES
from core.job_roles.decorators import check_roles
from core.job_roles.services import get_client_ip
from core.notifications.services import notify_card_assignment, notify_bank_assignment
from core.user_accounts.models import CustomUser
from erp_project.response_formatter import error_response
from Finance.currency.services import get_currency_rates, convert_to_usd
from .models import Bank, BankAccount, BankTeamleadAssignment, Card, CardSecret, CardAccessLog
from .serializers import (
    BankListSerializer,
    BankWriteSerializer,
    BankAccountListSerializer,
    BankAccountCreateSerializer,
    BankAccountUpdateSerializer,
    BankAssignmentSerializer,
    BalanceUpdateSerializer,
    BalanceHistorySerializer,
    CardListSerializer,
    CardDetailSerializer,
    CardCreateSerializer,
    CardUpdateSerializer,
    CardImportSerializer,
)
from .services import CardImporter

logger = logging.getLogger(__name__)

BANK_READ_ROLES = [Roles.MANAGER, Roles.HR, Roles.TESTER, Roles.CFO, Roles.ADMIN]
BALANCE_ROLES = [Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN]
CARD_WRITE_ROLES = [Roles.MANAGER, Roles.CFO, Roles.ADMIN]
CASINO_ASSIGN_ROLES = [Roles.TESTER, Roles.MANAGER, Roles.ADMIN]
JUNIOR_ASSIGN_ROLES = [Roles.MANAGER, Roles.TEAMLEAD, Roles.ADMIN]
BANK_ASSIGNMENT_READ_ROLES = [Roles.MANAGER, Roles.CFO, Roles.TESTER, Roles.HR, Roles.ADMIN]
BANK_ASSIGNMENT_WRITE_ROLES = [Roles.MANAGER, Roles.CFO, Roles.TESTER, Roles.ADMIN]

BALANCE_HISTORY_LIMIT = 50
CENT = Decimal('0.01')


def _is_true(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('true', '1', 'yes')


# ==================== BANK VIEWSET ====================

class BankViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Bank CRUD operations.

    Endpoints:
    - GET /finance/banks/ - Banks with accounts, cards and statistics
    - POST /finance/banks/ - Create bank
    - GET /finance/banks/{id}/ - Bank with accounts
    - PATCH /finance/banks/{id}/ - Update bank (is_active=false cascades)
    - DELETE /finance/banks/{id}/ - Delete an inactive bank
    """
    queryset = Bank.objects.prefetch_related('accounts__cards').all()
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return BankListSerializer
        return BankWriteSerializer

    def list(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_READ_ROLES)
        if denied:
            return denied

        exchange_rates = get_currency_rates()
        rates = exchange_rates['rates']
        banks = list(self.get_queryset())
        data = BankListSerializer(banks, many=True, context={'request': request, 'rates': rates}).data

        accounts = [account for bank in banks for account in bank.accounts.all()]
        active_accounts = [a for a in accounts if a.is_active]
        blocked_accounts = [a for a in accounts if not a.is_active]
        cards = [card for account in accounts for card in account.cards.all()]

        total_balance_usd = sum(
            (convert_to_usd(a.balance, a.currency, rates) for a in active_accounts), Decimal('0')
        )
        blocked_balance_usd = sum(
            (convert_to_usd(a.balance, a.currency, rates) for a in blocked_accounts), Decimal('0')
        )

        return Response({
            'success': True,
            'banks': data,
            'statistics': {
                'total_banks': len(banks),
                'active_banks': sum(1 for bank in banks if bank.is_active),
                'total_accounts': len(accounts),
                'active_accounts': len(active_accounts),
                'blocked_accounts': len(blocked_accounts),
                'total_balance_usd': total_balance_usd.quantize(CENT),
                'blocked_balance_usd': blocked_balance_usd.quantize(CENT),
                'total_cards': len(cards),
                'available_cards': sum(1 for card in cards if card.status == Card.STATUS_ACTIVE),
                'low_balance_accounts': sum(1 for a in active_accounts if not a.cards_available),
            },
            'exchange_rates': exchange_rates,
        })

    def retrieve(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_READ_ROLES)
        if denied:
            return denied
        bank = self.get_object()
        return Response({'success': True, 'bank': BankListSerializer(bank).data})

    def create(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        serializer = BankWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        bank = serializer.save(created_by=request.user, updated_by=request.user)
        log_action(
            request, 'bank_created', 'bank', bank.pk, bank.name,
            change_description=f'Bank "{bank.name}" created',
            new_values=serializer.data,
        )
        logger.info("Bank %s created by %s", bank.name, request.user.email)
        return Response({'success': True, 'bank': BankWriteSerializer(bank).data}, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        bank = self.get_object()
        old_values = BankWriteSerializer(bank).data
        serializer = BankWriteSerializer(bank, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            bank = serializer.save(updated_by=request.user)
            summary = None
            if 'is_active' in request.data:
                if _is_true(request.data['is_active']):
                    if not bank.is_active:
                        bank.activate(request.user)
                elif bank.is_active:
                    summary = bank.deactivate(request.user)

        action_type = 'bank_blocked' if summary else 'bank_updated'
        log_action(
            request, action_type, 'bank', bank.pk, bank.name,
            change_description=f'Bank "{bank.name}" updated',
            old_values=old_values,
            new_values=BankWriteSerializer(bank).data,
        )
        body = {'success': True, 'bank': BankWriteSerializer(bank).data}
        if summary:
            body['deactivation'] = summary
        return Response(body)

    def destroy(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        bank = self.get_object()
        if bank.is_active:
            return error_response('Deactivate the bank before deleting it')
        if bank.has_active_works():
            return error_response('Bank has cards with active works')

        bank_id, bank_name = bank.pk, bank.name
        bank.delete()
        log_action(
            request, 'bank_deleted', 'bank', bank_id, bank_name,
            change_description=f'Bank "{bank_name}" deleted',
        )
        return Response({'success': True, 'message': f'Bank "{bank_name}" deleted'})


# ==================== BANK ACCOUNT VIEWSET ====================

class BankAccountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for BankAccount operations.

    Endpoints:
    - GET /finance/bank-accounts/ - List accounts (filters: bank, is_active, search)
    - POST /finance/bank-accounts/ - Create account
    - PATCH /finance/bank-accounts/{id}/ - Update account
    - DELETE /finance/bank-accounts/{id}/ - Delete account

    Custom Actions:
    - GET /finance/bank-accounts/{id}/balance/ - Last 50 balance changes
    - PATCH /finance/bank-accounts/{id}/balance/ - Set balance
    """
    queryset = BankAccount.objects.select_related('bank').prefetch_related('cards').all()
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'create':
            return BankAccountCreateSerializer
        if self.action == 'partial_update':
            return BankAccountUpdateSerializer
        return BankAccountListSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        bank_id = self.request.query_params.get('bank')
        if bank_id:
            queryset = queryset.filter(bank_id=bank_id)

        is_active = self.request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.active() if is_active.lower() == 'true' else queryset.inactive()

        return queryset.search(
            self.request.query_params.get('search'), 'holder_name', 'account_number', 'bank__name'
        )

    def list(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_READ_ROLES)
        if denied:
            return denied
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_READ_ROLES)
        if denied:
            return denied
        account = self.get_object()
        return Response({'success': True, 'account': BankAccountListSerializer(account).data})

    def create(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        bank_id = request.data.get('bank_id')
        if not bank_id or not str(request.data.get('holder_name') or '').strip():
            return error_response('bank_id and holder_name are required')
        bank = get_object_or_404(Bank, pk=bank_id)
        if not bank.is_active:
            return error_response('Bank is not active', status_code=status.HTTP_404_NOT_FOUND)

        serializer = BankAccountCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            balance = serializer.validated_data.pop('balance', Decimal('0'))
            account = serializer.save(created_by=request.user, updated_by=request.user)
            if balance > 0:
                account.set_balance(
                    balance, user=request.user, reason='Initial balance',
                    ip_address=get_client_ip(request),
                    user_agent=request.META.get('HTTP_USER_AGENT', ''),
                )

        log_action(
            request, 'account_created', 'bank_account', account.pk, account.holder_name,
            change_description=f'Account "{account.holder_name}" created at {bank.name}',
            new_values={'bank_id': bank.pk, 'currency': account.currency, 'balance': account.balance},
        )
        return Response(
            {'success': True, 'account': BankAccountListSerializer(account).data},
            status=status.HTTP_201_CREATED
        )

    def partial_update(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        account = self.get_object()
        serializer = BankAccountUpdateSerializer(account, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        blocked = False
        with transaction.atomic():
            account = serializer.save(updated_by=request.user)
            if 'is_active' in request.data:
                if _is_true(request.data['is_active']):
                    if not account.is_active:
                        account.activate(request.user)
                elif account.is_active:
                    account.deactivate(request.user)
                    blocked = True

        log_action(
            request, 'account_blocked' if blocked else 'account_updated',
            'bank_account', account.pk, account.holder_name,
            change_description=f'Account "{account.holder_name}" updated',
            new_values=dict(request.data),
        )
        account.refresh_from_db()
        return Response({'success': True, 'account': BankAccountListSerializer(account).data})

    def destroy(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        account = self.get_object()
        if account.has_active_works():
            return error_response('Account has cards with active works')

        account_id, holder_name = account.pk, account.holder_name
        account.delete()
        log_action(
            request, 'account_deleted', 'bank_account', account_id, holder_name,
            change_description=f'Account "{holder_name}" deleted',
        )
        return Response({'success': True, 'message': 'Account deleted'})

    @action(detail=True, methods=['get', 'patch'])
    def balance(self, request, pk=None):
        """
        GET /finance/bank-accounts/{id}/balance/
        - Returns the last 50 balance changes

        PATCH /finance/bank-accounts/{id}/balance/
        - Request body: { "balance": 1500.00, "comment": "..." }
        """
        denied = check_roles(request, *BALANCE_ROLES)
        if denied:
            return denied

        account = self.get_object()

        if request.method == 'GET':
            history = account.balance_history.select_related('changed_by')[:BALANCE_HISTORY_LIMIT]
            return Response({
                'success': True,
                'account_id': account.pk,
                'balance': account.balance,
                'currency': account.currency,
                'history': BalanceHistorySerializer(history, many=True).data,
            })

        serializer = BalanceUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        old_balance = account.balance
        entry = account.set_balance(
            serializer.validated_data['balance'],
            user=request.user,
            reason=serializer.validated_data['comment'],
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )
        cards = list(Card.objects.filter(bank_account=account))

        log_action(
            request, 'balance_updated', 'bank_account', account.pk, account.holder_name,
            change_description=serializer.validated_data['comment'] or 'Balance updated',
            old_values={'balance': old_balance},
            new_values={'balance': account.balance},
        )
        logger.info(
            "Balance of account %s changed %s -> %s by %s",
            account.pk, old_balance, account.balance, request.user.email
        )

        return Response({
            'success': True,
            'account': {
                'id': account.pk,
                'holder_name': account.holder_name,
                'bank_name': account.bank.name,
                'currency': account.currency,
                'balance': account.balance,
                'old_balance': entry.old_balance,
                'change_amount': entry.change_amount,
                'cards_available': account.cards_available,
            },
            'affected_cards': len(cards),
            'cards_status': {
                'available': sum(1 for card in cards if card.status == Card.STATUS_ACTIVE),
                'hidden': sum(1 for card in cards if card.status != Card.STATUS_ACTIVE),
            },
        })


# ==================== BANK ASSIGNMENT VIEWSET ====================

class BankAssignmentViewSet(viewsets.ModelViewSet):
    """
    Banks handed to team leads for issuing cards to their juniors.

    Endpoints:
    - GET /finance/bank-assignments/ - Active assignments
    - POST /finance/bank-assignments/ - Assign a bank: { "bank_id", "teamlead_id", "notes" }
    """
    queryset = BankTeamleadAssignment.objects.select_related('bank', 'teamlead', 'assigned_by')
    serializer_class = BankAssignmentSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'head', 'options']

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)

    def list(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_ASSIGNMENT_READ_ROLES)
        if denied:
            return denied
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_ASSIGNMENT_READ_ROLES)
        if denied:
            return denied
        return Response({'success': True, 'assignment': self.get_serializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        denied = check_roles(request, *BANK_ASSIGNMENT_WRITE_ROLES)
        if denied:
            return denied

        bank_id = request.data.get('bank_id')
        teamlead_id = request.data.get('teamlead_id')
        if not bank_id or not teamlead_id:
            return error_response('bank_id and teamlead_id are required')

        teamlead = CustomUser.objects.filter(
            pk=teamlead_id, role=Roles.TEAMLEAD, status=UserStatus.ACTIVE
        ).first()
        if teamlead is None:
            return error_response('Team Lead not found or inactive', status_code=status.HTTP_404_NOT_FOUND)
        bank = Bank.objects.active().filter(pk=bank_id).first()
        if bank is None:
            return error_response('Bank not found or inactive', status_code=status.HTTP_404_NOT_FOUND)
        if bank.teamlead_assignments.filter(is_active=True).exists():
            return error_response('Bank is already assigned to a Team Lead')

        assignment = BankTeamleadAssignment.objects.create(
            bank=bank,
            teamlead=teamlead,
            assigned_by=request.user,
            notes=(request.data.get('notes') or '').strip() or None,
        )
        notify_bank_assignment(teamlead, bank, sender=request.user)
        log_action(
            request, 'bank_assigned', 'bank', bank.pk, bank.name,
            change_description=f'Bank "{bank.name}" assigned to {teamlead.email}',
            new_values={'teamlead_id': teamlead.pk},
        )
        logger.info("Bank %s assigned to %s by %s", bank.name, teamlead.email, request.user.email)
        return Response(
            {
                'success': True,
                'assignment': self.get_serializer(assignment).data,
                'message': f'Bank {bank.name} assigned to Team Lead {teamlead.email}',
            },
            status=status.HTTP_201_CREATED
        )


# ==================== CARD VIEWSET ====================

class CardViewSet(viewsets.ModelViewSet):
    """
    ViewSet for payment cards.

    Endpoints:
    - GET /finance/cards/ - Own cards (junior), team cards (teamlead), all otherwise
    - POST /finance/cards/ - Create card
    - GET /finance/cards/{id}/ - Card details
    - PATCH /finance/cards/{id}/ - Update card
    - DELETE /finance/cards/{id}/ - Delete card

    Custom Actions:
    - POST /finance/cards/{id}/reveal/ - Full number and CVV behind a PIN
    - PATCH /finance/cards/{id}/assign/ - Casino and junior assignment
    - POST /finance/cards/bulk/ - Block, unblock or unassign many cards
    - POST /finance/cards/import/ - Import cards from CSV/Excel
    """
    queryset = Card.objects.select_related(
        'bank_account__bank', 'assigned_to'
    ).prefetch_related('casino_assignments__casino').all()
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'create':
            return CardCreateSerializer
        if self.action == 'partial_update':
            return CardUpdateSerializer
        return CardDetailSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action not in ('list', 'retrieve'):
            return queryset

        user = self.request.user
        if user.role == Roles.JUNIOR:
            return queryset.filter(assigned_to=user)
        if user.role == Roles.TEAMLEAD:
            queryset = queryset.filter(assigned_to__team_lead=user)

        params = self.request.query_params
        if params.get('assigned_to'):
            queryset = queryset.filter(assigned_to_id=params['assigned_to'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('bank_account'):
            queryset = queryset.filter(bank_account_id=params['bank_account'])
        return queryset

    def list(self, request, *args, **kwargs):
        denied = check_roles(request)
        if denied:
            return denied
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        denied = check_roles(request)
        if denied:
            return denied
        return Response({'success': True, 'card': CardDetailSerializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        denied = check_roles(request, *CARD_WRITE_ROLES)
        if denied:
            return denied

        serializer = CardCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        account = get_object_or_404(BankAccount, pk=data['bank_account_id'])

        with transaction.atomic():
            card = Card.objects.create(
                bank_account=account,
                card_number_mask=Card.mask_number(data['card_number']),
                card_bin=Card.bin_of(data['card_number']),
                card_type=data['card_type'],
                exp_month=data['exp_month'],
                exp_year=data['exp_year'],
                daily_limit=data.get('daily_limit'),
                status=Card.initial_status_for(account),
            )
            CardSecret.objects.create(card=card, pan=data['card_number'], cvv=data['cvv'])

        log_action(
            request, 'card_created', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} created on account {account.pk}',
            new_values={'bank_account_id': account.pk, 'card_type': card.card_type, 'status': card.status},
        )
        return Response(
            {'success': True, 'card': CardDetailSerializer(card).data},
            status=status.HTTP_201_CREATED
        )

    def partial_update(self, request, *args, **kwargs):
        denied = check_roles(request, *CARD_WRITE_ROLES)
        if denied:
            return denied

        card = self.get_object()
        serializer = CardUpdateSerializer(card, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        new_number = data.pop('card_number', None)
        new_cvv = data.pop('cvv', None)

        if (new_number or new_cvv) and request.user.role not in FINANCE_ROLES:
            return error_response(
                'Access denied',
                details='Only CFO or admin may change the card number or CVV',
                status_code=status.HTTP_403_FORBIDDEN
            )
        if data.get('status') in (Card.STATUS_BLOCKED, Card.STATUS_INACTIVE) and card.has_active_works():
            return error_response('Card has active works and cannot be blocked')

        old_values = {field: getattr(card, field) for field in data}
        with transaction.atomic():
            for field, value in data.items():
                setattr(card, field, value)
            if new_number:
                card.card_number_mask = Card.mask_number(new_number)
                card.card_bin = Card.bin_of(new_number)
            card.save()

            if new_number or new_cvv:
                secret, _ = CardSecret.objects.get_or_create(
                    card=card, defaults={'pan': new_number or '', 'cvv': new_cvv or ''}
                )
                if new_number:
                    secret.pan = new_number
                if new_cvv:
                    secret.cvv = new_cvv
                secret.save()

        new_values = {field: getattr(card, field) for field in data}
        if new_number or new_cvv:
            new_values['secrets_changed'] = True
        log_action(
            request, 'card_updated', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} updated',
            old_values=old_values,
            new_values=new_values,
        )
        return Response({'success': True, 'card': CardDetailSerializer(card).data})

    def destroy(self, request, *args, **kwargs):
        denied = check_roles(request, *FINANCE_ROLES)
        if denied:
            return denied

        card = self.get_object()
        if card.has_active_works():
            return error_response('Card has active works and cannot be deleted')

        card_id, mask = card.pk, card.card_number_mask
        card.delete()
        log_action(request, 'card_deleted', 'card', card_id, mask, change_description=f'Card {mask} deleted')
        return Response({'success': True, 'message': f'Card {mask} deleted'})

    # ==================== REVEAL ====================

    def _log_access(self, request, card, access_type, success, **context):
        CardAccessLog.objects.create(
            card=card,
            user=request.user,
            access_type=access_type,
            success=success,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            context=context,
        )

    @action(detail=True, methods=['post'])
    def reveal(self, request, pk=None):
        """
        POST /finance/cards/{id}/reveal/
        - Request body: { "pin": "1234" }
        - Returns the full number and CVV for a short time; every attempt is logged
        """
        denied = check_roles(request)
        if denied:
            return denied

        card = self.get_object()
        user = request.user

        expected_pin = (
            settings.CARD_REVEAL_PIN_PRIVILEGED
            if user.role in PRIVILEGED_REVEAL_ROLES
            else settings.CARD_REVEAL_PIN
        )
        if str(request.data.get('pin') or '') != str(expected_pin):
            self._log_access(request, card, CardAccessLog.ACCESS_REVEAL_ATTEMPT, False, error='invalid_pin')
            logger.warning("Invalid reveal PIN for card %s by %s", card.pk, user.email)
            return error_response('Invalid PIN', status_code=status.HTTP_401_UNAUTHORIZED)

        if user.role == Roles.JUNIOR and card.assigned_to_id != user.pk:
            self._log_access(request, card, CardAccessLog.ACCESS_REVEAL_ATTEMPT, False, error='not_owner')
            return error_response(
                'Access denied',
                details='Card is not assigned to you',
                status_code=status.HTTP_403_FORBIDDEN
            )

        if card.status != Card.STATUS_ACTIVE:
            self._log_access(request, card, CardAccessLog.ACCESS_REVEAL_ATTEMPT, False, error='card_not_active')
            return error_response(f'Card is {card.status}')

        secret = CardSecret.objects.filter(card=card).first()
        if secret is None:
            return error_response('Card secrets not found', status_code=status.HTTP_404_NOT_FOUND)

        self._log_access(request, card, CardAccessLog.ACCESS_REVEAL_SUCCESS, True)
        return Response({
            'success': True,
            'card_data': {
                'pan': secret.pan,
                'cvv': secret.cvv,
                'exp_month': card.exp_month,
                'exp_year': card.exp_year,
                'exp': f'{card.exp_month:02d}/{card.exp_year % 100:02d}',
                'mask': card.card_number_mask,
            },
            'ttl': settings.CARD_REVEAL_TTL_SECONDS,
        })

    # ==================== ASSIGNMENT ====================

    @action(detail=True, methods=['patch'])
    def assign(self, request, pk=None):
        """
        PATCH /finance/cards/{id}/assign/
        - Request body: { "action": "assign_to_casino", "casino_id": 1 }
                        { "action": "unassign_from_casino", "casino_id": 1 }
                        { "action": "assign_to_junior", "junior_id": 7 }
                        { "action": "unassign_from_junior" }
        """
        handlers = {
            'assign_to_casino': (CASINO_ASSIGN_ROLES, self._assign_to_casino),
            'unassign_from_casino': (CASINO_ASSIGN_ROLES, self._unassign_from_casino),
            'assign_to_junior': (JUNIOR_ASSIGN_ROLES, self._assign_to_junior),
            'unassign_from_junior': (JUNIOR_ASSIGN_ROLES, self._unassign_from_junior),
        }
        action_name = request.data.get('action')
        if action_name not in handlers:
            return error_response(f'Unknown action. Use one of: {", ".join(handlers)}')

        roles, handler = handlers[action_name]
        denied = check_roles(request, *roles)
        if denied:
            return denied

        return handler(request, self.get_object())

    def _assign_to_casino(self, request, card):
        from Casino.casinos.models import Casino, CardCasinoAssignment

        casino_id = request.data.get('casino_id')
        if not casino_id:
            return error_response('casino_id is required')
        casino = get_object_or_404(Casino, pk=casino_id)

        if card.status != Card.STATUS_ACTIVE:
            return error_response(f'Card is {card.status}')
        if card.casino_assignments.filter(status=CardCasinoAssignment.STATUS_ACTIVE).exists():
            return error_response('Card is already assigned to a casino')
        if casino.status not in (Casino.STATUS_NEW, Casino.STATUS_TESTING):
            return error_response(f'Casino is {casino.status}; only new or testing casinos accept cards')

        assignment = CardCasinoAssignment.objects.create(
            card=card,
            casino=casino,
            assigned_by=request.user,
            assignment_type=request.data.get('assignment_type') or CardCasinoAssignment.TYPE_TESTING,
            deposit_amount=request.data.get('deposit_amount') or None,
        )
        log_action(
            request, 'card_assigned_to_casino', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} assigned to {casino.name}',
            new_values={'casino_id': casino.pk, 'assignment_id': assignment.pk},
        )
        return Response({
            'success': True,
            'message': f'Card assigned to {casino.name}',
            'assignment_id': assignment.pk,
            'card': CardDetailSerializer(card).data,
        })

    def _unassign_from_casino(self, request, card):
        from Casino.casinos.models import CardCasinoAssignment

        assignments = card.casino_assignments.filter(status=CardCasinoAssignment.STATUS_ACTIVE)
        if request.data.get('casino_id'):
            assignments = assignments.filter(casino_id=request.data['casino_id'])
        updated = assignments.update(status=CardCasinoAssignment.STATUS_COMPLETED, completed_at=timezone.now())
        if not updated:
            return error_response('Card has no active casino assignment')

        log_action(
            request, 'card_unassigned_from_casino', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} released from casino',
        )
        return Response({'success': True, 'message': 'Card released from casino', 'updated_count': updated})

    def _assign_to_junior(self, request, card):
        junior_id = request.data.get('junior_id')
        if not junior_id:
            return error_response('junior_id is required')
        junior = get_object_or_404(CustomUser, pk=junior_id)

        if junior.role != Roles.JUNIOR or junior.status != UserStatus.ACTIVE:
            return error_response('Cards can only be assigned to active juniors')
        if request.user.role == Roles.TEAMLEAD and junior.team_lead_id != request.user.pk:
            return error_response(
                'Access denied',
                details='Junior is not in your team',
                status_code=status.HTTP_403_FORBIDDEN
            )

        previous = card.assigned_to_id
        card.assign_to(junior)
        notify_card_assignment(junior, card, sender=request.user)
        log_action(
            request, 'card_assigned', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} assigned to {junior.display_name}',
            old_values={'assigned_to': previous},
            new_values={'assigned_to': junior.pk},
        )
        return Response({
            'success': True,
            'message': f'Card assigned to {junior.display_name}',
            'card': CardDetailSerializer(card).data,
        })

    def _unassign_from_junior(self, request, card):
        if card.assigned_to_id is None:
            return error_response('Card is not assigned')
        if request.user.role == Roles.TEAMLEAD and card.assigned_to.team_lead_id != request.user.pk:
            return error_response(
                'Access denied',
                details='Junior is not in your team',
                status_code=status.HTTP_403_FORBIDDEN
            )

        previous = card.assigned_to_id
        card.assign_to(None)
        log_action(
            request, 'card_unassigned', 'card', card.pk, card.card_number_mask,
            change_description=f'Card {card.card_number_mask} unassigned',
            old_values={'assigned_to': previous},
            new_values={'assigned_to': None},
        )
        return Response({'success': True, 'message': 'Card unassigned', 'card': CardDetailSerializer(card).data})

    # ==================== BULK & IMPORT ====================

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        """
        POST /finance/cards/bulk/
        - Request body: { "action": "block" | "unblock" | "unassign",
                          "card_ids": [1, 2], "comment": "..." }
        """
        from Casino.casinos.models import CardCasinoAssignment

        denied = check_roles(request, Roles.MANAGER)
        if denied:
            return denied

        bulk_action = request.data.get('action')
        card_ids = request.data.get('card_ids')
        comment = request.data.get('comment') or ''
        if bulk_action not in ('block', 'unblock', 'unassign'):
            return error_response('action must be block, unblock or unassign')
        if not isinstance(card_ids, list) or not card_ids:
            return error_response('card_ids must be a non-empty list')

        cards = list(Card.objects.select_related('bank_account').filter(pk__in=card_ids))
        if not cards:
            return error_response('No cards found', status_code=status.HTTP_404_NOT_FOUND)

        with transaction.atomic():
            for card in cards:
                old_values = {'status': card.status, 'assigned_to': card.assigned_to_id}
                if bulk_action == 'block':
                    card.status = Card.STATUS_BLOCKED
                    card.save(update_fields=['status', 'updated_at'])
                elif bulk_action == 'unblock':
                    card.status = Card.initial_status_for(card.bank_account)
                    card.save(update_fields=['status', 'updated_at'])
                else:
                    card.assign_to(None)
                    card.casino_assignments.filter(
                        status=CardCasinoAssignment.STATUS_ACTIVE
                    ).update(status=CardCasinoAssignment.STATUS_COMPLETED, completed_at=timezone.now())

                log_action(
                    request, f'card_bulk_{bulk_action}', 'card', card.pk, card.card_number_mask,
                    change_description=comment or f'Bulk {bulk_action}',
                    old_values=old_values,
                    new_values={'status': card.status, 'assigned_to': card.assigned_to_id},
                )

        logger.info("Bulk %s of %s card(s) by %s", bulk_action, len(cards), request.user.email)
        return Response({
            'success': True,
            'updated_count': len(cards),
            'action': bulk_action,
            'card_ids': [card.pk for card in cards],
        })

    @action(
        detail=False,
        methods=['post'],
        url_path='import',
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def import_cards(self, request):
        """
        POST /finance/cards/import/
        - multipart/form-data: file, bank_account_id, preview
        - Preview validates only; import saves every row or none
        """
        denied = check_roles(request, *CARD_WRITE_ROLES)
        if denied:
            return denied

        serializer = CardImportSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        importer = CardImporter(data['file'], data['bank_account_id'], request.user)

        if data['preview']:
            return Response(importer.preview_import())

        try:
            result = importer.import_cards()
        except ValidationError as e:
            return error_response('; '.join(e.messages), details=importer.errors)

        log_action(
            request, 'cards_imported', 'bank_account', data['bank_account_id'],
            change_description=f'{result["cards_created"]} card(s) imported from {data["file"].name}',
            new_values={'cards_created': result['cards_created']},
        )
        return Response({
            'success': True,
            'message': f'{result["cards_created"]} card(s) imported',
            'cards_created': result['cards_created'],
            'summary': result['summary'],
            'cards': CardListSerializer(result['cards'], many=True).data,
        }, status=status.HTTP_201_CREATED)
