"""
Cash Management Serializers
Handles serialization/deserialization for Bank, BankAccount, BankBalanceHistory
and Card models.
"""
import re
from decimal import Decimal

from rest_framework import serializers
from django.utils import timezone

from Finance.currency.services import CURRENCY_CHOICES, convert_to_usd
from .models import Bank, BankAccount, BankBalanceHistory, BankTeamleadAssignment, Card


CARD_NUMBER_RE = re.compile(r'^\d{16}$')
CVV_RE = re.compile(r'^\d{3,4}$')


# ==================== CARD SERIALIZERS ====================

class CardListSerializer(serializers.ModelSerializer):
    """Card as nested inside an account."""
    class Meta:
        model = Card
        fields = [
            'id', 'card_number_mask', 'card_bin', 'card_type', 'status',
            'assigned_to', 'exp_month', 'exp_year', 'daily_limit',
        ]
        read_only_fields = fields


class CardDetailSerializer(serializers.ModelSerializer):
    """
    Full card with its account, bank and active casino assignments.
    """
    account_balance = serializers.DecimalField(
        source='bank_account.balance', max_digits=14, decimal_places=2, read_only=True
    )
    account_currency = serializers.CharField(source='bank_account.currency', read_only=True)
    bank_account = serializers.SerializerMethodField()
    assigned_to_name = serializers.SerializerMethodField()
    casino_assignments = serializers.SerializerMethodField()

    class Meta:
        model = Card
        fields = [
            'id', 'card_number_mask', 'card_bin', 'card_type', 'status',
            'exp_month', 'exp_year', 'daily_limit', 'assigned_to', 'assigned_to_name',
            'assigned_at', 'account_balance', 'account_currency', 'bank_account',
            'casino_assignments', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_bank_account(self, obj):
        account = obj.bank_account
        return {
            'id': account.id,
            'holder_name': account.holder_name,
            'currency': account.currency,
            'bank': {
                'id': account.bank.id,
                'name': account.bank.name,
                'country': account.bank.country,
            },
        }

    def get_assigned_to_name(self, obj):
        return obj.assigned_to.display_name if obj.assigned_to else None

    def get_casino_assignments(self, obj):
        return [
            {
                'assignment_id': assignment.id,
                'casino_id': assignment.casino_id,
                'casino_name': assignment.casino.name,
                'casino_company': assignment.casino.company,
                'casino_currency': assignment.casino.currency,
                'assignment_type': assignment.assignment_type,
                'status': assignment.status,
                'deposit_amount': assignment.deposit_amount,
                'has_deposit': bool(assignment.deposit_amount),
            }
            for assignment in obj.casino_assignments.all()
            if assignment.status == 'active'
        ]


class CardCreateSerializer(serializers.Serializer):
    """
    Validates a new card. The full number is split into mask and BIN;
    number and CVV go to CardSecret.
    """
    bank_account_id = serializers.IntegerField()
    card_number = serializers.CharField()
    cvv = serializers.CharField()
    exp_month = serializers.IntegerField()
    exp_year = serializers.IntegerField()
    card_type = serializers.ChoiceField(choices=Card.CARD_TYPE_CHOICES, required=False, default=Card.TYPE_GREY)
    daily_limit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)

    def validate_card_number(self, value):
        value = value.replace(' ', '')
        if not CARD_NUMBER_RE.match(value):
            raise serializers.ValidationError("Card number must contain 16 digits")
        if Card.objects.filter(card_number_mask=Card.mask_number(value)).exists():
            raise serializers.ValidationError("A card with this number already exists")
        return value

    def validate_cvv(self, value):
        if not CVV_RE.match(value):
            raise serializers.ValidationError("CVV must contain 3-4 digits")
        return value

    def validate_exp_month(self, value):
        if value < 1 or value > 12:
            raise serializers.ValidationError("Invalid expiry month")
        return value

    def validate_exp_year(self, value):
        if value < timezone.now().year:
            raise serializers.ValidationError("Card has already expired")
        return value


class CardUpdateSerializer(serializers.ModelSerializer):
    """Partial card edits; number and CVV handled separately by the view."""
    card_number = serializers.CharField(required=False, write_only=True)
    cvv = serializers.CharField(required=False, write_only=True)

    class Meta:
        model = Card
        fields = [
            'card_type', 'status', 'daily_limit', 'exp_month', 'exp_year', 'card_bin',
            'card_number', 'cvv',
        ]

    def validate_card_number(self, value):
        value = value.replace(' ', '')
        if not CARD_NUMBER_RE.match(value):
            raise serializers.ValidationError("Card number must contain 16 digits")
        mask = Card.mask_number(value)
        if Card.objects.filter(card_number_mask=mask).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("A card with this number already exists")
        return value

    def validate_cvv(self, value):
        if not CVV_RE.match(value):
            raise serializers.ValidationError("CVV must contain 3-4 digits")
        return value

    def validate_exp_month(self, value):
        if value < 1 or value > 12:
            raise serializers.ValidationError("Invalid expiry month")
        return value


class CardImportSerializer(serializers.Serializer):
    """
    Upload for bulk card import.

    Body (multipart/form-data):
    - file: Excel (.xlsx, .xls) or CSV (.csv)
    - bank_account_id: Account the cards are issued on
    - preview: "true" to validate without saving
    """
    file = serializers.FileField()
    bank_account_id = serializers.IntegerField()
    preview = serializers.BooleanField(required=False, default=False)

    def validate_file(self, value):
        """Validate file type and size"""
        file_name = value.name.lower()
        if not (file_name.endswith('.csv') or file_name.endswith('.xlsx') or file_name.endswith('.xls')):
            raise serializers.ValidationError(
                'Invalid file format. Please upload .csv, .xlsx, or .xls file'
            )

        if value.size > 10 * 1024 * 1024:
            raise serializers.ValidationError(
                'File size too large. Maximum size is 10MB'
            )

        return value

    def validate_bank_account_id(self, value):
        """Validate bank account exists"""
        if not BankAccount.objects.filter(id=value).exists():
            raise serializers.ValidationError(
                f'Bank account with ID {value} does not exist'
            )
        return value


# ==================== BANK ACCOUNT SERIALIZERS ====================

class BankAccountListSerializer(serializers.ModelSerializer):
    """
    Account with its cards and USD balance.
    Pass ``rates`` in the serializer context to convert with live rates.
    """
    cards = CardListSerializer(many=True, read_only=True)
    balance_usd = serializers.SerializerMethodField()
    cards_available = serializers.BooleanField(read_only=True)
    last_updated = serializers.DateTimeField(source='balance_updated_at', read_only=True)

    class Meta:
        model = BankAccount
        fields = [
            'id', 'bank', 'holder_name', 'account_number', 'sort_code', 'bank_url',
            'login_password', 'currency', 'balance', 'balance_usd', 'is_active',
            'cards_available', 'balance_updated_at', 'balance_updated_by', 'last_updated',
            'cards', 'created_at',
        ]
        read_only_fields = fields

    def get_balance_usd(self, obj):
        return convert_to_usd(obj.balance, obj.currency, self.context.get('rates'))


class BankAccountCreateSerializer(serializers.ModelSerializer):
    bank_id = serializers.PrimaryKeyRelatedField(source='bank', queryset=Bank.objects.all())
    balance = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0'), required=False, default=Decimal('0')
    )

    class Meta:
        model = BankAccount
        fields = [
            'bank_id', 'holder_name', 'account_number', 'sort_code', 'bank_url',
            'login_password', 'currency', 'balance', 'notes',
        ]

    def validate_bank_id(self, value):
        if not value.is_active:
            raise serializers.ValidationError("Bank is not active")
        return value


class BankAccountUpdateSerializer(serializers.ModelSerializer):
    """Editable account fields; is_active is applied by the view."""
    class Meta:
        model = BankAccount
        fields = ['holder_name', 'account_number', 'sort_code', 'bank_url', 'login_password', 'notes']


class BalanceUpdateSerializer(serializers.Serializer):
    balance = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'))
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class BalanceHistorySerializer(serializers.ModelSerializer):
    changed_by_user = serializers.SerializerMethodField()

    class Meta:
        model = BankBalanceHistory
        fields = [
            'id', 'old_balance', 'new_balance', 'change_amount', 'change_reason',
            'ip_address', 'created_at', 'changed_by_user',
        ]
        read_only_fields = fields

    def get_changed_by_user(self, obj):
        if obj.changed_by is None:
            return None
        return {
            'name': f"{obj.changed_by.first_name} {obj.changed_by.last_name}".strip(),
            'role': obj.changed_by.role,
        }


# ==================== BANK SERIALIZERS ====================

class BankListSerializer(serializers.ModelSerializer):
    """
    Bank with its accounts (and their cards).
    """
    accounts = serializers.SerializerMethodField()

    class Meta:
        model = Bank
        fields = ['id', 'name', 'country', 'currency', 'is_active', 'notes', 'created_at', 'accounts']
        read_only_fields = fields

    def get_accounts(self, obj):
        return BankAccountListSerializer(obj.accounts.all(), many=True, context=self.context).data


class BankWriteSerializer(serializers.ModelSerializer):
    currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False, default='USD')

    class Meta:
        model = Bank
        fields = ['id', 'name', 'country', 'currency', 'is_active', 'notes']
        read_only_fields = ['id', 'is_active']


# ==================== BANK ASSIGNMENT SERIALIZERS ====================

class BankAssignmentSerializer(serializers.ModelSerializer):
    bank_name = serializers.CharField(source='bank.name', read_only=True)
    teamlead_email = serializers.CharField(source='teamlead.email', read_only=True)
    teamlead_name = serializers.CharField(source='teamlead.display_name', read_only=True)
    assigned_by_email = serializers.SerializerMethodField()

    class Meta:
        model = BankTeamleadAssignment
        fields = [
            'id', 'bank', 'bank_name', 'teamlead', 'teamlead_email', 'teamlead_name',
            'assigned_by', 'assigned_by_email', 'is_active', 'notes', 'assigned_at',
        ]
        read_only_fields = fields

    def get_assigned_by_email(self, obj):
        return obj.assigned_by.email if obj.assigned_by else None
