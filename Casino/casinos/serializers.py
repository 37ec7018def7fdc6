"""
Casino Serializers
Handles serialization for casinos, tester tests and their withdrawals.
"""
from decimal import Decimal

from rest_framework import serializers

from Finance.currency.services import CURRENCY_CHOICES
from .models import Casino, CasinoTest, TestWithdrawal, CardCasinoAssignment, JuniorCasinoAssignment


class CasinoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Casino
        fields = [
            'id', 'name', 'url', 'promo', 'company', 'currency', 'status',
            'allowed_bins', 'auto_approve_limit', 'withdrawal_time_value',
            'withdrawal_time_unit', 'notes', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class CasinoWriteSerializer(serializers.ModelSerializer):
    """
    Create/update a casino. Currency is optional; the view guesses it
    from the name when omitted.
    """
    currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, required=False)
    allowed_bins = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Casino
        fields = [
            'name', 'url', 'promo', 'company', 'currency', 'status',
            'allowed_bins', 'auto_approve_limit', 'withdrawal_time_value',
            'withdrawal_time_unit', 'notes',
        ]

    def validate_name(self, value):
        if not value or not value.strip():
            raise serializers.ValidationError("Name cannot be empty")
        return value.strip()


class TestWithdrawalSerializer(serializers.ModelSerializer):
    checked_by_name = serializers.SerializerMethodField()

    class Meta:
        model = TestWithdrawal
        fields = [
            'id', 'test', 'withdrawal_amount', 'withdrawal_status', 'notes',
            'manager_comment', 'checked_by', 'checked_by_name', 'checked_at',
            'requested_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_checked_by_name(self, obj):
        return obj.checked_by.display_name if obj.checked_by else None


class CasinoTestSerializer(serializers.ModelSerializer):
    """Test with its casino, card mask and withdrawals."""
    casino = CasinoSerializer(read_only=True)
    tester_name = serializers.CharField(source='tester.display_name', read_only=True)
    card = serializers.SerializerMethodField()
    withdrawals = TestWithdrawalSerializer(many=True, read_only=True)

    class Meta:
        model = CasinoTest
        fields = [
            'id', 'casino', 'tester', 'tester_name', 'card', 'test_type', 'status',
            'test_result', 'rating', 'login', 'password', 'deposit_amount',
            'deposit_success', 'withdrawal_success', 'registration_time',
            'withdrawal_time', 'issues_found', 'recommended_bins', 'test_notes',
            'final_report', 'started_at', 'completed_at', 'created_at', 'withdrawals',
        ]
        read_only_fields = fields

    def get_card(self, obj):
        if obj.card is None:
            return None
        account = obj.card.bank_account
        return {
            'id': obj.card.id,
            'card_number_mask': obj.card.card_number_mask,
            'card_bin': obj.card.card_bin,
            'status': obj.card.status,
            'account_holder': account.holder_name,
            'bank_name': account.bank.name,
        }


class CasinoTestUpdateSerializer(serializers.ModelSerializer):
    """Fields a tester may change on their own test."""
    rating = serializers.IntegerField(min_value=1, max_value=10, required=False, allow_null=True)

    class Meta:
        model = CasinoTest
        fields = [
            'status', 'test_result', 'rating', 'deposit_amount', 'deposit_success',
            'withdrawal_success', 'registration_time', 'withdrawal_time',
            'issues_found', 'recommended_bins', 'test_notes', 'final_report',
        ]


class TestWorkCreateSerializer(serializers.Serializer):
    casino_id = serializers.IntegerField()
    card_id = serializers.IntegerField()
    login = serializers.CharField()
    password = serializers.CharField()
    deposit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))


class TestWithdrawalCreateSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    withdrawal_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class CardCasinoAssignmentSerializer(serializers.ModelSerializer):
    card_mask = serializers.CharField(source='card.card_number_mask', read_only=True)
    casino_name = serializers.CharField(source='casino.name', read_only=True)

    class Meta:
        model = CardCasinoAssignment
        fields = [
            'id', 'card', 'card_mask', 'casino', 'casino_name', 'assignment_type',
            'status', 'deposit_amount', 'assigned_by', 'assigned_at', 'completed_at',
        ]
        read_only_fields = fields


class JuniorCasinoAssignmentSerializer(serializers.ModelSerializer):
    junior_name = serializers.CharField(source='junior.display_name', read_only=True)
    casino_name = serializers.CharField(source='casino.name', read_only=True)

    class Meta:
        model = JuniorCasinoAssignment
        fields = [
            'id', 'junior', 'junior_name', 'casino', 'casino_name', 'status',
            'notes', 'assigned_by', 'assigned_at', 'ended_at',
        ]
        read_only_fields = fields
