"""
Work Serializers
Handles serialization for junior works and their withdrawals.
"""
from decimal import Decimal

from rest_framework import serializers

from .models import Work, WorkWithdrawal, WithdrawalStatusHistory, WorkStatusHistory


class WithdrawalStatusHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = WithdrawalStatusHistory
        fields = ['id', 'old_status', 'new_status', 'comment', 'changed_by', 'changed_by_name', 'created_at']
        read_only_fields = fields

    def get_changed_by_name(self, obj):
        return obj.changed_by.display_name if obj.changed_by else None


class WorkWithdrawalSerializer(serializers.ModelSerializer):
    """Withdrawal with the work context reviewers need."""
    junior_id = serializers.IntegerField(source='work.junior_id', read_only=True)
    junior_name = serializers.CharField(source='work.junior.display_name', read_only=True)
    junior_email = serializers.CharField(source='work.junior.email', read_only=True)
    casino_name = serializers.CharField(source='work.casino.name', read_only=True)
    card_mask = serializers.CharField(source='work.card.card_number_mask', read_only=True)
    deposit_amount = serializers.DecimalField(
        source='work.deposit_amount', max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = WorkWithdrawal
        fields = [
            'id', 'work', 'withdrawal_amount', 'status', 'comment',
            'teamlead_comment', 'manager_comment', 'hr_comment', 'cfo_comment',
            'alarm_message', 'checked_by', 'checked_at', 'checked_by_teamlead',
            'checked_by_hr', 'checked_by_cfo', 'created_at', 'updated_at',
            'junior_id', 'junior_name', 'junior_email', 'casino_name', 'card_mask',
            'deposit_amount',
        ]
        read_only_fields = fields


class WorkWithdrawalBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = WorkWithdrawal
        fields = ['id', 'withdrawal_amount', 'status', 'comment', 'created_at', 'checked_at']
        read_only_fields = fields


class WorkSerializer(serializers.ModelSerializer):
    """Work with casino, card, withdrawals and totals."""
    junior_name = serializers.CharField(source='junior.display_name', read_only=True)
    casino = serializers.SerializerMethodField()
    card = serializers.SerializerMethodField()
    withdrawals = WorkWithdrawalBriefSerializer(many=True, read_only=True)
    total_withdrawals = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_profit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Work
        fields = [
            'id', 'junior', 'junior_name', 'casino', 'card', 'deposit_amount', 'status',
            'casino_login', 'casino_password', 'notes', 'withdrawals',
            'total_withdrawals', 'total_profit', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_casino(self, obj):
        return {
            'id': obj.casino.id,
            'name': obj.casino.name,
            'url': obj.casino.url,
            'currency': obj.casino.currency,
            'status': obj.casino.status,
        }

    def get_card(self, obj):
        return {
            'id': obj.card.id,
            'card_number_mask': obj.card.card_number_mask,
            'card_type': obj.card.card_type,
            'bank_name': obj.card.bank_account.bank.name,
        }


class WorkCreateSerializer(serializers.Serializer):
    casino_id = serializers.IntegerField()
    card_id = serializers.IntegerField()
    deposit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    casino_login = serializers.CharField(required=False, allow_blank=True, default='')
    casino_password = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class WorkUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Work.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    casino_login = serializers.CharField(required=False, allow_blank=True)
    casino_password = serializers.CharField(required=False, allow_blank=True)


class WorkStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = WorkStatusHistory
        fields = ['id', 'old_status', 'new_status', 'notes', 'changed_by', 'created_at']
        read_only_fields = fields


class WithdrawalCreateSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    withdrawal_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class WithdrawalUpdateSerializer(serializers.Serializer):
    withdrawal_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0.01'), required=False
    )
    comment = serializers.CharField(required=False, allow_blank=True)
