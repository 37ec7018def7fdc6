"""
PayPal Serializers
"""
from decimal import Decimal

from rest_framework import serializers

from .models import PayPalAccount, PayPalWork, PayPalWithdrawal, PayPalOperation


class PayPalAccountSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.display_name', read_only=True)
    user_email = serializers.CharField(source='user.email', read_only=True)

    class Meta:
        model = PayPalAccount
        fields = [
            'id', 'user', 'user_name', 'user_email', 'name', 'email', 'password',
            'phone_number', 'authenticator_url', 'date_created', 'balance',
            'sender_paypal_email', 'balance_send', 'info', 'currency', 'status',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'user', 'currency', 'status', 'created_at', 'updated_at']


class PayPalWorkSerializer(serializers.ModelSerializer):
    paypal_email = serializers.CharField(source='paypal_account.email', read_only=True)
    casino_name = serializers.CharField(source='casino.name', read_only=True)

    class Meta:
        model = PayPalWork
        fields = [
            'id', 'junior', 'paypal_account', 'paypal_email', 'casino', 'casino_name',
            'casino_email', 'casino_password', 'deposit_amount', 'status',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PayPalWorkCreateSerializer(serializers.Serializer):
    paypal_account_id = serializers.IntegerField()
    casino_id = serializers.IntegerField()
    casino_email = serializers.CharField()
    casino_password = serializers.CharField()
    deposit_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))


class PayPalWithdrawalSerializer(serializers.ModelSerializer):
    """Withdrawal with the reviewer-facing amount and work profit."""
    user_name = serializers.CharField(source='user.display_name', read_only=True)
    user_email = serializers.CharField(source='user.email', read_only=True)
    paypal_email = serializers.CharField(source='paypal_account.email', read_only=True)
    casino_name = serializers.CharField(source='casino.name', read_only=True)
    amount = serializers.DecimalField(source='withdrawal_amount', max_digits=14, decimal_places=2, read_only=True)
    deposit_amount = serializers.DecimalField(
        source='work.deposit_amount', max_digits=14, decimal_places=2, read_only=True
    )
    profit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = PayPalWithdrawal
        fields = [
            'id', 'work', 'user', 'user_name', 'user_email', 'paypal_account', 'paypal_email',
            'casino', 'casino_name', 'withdrawal_amount', 'amount', 'deposit_amount', 'profit',
            'status', 'manager_status', 'teamlead_status', 'comment',
            'manager_comment', 'teamlead_comment', 'hr_comment', 'cfo_comment', 'admin_comment',
            'checked_by', 'checked_at', 'checked_by_teamlead', 'checked_by_hr', 'checked_by_cfo',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PayPalWithdrawalCreateSerializer(serializers.Serializer):
    work_id = serializers.IntegerField()
    withdrawal_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class PayPalOperationSerializer(serializers.ModelSerializer):
    paypal_email = serializers.CharField(source='paypal_account.email', read_only=True)
    junior_name = serializers.CharField(source='junior.display_name', read_only=True)

    class Meta:
        model = PayPalOperation
        fields = [
            'id', 'paypal_account', 'paypal_email', 'junior', 'junior_name',
            'operation_type', 'amount', 'currency', 'recipient_paypal_email',
            'recipient_card_number', 'casino_name', 'status', 'description',
            'transaction_id', 'fee_amount', 'completed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PayPalOperationCreateSerializer(serializers.Serializer):
    paypal_account_id = serializers.IntegerField()
    operation_type = serializers.ChoiceField(choices=PayPalOperation.TYPE_CHOICES)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    recipient_paypal_email = serializers.EmailField(required=False, allow_null=True)
    recipient_card_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    casino_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PayPalOperationUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PayPalOperation.STATUS_CHOICES, required=False)
    transaction_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    fee_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'), required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
