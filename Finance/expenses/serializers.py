"""
Expense Serializers
"""
from decimal import Decimal

from rest_framework import serializers

from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Expense
        fields = [
            'id', 'category', 'description', 'amount', 'currency', 'amount_usd',
            'expense_date', 'created_by', 'created_by_name', 'created_at',
        ]
        read_only_fields = ['id', 'amount_usd', 'created_by', 'created_at']

    def get_created_by_name(self, obj):
        return obj.created_by.display_name if obj.created_by else None


class ExpenseCreateSerializer(serializers.Serializer):
    category = serializers.CharField(max_length=100)
    description = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    currency = serializers.ChoiceField(choices=Expense._meta.get_field('currency').choices, default='USD')
    # the dashboard sends ``date``; ``expense_date`` is accepted too
    date = serializers.DateField(required=False)
    expense_date = serializers.DateField(required=False)
