"""
Expense views: listing with statistics, creation, deletion and Excel export.
"""
import logging
from collections import defaultdict
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.action_history.services import log_action
from core.job_roles.core_config import Roles, FINANCE_ROLES
from core.job_roles.decorators import require_roles, require_method_roles
from Finance.currency.services import convert_to_usd
from .excel_utils import export_expenses_to_excel
from .models import Expense
from .serializers import ExpenseSerializer, ExpenseCreateSerializer

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def expense_statistics(expenses):
    """Totals over ``expenses``; monthly figures use the expense date."""
    today = timezone.localdate()
    last_month = today - relativedelta(months=1)

    total = Decimal('0')
    this_month = Decimal('0')
    previous_month = Decimal('0')
    by_category = defaultdict(Decimal)

    for expense in expenses:
        total += expense.amount_usd
        by_category[expense.category] += expense.amount_usd
        month = (expense.expense_date.year, expense.expense_date.month)
        if month == (today.year, today.month):
            this_month += expense.amount_usd
        elif month == (last_month.year, last_month.month):
            previous_month += expense.amount_usd

    return {
        'total_expenses': len(expenses),
        'total_amount_usd': total,
        'this_month_amount': this_month,
        'last_month_amount': previous_month,
        'by_category': dict(by_category),
    }


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': FINANCE_ROLES,
    'POST': [Roles.CFO, Roles.ADMIN, Roles.HR],
})
def expenses_handler(request):
    """
    GET /finance/expenses/
    - All expenses, newest first, with statistics

    POST /finance/expenses/
    - Request body: { "category", "description", "amount", "currency", "date" }
    """
    if request.method == 'GET':
        expenses = list(Expense.objects.select_related('created_by'))
        return Response({
            'success': True,
            'expenses': ExpenseSerializer(expenses, many=True).data,
            'statistics': expense_statistics(expenses),
        })

    serializer = ExpenseCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    expense = Expense.objects.create(
        category=data['category'],
        description=data['description'],
        amount=data['amount'],
        currency=data['currency'],
        amount_usd=convert_to_usd(data['amount'], data['currency']).quantize(CENT),
        expense_date=data.get('expense_date') or data.get('date') or timezone.localdate(),
        created_by=request.user,
    )
    log_action(
        request, 'expense_created', 'expense', expense.pk, f'{expense.category}: {expense.description}',
        change_description=f'Expense created: {expense.category} - {expense.description} '
                           f'({expense.currency}{expense.amount})',
        new_values={
            'category': expense.category,
            'description': expense.description,
            'amount': expense.amount,
            'currency': expense.currency,
            'expense_date': expense.expense_date,
        },
    )
    return Response(
        {
            'success': True,
            'expense': ExpenseSerializer(expense).data,
            'message': f'Expense "{expense.description}" created',
        },
        status=status.HTTP_201_CREATED
    )


@api_view(['DELETE'])
@require_roles(*FINANCE_ROLES)
def expense_detail(request, expense_id):
    """DELETE /finance/expenses/{id}/"""
    expense = get_object_or_404(Expense, pk=expense_id)
    log_action(
        request, 'expense_deleted', 'expense', expense.pk, f'{expense.category}: {expense.description}',
        change_description=f'Expense deleted: {expense.category} - {expense.description}',
        old_values={'category': expense.category, 'description': expense.description, 'amount': expense.amount},
    )
    description = expense.description
    expense.delete()
    return Response({'success': True, 'message': f'Expense "{description}" deleted'})


@api_view(['GET'])
@require_roles(*FINANCE_ROLES)
def expenses_export(request):
    """GET /finance/expenses/export/ - Excel workbook of all expenses"""
    expenses = Expense.objects.select_related('created_by').order_by('-expense_date', '-id')
    logger.info("Expense export by %s", request.user.email)
    return export_expenses_to_excel(expenses)
