"""
Excel export for expenses
"""
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from django.http import HttpResponse
from django.utils import timezone

EXPORT_HEADERS = [
    'Date',
    'Category',
    'Description',
    'Amount',
    'Currency',
    'Amount (USD)',
    'Created By',
]


def export_expenses_to_excel(expenses):
    """
    Write expenses to a single-sheet workbook.

    Args:
        expenses: iterable of Expense instances

    Returns:
        HttpResponse with the .xlsx file attached
    """
    wb = Workbook()
    ws = wb.active
    ws.title = 'Expenses'

    for col_idx, header in enumerate(EXPORT_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)
        ws.column_dimensions[chr(64 + col_idx)].width = 20

    row_idx = 1
    for row_idx, expense in enumerate(expenses, start=2):
        data_row = [
            expense.expense_date.strftime('%Y-%m-%d'),
            expense.category,
            expense.description,
            float(expense.amount),
            expense.currency,
            float(expense.amount_usd),
            expense.created_by.email if expense.created_by else '',
        ]
        for col_idx, value in enumerate(data_row, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    # Totals row
    total_row = row_idx + 1
    ws.cell(row=total_row, column=5, value='Total').font = Font(bold=True)
    if total_row > 2:
        ws.cell(row=total_row, column=6, value=f'=SUM(F2:F{total_row - 1})')
    else:
        ws.cell(row=total_row, column=6, value=0)

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"Expenses_{timezone.localdate().strftime('%Y%m%d')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename={filename}'
    return response
