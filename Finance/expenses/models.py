from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from Finance.currency.services import CURRENCY_CHOICES


class Expense(models.Model):
    """Operating expense recorded by finance or HR, stored with its USD value."""

    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField()
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    amount_usd = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    expense_date = models.DateField(default=timezone.localdate)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.category}: {self.description} ({self.currency}{self.amount})"
