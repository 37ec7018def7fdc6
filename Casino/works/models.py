from decimal import Decimal

from django.conf import settings
from django.db import models


class Work(models.Model):
    """A junior's deposit at an approved casino using an issued card."""

    STATUS_ACTIVE = 'active'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_BLOCKED = 'blocked'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_BLOCKED, 'Blocked'),
    ]

    junior = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='works'
    )
    casino = models.ForeignKey('casinos.Casino', on_delete=models.CASCADE, related_name='works')
    card = models.ForeignKey('cash_management.Card', on_delete=models.CASCADE, related_name='works')
    deposit_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    casino_login = models.CharField(max_length=255, blank=True, default='')
    casino_password = models.CharField(max_length=255, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'works'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Work {self.pk} ({self.status})"

    def received_withdrawals(self):
        return [w for w in self.withdrawals.all() if w.status == WorkWithdrawal.STATUS_RECEIVED]

    @property
    def total_withdrawals(self):
        return sum((w.withdrawal_amount for w in self.received_withdrawals()), Decimal('0'))

    @property
    def total_profit(self):
        """Received amount minus the deposit, summed over received withdrawals."""
        return sum(
            (w.withdrawal_amount - self.deposit_amount for w in self.received_withdrawals()),
            Decimal('0')
        )


class WorkStatusHistory(models.Model):
    work = models.ForeignKey(Work, on_delete=models.CASCADE, related_name='status_history')
    old_status = models.CharField(max_length=20, blank=True, null=True)
    new_status = models.CharField(max_length=20)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='work_status_changes'
    )
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'work_status_history'
        ordering = ['-created_at', '-id']


class WorkWithdrawal(models.Model):
    """
    A withdrawal from a work. Status path:
    new -> waiting (team lead) -> received / problem / blocked (manager).
    """

    STATUS_NEW = 'new'
    STATUS_WAITING = 'waiting'
    STATUS_RECEIVED = 'received'
    STATUS_PROBLEM = 'problem'
    STATUS_BLOCKED = 'blocked'

    STATUS_CHOICES = [
        (STATUS_NEW, 'New'),
        (STATUS_WAITING, 'Waiting'),
        (STATUS_RECEIVED, 'Received'),
        (STATUS_PROBLEM, 'Problem'),
        (STATUS_BLOCKED, 'Blocked'),
    ]
    PENDING_STATUSES = (STATUS_NEW, STATUS_WAITING)

    work = models.ForeignKey(Work, on_delete=models.CASCADE, related_name='withdrawals')
    withdrawal_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True)

    comment = models.TextField(blank=True, default='')
    teamlead_comment = models.TextField(blank=True, null=True)
    manager_comment = models.TextField(blank=True, null=True)
    hr_comment = models.TextField(blank=True, null=True)
    cfo_comment = models.TextField(blank=True, null=True)
    admin_comment = models.TextField(blank=True, null=True)
    alarm_message = models.TextField(blank=True, null=True)

    checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='withdrawals_checked'
    )
    checked_at = models.DateTimeField(null=True, blank=True)
    checked_by_teamlead = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='withdrawals_checked_as_teamlead'
    )
    checked_by_hr = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='withdrawals_checked_as_hr'
    )
    checked_by_cfo = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='withdrawals_checked_as_cfo'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'work_withdrawals'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Withdrawal {self.pk} ({self.status})"

    @property
    def is_pending(self):
        return self.status in self.PENDING_STATUSES

    @property
    def junior(self):
        return self.work.junior


class WithdrawalStatusHistory(models.Model):
    withdrawal = models.ForeignKey(WorkWithdrawal, on_delete=models.CASCADE, related_name='status_history')
    old_status = models.CharField(max_length=20, blank=True, null=True)
    new_status = models.CharField(max_length=20)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='withdrawal_status_changes'
    )
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'withdrawal_status_history'
        ordering = ['-created_at', '-id']
