from decimal import Decimal

from django.conf import settings
from django.db import models

from Finance.currency.services import CURRENCY_CHOICES


class PayPalAccount(models.Model):
    """A PayPal account a junior registered and works through."""

    STATUS_ACTIVE = 'active'
    STATUS_BLOCKED = 'blocked'
    STATUS_LIMITED = 'limited'
    STATUS_INACTIVE = 'inactive'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_BLOCKED, 'Blocked'),
        (STATUS_LIMITED, 'Limited'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='paypal_accounts'
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    password = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32)
    authenticator_url = models.CharField(max_length=500)
    date_created = models.DateField(null=True, blank=True)
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    sender_paypal_email = models.EmailField(blank=True, null=True)
    balance_send = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    info = models.TextField(blank=True, default='')
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='GBP')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'paypal_accounts'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.name} <{self.email}>"


class PayPalWork(models.Model):
    """A deposit at a casino funded from a PayPal account."""

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

    # Withdrawals above this multiple of the deposit are rejected
    MAX_WITHDRAWAL_MULTIPLIER = 10

    junior = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='paypal_works'
    )
    paypal_account = models.ForeignKey(PayPalAccount, on_delete=models.CASCADE, related_name='works')
    casino = models.ForeignKey('casinos.Casino', on_delete=models.CASCADE, related_name='paypal_works')
    casino_email = models.CharField(max_length=255)
    casino_password = models.CharField(max_length=255)
    deposit_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'paypal_works'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"PayPal work {self.pk} at {self.casino_id}"


class PayPalWithdrawal(models.Model):
    """
    Withdrawal from a PayPal work. Uses the same status vocabulary as card
    work withdrawals; manager and team lead decisions are kept separately.
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

    work = models.ForeignKey(PayPalWork, on_delete=models.CASCADE, related_name='withdrawals')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='paypal_withdrawals'
    )
    paypal_account = models.ForeignKey(PayPalAccount, on_delete=models.CASCADE, related_name='withdrawals')
    casino = models.ForeignKey('casinos.Casino', on_delete=models.CASCADE, related_name='paypal_withdrawals')
    withdrawal_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True)
    manager_status = models.CharField(max_length=20, choices=STATUS_CHOICES, null=True, blank=True)
    teamlead_status = models.CharField(max_length=20, choices=STATUS_CHOICES, null=True, blank=True)

    comment = models.TextField(blank=True, default='')
    manager_comment = models.TextField(blank=True, null=True)
    teamlead_comment = models.TextField(blank=True, null=True)
    hr_comment = models.TextField(blank=True, null=True)
    cfo_comment = models.TextField(blank=True, null=True)
    admin_comment = models.TextField(blank=True, null=True)

    checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='paypal_withdrawals_checked'
    )
    checked_at = models.DateTimeField(null=True, blank=True)
    checked_by_teamlead = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='paypal_withdrawals_checked_as_teamlead'
    )
    checked_by_hr = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='paypal_withdrawals_checked_as_hr'
    )
    checked_by_cfo = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='paypal_withdrawals_checked_as_cfo'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'paypal_withdrawals'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"PayPal withdrawal {self.pk} ({self.status})"

    @property
    def is_pending(self):
        return self.status in self.PENDING_STATUSES

    @property
    def profit(self):
        return self.withdrawal_amount - self.work.deposit_amount


class PayPalOperation(models.Model):
    """A money movement on a PayPal account, logged by the junior who made it."""

    TYPE_SEND_MONEY = 'send_money'
    TYPE_RECEIVE_MONEY = 'receive_money'
    TYPE_WITHDRAW_TO_CARD = 'withdraw_to_card'
    TYPE_DEPOSIT_FROM_CARD = 'deposit_from_card'
    TYPE_CASINO_DEPOSIT = 'casino_deposit'
    TYPE_CASINO_WITHDRAWAL = 'casino_withdrawal'

    TYPE_CHOICES = [
        (TYPE_SEND_MONEY, 'Send money'),
        (TYPE_RECEIVE_MONEY, 'Receive money'),
        (TYPE_WITHDRAW_TO_CARD, 'Withdraw to card'),
        (TYPE_DEPOSIT_FROM_CARD, 'Deposit from card'),
        (TYPE_CASINO_DEPOSIT, 'Casino deposit'),
        (TYPE_CASINO_WITHDRAWAL, 'Casino withdrawal'),
    ]
    # Operations that take money out of the account
    DEBIT_TYPES = (TYPE_SEND_MONEY, TYPE_WITHDRAW_TO_CARD, TYPE_CASINO_DEPOSIT)

    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    paypal_account = models.ForeignKey(PayPalAccount, on_delete=models.CASCADE, related_name='operations')
    junior = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='paypal_operations'
    )
    operation_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    recipient_paypal_email = models.EmailField(blank=True, null=True)
    recipient_card_number = models.CharField(max_length=32, blank=True, null=True)
    casino_name = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    description = models.TextField(blank=True, null=True)
    transaction_id = models.CharField(max_length=255, blank=True, null=True)
    fee_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'paypal_operations'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.operation_type} {self.amount} {self.currency} ({self.status})"

    @property
    def is_debit(self):
        return self.operation_type in self.DEBIT_TYPES
