from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

from core.base.managers import ActiveManager
from core.base.models import AuditMixin, ActiveFlagMixin
from Finance.currency.services import CURRENCY_CHOICES


def min_card_balance():
    """Balance below which an account's cards are not usable."""
    return Decimal(str(getattr(settings, 'CARD_MIN_BALANCE', 10)))


# ==================== BANK MODEL ====================

class Bank(AuditMixin, ActiveFlagMixin):
    """
    Master data for banks (top of the hierarchy).
    Accounts hang off a bank; cards hang off an account.
    """

    name = models.CharField(max_length=255, unique=True, help_text="Bank name")
    country = models.CharField(max_length=100, blank=True, null=True)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    notes = models.TextField(blank=True, default='')

    objects = ActiveManager()

    class Meta:
        db_table = 'banks'
        verbose_name = 'Bank'
        verbose_name_plural = 'Banks'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name

    # ==================== HELPER METHODS ====================

    def get_cards(self):
        return Card.objects.filter(bank_account__bank=self)

    def has_active_works(self):
        """True when any card of any account is used by an active work."""
        return self.get_cards().filter(works__status='active').exists()

    @transaction.atomic
    def deactivate(self, user=None):
        """
        Deactivate the bank together with its accounts, and block their cards.

        Returns:
            dict: Summary of what was switched off
        """
        super().deactivate(user)
        accounts_count = self.accounts.active().update(is_active=False)
        cards_count = self.get_cards().exclude(status=Card.STATUS_BLOCKED).update(status=Card.STATUS_BLOCKED)
        return {
            'bank': self.name,
            'status': 'deactivated',
            'accounts_deactivated': accounts_count,
            'cards_blocked': cards_count,
        }


# ==================== BANK ACCOUNT MODEL ====================

class BankAccount(AuditMixin, ActiveFlagMixin):
    """
    An account held at a bank; its balance decides whether its cards are usable.
    """

    bank = models.ForeignKey(
        Bank,
        on_delete=models.CASCADE,
        related_name='accounts',
        help_text="Bank where the account is held"
    )
    holder_name = models.CharField(max_length=255, help_text="Name on the account")
    account_number = models.CharField(max_length=64, blank=True, null=True)
    sort_code = models.CharField(max_length=32, blank=True, null=True)
    bank_url = models.CharField(max_length=500, blank=True, null=True)
    login_password = models.CharField(max_length=255, blank=True, null=True)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    balance_updated_at = models.DateTimeField(null=True, blank=True)
    balance_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='balances_updated'
    )
    notes = models.TextField(blank=True, default='')

    objects = ActiveManager()

    class Meta:
        db_table = 'bank_accounts'
        verbose_name = 'Bank Account'
        verbose_name_plural = 'Bank Accounts'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.holder_name} ({self.bank.name})"

    # ==================== HELPER METHODS ====================

    @property
    def cards_available(self):
        return self.balance >= min_card_balance()

    def has_active_works(self):
        return self.cards.filter(works__status='active').exists()

    def sync_card_statuses(self):
        """
        Move usable cards between active and low_balance to follow the balance.
        Blocked and inactive cards are left alone.
        """
        if self.cards_available:
            return self.cards.filter(status=Card.STATUS_LOW_BALANCE).update(status=Card.STATUS_ACTIVE)
        return self.cards.filter(status=Card.STATUS_ACTIVE).update(status=Card.STATUS_LOW_BALANCE)

    @transaction.atomic
    def set_balance(self, new_balance, user=None, reason='', ip_address=None, user_agent=''):
        """
        Set the balance, record the change and update card statuses.

        Args:
            new_balance: Decimal-compatible value >= 0
            user: User performing the change
            reason: Free text stored in the balance history

        Returns:
            BankBalanceHistory: The recorded change
        """
        new_balance = Decimal(str(new_balance))
        old_balance = self.balance

        self.balance = new_balance
        self.balance_updated_at = timezone.now()
        self.balance_updated_by = user
        if user is not None:
            self.updated_by = user
        self.save()

        entry = BankBalanceHistory.objects.create(
            bank_account=self,
            old_balance=old_balance,
            new_balance=new_balance,
            change_amount=new_balance - old_balance,
            change_reason=reason or '',
            changed_by=user,
            ip_address=ip_address,
            user_agent=user_agent or '',
        )
        self.sync_card_statuses()
        return entry

    @transaction.atomic
    def deactivate(self, user=None):
        """Archive the account and block its cards."""
        super().deactivate(user)
        return self.cards.exclude(status=Card.STATUS_BLOCKED).update(status=Card.STATUS_BLOCKED)

    @transaction.atomic
    def activate(self, user=None):
        """Restore the account; blocked cards come back when the balance allows."""
        super().activate(user)
        if self.cards_available:
            return self.cards.filter(status=Card.STATUS_BLOCKED).update(status=Card.STATUS_ACTIVE)
        return 0


class BankBalanceHistory(models.Model):
    """One balance change of a bank account"""
    bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.CASCADE,
        related_name='balance_history'
    )
    old_balance = models.DecimalField(max_digits=14, decimal_places=2)
    new_balance = models.DecimalField(max_digits=14, decimal_places=2)
    change_amount = models.DecimalField(max_digits=14, decimal_places=2)
    change_reason = models.TextField(blank=True, default='')
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='balance_changes'
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bank_balance_history'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.bank_account_id}: {self.old_balance} -> {self.new_balance}"


# ==================== CARD MODELS ====================

class Card(models.Model):
    """
    A payment card issued on a bank account.
    Only the mask and BIN are stored here; the full number lives in CardSecret.
    """

    TYPE_GREY = 'grey'
    TYPE_PINK = 'pink'

    CARD_TYPE_CHOICES = [
        (TYPE_GREY, 'Grey'),
        (TYPE_PINK, 'Pink'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_LOW_BALANCE = 'low_balance'
    STATUS_BLOCKED = 'blocked'
    STATUS_INACTIVE = 'inactive'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_LOW_BALANCE, 'Low Balance'),
        (STATUS_BLOCKED, 'Blocked'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    bank_account = models.ForeignKey(
        BankAccount,
        on_delete=models.CASCADE,
        related_name='cards'
    )
    card_number_mask = models.CharField(max_length=32, unique=True)
    card_bin = models.CharField(max_length=8)
    card_type = models.CharField(max_length=10, choices=CARD_TYPE_CHOICES, default=TYPE_GREY)
    exp_month = models.PositiveSmallIntegerField()
    exp_year = models.PositiveSmallIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    daily_limit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_cards'
    )
    assigned_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cards'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.card_number_mask

    @staticmethod
    def mask_number(card_number):
        """'4111111111111111' -> '4111****1111'"""
        return f"{card_number[:4]}****{card_number[-4:]}"

    @staticmethod
    def bin_of(card_number):
        return card_number[:8]

    @classmethod
    def initial_status_for(cls, bank_account):
        return cls.STATUS_ACTIVE if bank_account.cards_available else cls.STATUS_LOW_BALANCE

    def has_active_works(self):
        return self.works.filter(status='active').exists()

    def assign_to(self, user):
        self.assigned_to = user
        self.assigned_at = timezone.now() if user is not None else None
        self.save(update_fields=['assigned_to', 'assigned_at', 'updated_at'])


class CardSecret(models.Model):
    """Full card number and CVV, read only through the reveal endpoint"""
    card = models.OneToOneField(Card, on_delete=models.CASCADE, related_name='secret')
    pan = models.CharField(max_length=19)
    cvv = models.CharField(max_length=4)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'card_secrets'

    def __str__(self):
        return f"Secret for {self.card_id}"


class CardAccessLog(models.Model):
    """Every attempt to reveal a card's secrets"""

    ACCESS_REVEAL_ATTEMPT = 'reveal_attempt'
    ACCESS_REVEAL_SUCCESS = 'reveal_success'

    card = models.ForeignKey(Card, on_delete=models.CASCADE, related_name='access_logs')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='card_access_logs'
    )
    access_type = models.CharField(max_length=32)
    success = models.BooleanField(default=False)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default='')
    context = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'card_access_log'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.access_type} {self.card_id} by {self.user_id}"


# ==================== BANK ASSIGNMENT MODEL ====================

class BankTeamleadAssignment(models.Model):
    """A bank handed to a team lead for issuing cards; one active lead per bank."""

    bank = models.ForeignKey(Bank, on_delete=models.CASCADE, related_name='teamlead_assignments')
    teamlead = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bank_assignments'
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bank_assignments_made'
    )
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, null=True)
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bank_teamlead_assignments'
        ordering = ['-assigned_at', '-id']

    def __str__(self):
        return f"{self.bank_id} -> {self.teamlead_id}"
