from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.base.models import AuditMixin
from Finance.currency.services import CURRENCY_CHOICES


# ==================== CASINO ====================

class Casino(AuditMixin):
    """
    A casino under evaluation. Testers move it from ``new`` through
    ``testing`` to ``approved`` or ``rejected``; juniors only work approved ones.
    """

    STATUS_NEW = 'new'
    STATUS_TESTING = 'testing'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_MAINTENANCE = 'maintenance'
    STATUS_BLOCKED = 'blocked'

    STATUS_CHOICES = [
        (STATUS_NEW, 'New'),
        (STATUS_TESTING, 'Testing'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_MAINTENANCE, 'Maintenance'),
        (STATUS_BLOCKED, 'Blocked'),
    ]

    WITHDRAWAL_TIME_UNITS = [
        ('instant', 'Instant'),
        ('minutes', 'Minutes'),
        ('hours', 'Hours'),
        ('days', 'Days'),
    ]

    name = models.CharField(max_length=255)
    url = models.URLField(max_length=500)
    promo = models.CharField(max_length=255, blank=True, null=True)
    company = models.CharField(max_length=255, blank=True, null=True)
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='USD')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True)
    allowed_bins = models.JSONField(default=list, blank=True)
    auto_approve_limit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('100'))
    withdrawal_time_value = models.PositiveIntegerField(default=0)
    withdrawal_time_unit = models.CharField(max_length=10, choices=WITHDRAWAL_TIME_UNITS, default='instant')
    notes = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'casinos'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name

    def has_active_test(self):
        return self.tests.filter(status__in=CasinoTest.ACTIVE_STATUSES).exists()


# ==================== TESTER WORK ====================

class CasinoTest(models.Model):
    """A tester's evaluation of one casino, optionally played with a card."""

    STATUS_PENDING = 'pending'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS)

    RESULT_APPROVED = 'approved'
    RESULT_REJECTED = 'rejected'
    RESULT_CHOICES = [
        (RESULT_APPROVED, 'Approved'),
        (RESULT_REJECTED, 'Rejected'),
    ]

    casino = models.ForeignKey(Casino, on_delete=models.CASCADE, related_name='tests')
    tester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='casino_tests'
    )
    card = models.ForeignKey(
        'cash_management.Card',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='casino_tests'
    )
    test_type = models.CharField(max_length=20, default='full')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    test_result = models.CharField(max_length=20, choices=RESULT_CHOICES, null=True, blank=True)
    rating = models.PositiveSmallIntegerField(null=True, blank=True)

    login = models.CharField(max_length=255, blank=True, default='')
    password = models.CharField(max_length=255, blank=True, default='')
    deposit_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    deposit_success = models.BooleanField(null=True, blank=True)
    withdrawal_success = models.BooleanField(null=True, blank=True)
    registration_time = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    withdrawal_time = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes")
    issues_found = models.JSONField(default=list, blank=True)
    recommended_bins = models.JSONField(default=list, blank=True)
    test_notes = models.TextField(blank=True, default='')
    final_report = models.TextField(blank=True, default='')

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'casino_tests'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Test {self.pk} of {self.casino_id} by {self.tester_id}"

    def latest_withdrawal(self):
        return self.withdrawals.order_by('-requested_at', '-id').first()

    def complete(self, test_result):
        """Close the test and carry its result onto the casino."""
        self.status = self.STATUS_COMPLETED
        self.test_result = test_result
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'test_result', 'completed_at', 'updated_at'])
        self.casino.status = test_result if test_result in (self.RESULT_APPROVED, self.RESULT_REJECTED) else Casino.STATUS_NEW
        self.casino.save(update_fields=['status', 'updated_at'])


class TestWithdrawal(models.Model):
    """A withdrawal a tester requested while testing a casino."""

    STATUS_NEW = 'new'
    STATUS_WAITING = 'waiting'
    STATUS_RECEIVED = 'received'
    STATUS_BLOCKED = 'blocked'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_NEW, 'New'),
        (STATUS_WAITING, 'Waiting'),
        (STATUS_RECEIVED, 'Received'),
        (STATUS_BLOCKED, 'Blocked'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    PENDING_STATUSES = (STATUS_NEW, STATUS_WAITING)
    TESTER_STATUSES = (STATUS_NEW, STATUS_WAITING, STATUS_RECEIVED, STATUS_BLOCKED)

    test = models.ForeignKey(CasinoTest, on_delete=models.CASCADE, related_name='withdrawals')
    withdrawal_amount = models.DecimalField(max_digits=14, decimal_places=2)
    withdrawal_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True)
    notes = models.TextField(blank=True, default='')
    manager_comment = models.TextField(blank=True, default='')
    checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='test_withdrawals_checked'
    )
    checked_at = models.DateTimeField(null=True, blank=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'test_withdrawals'
        ordering = ['-requested_at', '-id']

    def __str__(self):
        return f"Test withdrawal {self.pk} ({self.withdrawal_status})"

    @property
    def is_pending(self):
        return self.withdrawal_status in self.PENDING_STATUSES


# ==================== ASSIGNMENTS ====================

class CardCasinoAssignment(models.Model):
    """A card reserved for one casino, for testing or for work."""

    TYPE_TESTING = 'testing'
    TYPE_WORK = 'work'
    TYPE_CHOICES = [
        (TYPE_TESTING, 'Testing'),
        (TYPE_WORK, 'Work'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    card = models.ForeignKey(
        'cash_management.Card',
        on_delete=models.CASCADE,
        related_name='casino_assignments'
    )
    casino = models.ForeignKey(Casino, on_delete=models.CASCADE, related_name='card_assignments')
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='card_casino_assignments_made'
    )
    assignment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_TESTING)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    deposit_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    assigned_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'card_casino_assignments'
        ordering = ['-assigned_at', '-id']

    def __str__(self):
        return f"Card {self.card_id} -> casino {self.casino_id} ({self.status})"


class JuniorCasinoAssignment(models.Model):
    """Allows a junior to work a casino (required for PayPal works)."""

    STATUS_ACTIVE = 'active'
    STATUS_INACTIVE = 'inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    junior = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='junior_casino_assignments'
    )
    casino = models.ForeignKey(Casino, on_delete=models.CASCADE, related_name='junior_assignments')
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='junior_casino_assignments_made'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    notes = models.TextField(blank=True, default='')
    assigned_at = models.DateTimeField(auto_now_add=True)
    ended_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'junior_casino_assignments'
        ordering = ['-assigned_at', '-id']

    def __str__(self):
        return f"Junior {self.junior_id} -> casino {self.casino_id} ({self.status})"
