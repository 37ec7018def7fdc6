from django.db import models
from django.conf import settings


class AuditMixin(models.Model):
    """
    Adds audit fields to track creation and modification metadata.

    Fields:
        - created_at: Timestamp when record was created
        - updated_at: Timestamp when record was last modified
        - created_by: User who created the record (optional)
        - updated_by: User who last modified the record (optional)

    Usage:
        class Casino(AuditMixin):
            name = models.CharField(max_length=255)

    Note: created_by and updated_by are set in views/serializers from request.user.
    """
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last modified"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created',
        help_text="User who created this record"
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_updated',
        help_text="User who last updated this record"
    )

    class Meta:
        abstract = True


class ActiveFlagMixin(models.Model):
    """
    Mixin for models switched on and off with an ``is_active`` flag.

    Instead of permanently deleting records, they are marked as inactive.

    Methods:
        - deactivate(user): Marks record as inactive
        - activate(user): Marks record as active again
    """
    is_active = models.BooleanField(
        default=True,
        help_text="Set to False instead of deleting."
    )

    class Meta:
        abstract = True

    def deactivate(self, user=None):
        """Soft delete: mark as inactive instead of removing from DB."""
        self.is_active = False
        if user is not None and hasattr(self, 'updated_by'):
            self.updated_by = user
        self.save()

    def activate(self, user=None):
        """Reactivate a soft-deleted record."""
        self.is_active = True
        if user is not None and hasattr(self, 'updated_by'):
            self.updated_by = user
        self.save()
