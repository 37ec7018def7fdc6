"""
Action History Models
Audit trail of business operations (who changed what, from where).
"""
from django.db import models
from django.conf import settings


class ActionHistory(models.Model):
    """One audited operation on a business entity"""
    action_type = models.CharField(max_length=64, db_index=True)
    entity_type = models.CharField(max_length=64, db_index=True)
    entity_id = models.CharField(max_length=64, blank=True, default='')
    entity_name = models.CharField(max_length=255, blank=True, default='')
    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)
    change_description = models.TextField(blank=True, default='')
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='actions_performed'
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'action_history'
        verbose_name = 'Action History Entry'
        verbose_name_plural = 'Action History'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='action_hist_entity_idx'),
        ]

    def __str__(self):
        return f"{self.action_type} {self.entity_type}:{self.entity_id}"
