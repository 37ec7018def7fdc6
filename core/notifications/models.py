"""
Notification Models
In-app notifications delivered to users.
"""
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone


def default_expiry():
    return timezone.now() + timedelta(days=getattr(settings, 'NOTIFICATION_EXPIRY_DAYS', 30))


class NotificationQuerySet(models.QuerySet):

    def for_user(self, user):
        return self.filter(user=user)

    def not_expired(self):
        return self.filter(expires_at__gt=timezone.now())

    def unread(self):
        return self.filter(is_read=False)


class Notification(models.Model):
    """A message for one recipient"""

    PRIORITY_LOW = 'low'
    PRIORITY_NORMAL = 'normal'
    PRIORITY_HIGH = 'high'
    PRIORITY_URGENT = 'urgent'

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_NORMAL, 'Normal'),
        (PRIORITY_HIGH, 'High'),
        (PRIORITY_URGENT, 'Urgent'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications_sent'
    )
    type = models.CharField(max_length=50, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_NORMAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    action_url = models.CharField(max_length=500, null=True, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    show_sound = models.BooleanField(default=True)
    show_popup = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_expiry)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.type}: {self.title} -> {self.user_id}"
