from django.conf import settings
from django.db import models
from django.utils import timezone

from core.job_roles.core_config import ROLE_CHOICES


class Task(models.Model):
    """Work item assigned between staff; juniors' tasks carry their team lead."""

    STATUS_BACKLOG = 'backlog'
    STATUS_TODO = 'todo'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_REVIEW = 'review'
    STATUS_DONE = 'done'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_BACKLOG, 'Backlog'),
        (STATUS_TODO, 'To Do'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_REVIEW, 'Review'),
        (STATUS_DONE, 'Done'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    PRIORITY_LOW = 'low'
    PRIORITY_MEDIUM = 'medium'
    PRIORITY_HIGH = 'high'
    PRIORITY_URGENT = 'urgent'

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_MEDIUM, 'Medium'),
        (PRIORITY_HIGH, 'High'),
        (PRIORITY_URGENT, 'Urgent'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks'
    )
    team_lead = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_tasks'
    )
    parent_task = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subtasks'
    )
    template = models.ForeignKey(
        'TaskTemplate',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks'
    )
    task_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_BACKLOG, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=PRIORITY_MEDIUM)
    due_date = models.DateTimeField(null=True, blank=True)
    estimated_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    actual_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.title

    @property
    def is_overdue(self):
        return bool(self.due_date and self.due_date < timezone.now() and self.task_status != self.STATUS_DONE)

    def checklist_progress(self):
        items = list(self.checklist_items.all())
        total = len(items)
        completed = sum(1 for item in items if item.is_completed)
        return {
            'completed': completed,
            'total': total,
            'percentage': round(completed / total * 100, 2) if total else 0,
        }


class TaskComment(models.Model):
    TYPE_COMMENT = 'comment'
    TYPE_STATUS_CHANGE = 'status_change'
    TYPE_DELEGATION = 'delegation'

    TYPE_CHOICES = [
        (TYPE_COMMENT, 'Comment'),
        (TYPE_STATUS_CHANGE, 'Status change'),
        (TYPE_DELEGATION, 'Delegation'),
    ]

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='task_comments'
    )
    content = models.TextField()
    comment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_COMMENT)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'task_comments'
        ordering = ['created_at', 'id']


class TaskChecklistItem(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='checklist_items')
    title = models.CharField(max_length=255)
    is_completed = models.BooleanField(default=False)
    order_index = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task_checklist'
        ordering = ['order_index', 'id']

    def __str__(self):
        return self.title


class TaskTemplate(models.Model):
    """Reusable task blueprint: default fields plus a checklist copied onto each task."""

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, db_index=True)
    target_role = models.CharField(max_length=20, choices=ROLE_CHOICES, blank=True, null=True)
    estimated_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    default_priority = models.CharField(max_length=10, choices=Task.PRIORITY_CHOICES, default=Task.PRIORITY_MEDIUM)
    checklist_items = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    auto_assign = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='task_templates'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task_templates'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.title
