"""
Task creation, access rules and analytics.
"""
from datetime import datetime, time

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.job_roles.core_config import Roles
from .models import Task, TaskChecklistItem

TIME_RANGES = {
    '1month': 1,
    '3months': 3,
    '6months': 6,
    '1year': 12,
}
DEFAULT_TIME_RANGE = '3months'


def checklist_title(entry):
    if isinstance(entry, dict):
        return (entry.get('title') or entry.get('text') or '').strip()
    return str(entry).strip()


@transaction.atomic
def create_task(creator, title, assignee=None, checklist=(), **fields):
    """
    Create a task with its checklist.

    A junior assignee's team lead is copied onto the task; blank checklist
    entries are skipped and the rest keep their order.
    """
    task = Task.objects.create(
        title=title,
        assignee=assignee,
        created_by=creator,
        team_lead_id=assignee.team_lead_id if assignee and assignee.role == Roles.JUNIOR else None,
        **fields
    )
    titles = [checklist_title(entry) for entry in checklist or []]
    TaskChecklistItem.objects.bulk_create([
        TaskChecklistItem(task=task, title=item, order_index=index)
        for index, item in enumerate(t for t in titles if t)
    ])
    return task


def can_view_task(user, task):
    """Creator, assignee, team leads for juniors' tasks, manager, HR and admin."""
    if user.pk in (task.created_by_id, task.assignee_id):
        return True
    if user.role == Roles.TEAMLEAD and task.assignee is not None and task.assignee.role == Roles.JUNIOR:
        return True
    return user.role in (Roles.MANAGER, Roles.HR, Roles.ADMIN)


def visible_tasks(user, queryset):
    """Narrow ``queryset`` to the tasks ``can_view_task`` lets ``user`` open."""
    if user.role in (Roles.MANAGER, Roles.HR, Roles.ADMIN):
        return queryset
    rule = Q(created_by=user) | Q(assignee=user)
    if user.role == Roles.TEAMLEAD:
        rule |= Q(assignee__role=Roles.JUNIOR)
    return queryset.filter(rule)


def can_update_task(user, task):
    """Creator, assignee, the assignee's team lead, manager and admin."""
    if user.pk in (task.created_by_id, task.assignee_id):
        return True
    if user.role == Roles.TEAMLEAD and task.assignee is not None and task.assignee.team_lead_id == user.pk:
        return True
    return user.role in (Roles.MANAGER, Roles.ADMIN)


def can_view_checklist(user, task):
    if user.pk in (task.created_by_id, task.assignee_id):
        return True
    return user.role in (Roles.MANAGER, Roles.TEAMLEAD, Roles.HR, Roles.ADMIN)


def can_update_checklist(user, task):
    if user.pk in (task.created_by_id, task.assignee_id):
        return True
    return user.role in (Roles.MANAGER, Roles.TEAMLEAD, Roles.ADMIN)


def monthly_trends(time_range=DEFAULT_TIME_RANGE, today=None):
    """
    Created and completed task counts per calendar month, newest month first.

    Completed tasks are counted in the month of their ``completed_at``.
    """
    months = TIME_RANGES.get(time_range, TIME_RANGES[DEFAULT_TIME_RANGE])
    today = today or timezone.localdate()
    first_of_month = today.replace(day=1)
    tz = timezone.get_current_timezone()

    trends = []
    for offset in range(months):
        month_start = first_of_month - relativedelta(months=offset)
        start = timezone.make_aware(datetime.combine(month_start, time.min), tz)
        end = timezone.make_aware(datetime.combine(month_start + relativedelta(months=1), time.min), tz)

        created = Task.objects.filter(created_at__gte=start, created_at__lt=end).count()
        completed = Task.objects.filter(
            task_status=Task.STATUS_DONE, completed_at__gte=start, completed_at__lt=end
        ).count()

        trends.append({
            'month': month_start.strftime('%B %Y'),
            'month_date': start.isoformat(),
            'created_tasks': created,
            'completed_tasks': completed,
            'completion_rate': round(completed / created * 100, 2) if created else 0,
        })
    return trends
