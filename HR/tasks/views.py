"""
Task views: CRUD, delegation, checklists, templates and monthly trends.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.action_history.services import log_action
from core.job_roles.core_config import Roles, UserStatus
from core.job_roles.decorators import require_roles, require_method_roles, require_active_user
from core.notifications.services import notify_task_assigned
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from . import services
from .models import Task, TaskComment, TaskChecklistItem, TaskTemplate
from .serializers import (
    TaskSerializer,
    TaskCreateSerializer,
    TaskUpdateSerializer,
    TaskCommentSerializer,
    TaskChecklistItemSerializer,
    TaskTemplateSerializer,
    TaskFromTemplateSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()

TASK_CREATE_ROLES = [Roles.CEO, Roles.CFO, Roles.MANAGER, Roles.HR, Roles.ADMIN, Roles.TEAMLEAD]
DELEGATE_ROLES = (Roles.TEAMLEAD, Roles.MANAGER, Roles.ADMIN)
TEMPLATE_ROLES = (Roles.ADMIN, Roles.MANAGER, Roles.HR, Roles.TESTER)


def _tasks_queryset():
    return Task.objects.select_related(
        'assignee', 'created_by', 'team_lead', 'parent_task'
    ).prefetch_related('comments', 'checklist_items')


def _denied(details='Access denied'):
    return error_response('Access denied', details=details, status_code=status.HTTP_403_FORBIDDEN)


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': None,
    'POST': TASK_CREATE_ROLES,
})
@auto_paginate
def tasks_handler(request):
    """
    GET /hr/tasks/
    - Query: assignee_id, status, priority, my_tasks=true

    POST /hr/tasks/
    - Request body: { "title", "description", "assignee_id", "priority",
                      "due_date", "estimated_hours", "parent_task_id",
                      "tags", "checklist": ["step", ...] }
    """
    user = request.user

    if request.method == 'GET':
        params = request.query_params
        queryset = services.visible_tasks(user, _tasks_queryset())
        if params.get('assignee_id'):
            queryset = queryset.filter(assignee_id=params['assignee_id'])
        if params.get('status'):
            queryset = queryset.filter(task_status=params['status'])
        if params.get('priority'):
            queryset = queryset.filter(priority=params['priority'])
        if params.get('my_tasks') == 'true':
            queryset = queryset.filter(assignee=user)
        return Response(TaskSerializer(queryset, many=True).data)

    serializer = TaskCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    assignee = None
    if data.get('assignee_id'):
        assignee = get_object_or_404(User, pk=data['assignee_id'])
    parent = None
    if data.get('parent_task_id'):
        parent = get_object_or_404(Task, pk=data['parent_task_id'])

    task = services.create_task(
        user,
        data['title'],
        assignee=assignee,
        checklist=data.get('checklist'),
        description=(data.get('description') or '').strip() or None,
        parent_task=parent,
        priority=data['priority'],
        due_date=data.get('due_date'),
        estimated_hours=data.get('estimated_hours'),
        tags=data.get('tags') or [],
    )

    notify_task_assigned(task, sender=user)
    log_action(
        request, 'task_created', 'task', task.pk, task.title,
        new_values={'assignee_id': task.assignee_id, 'priority': task.priority},
    )
    logger.info("Task %s created by %s for %s", task.pk, user.email, task.assignee_id)

    task = _tasks_queryset().get(pk=task.pk)
    return Response(
        {
            'success': True,
            'task': TaskSerializer(task).data,
            'message': f'Task "{task.title}" created',
        },
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_active_user
def task_detail(request, task_id):
    """
    GET /hr/tasks/{id}/
    PATCH /hr/tasks/{id}/
    - Allowed fields: title, description, task_status, priority, due_date,
      estimated_hours, actual_hours, tags
    DELETE /hr/tasks/{id}/
    - Creator or admin; done tasks are kept
    """
    task = get_object_or_404(_tasks_queryset(), pk=task_id)
    user = request.user

    if request.method == 'GET':
        if not services.can_view_task(user, task):
            return _denied()
        return Response({
            'success': True,
            'task': TaskSerializer(task).data,
            'comments': TaskCommentSerializer(task.comments.all(), many=True).data,
        })

    if request.method == 'DELETE':
        if user.pk != task.created_by_id and user.role != Roles.ADMIN:
            return _denied('Only the creator or an admin can delete a task')
        if task.task_status == Task.STATUS_DONE:
            return error_response('Completed tasks cannot be deleted')
        log_action(request, 'task_deleted', 'task', task.pk, task.title)
        task.delete()
        return Response({'success': True, 'message': 'Task deleted'})

    if not services.can_update_task(user, task):
        return _denied()

    serializer = TaskUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    old_status = task.task_status
    with transaction.atomic():
        for field, value in data.items():
            setattr(task, field, value)
        new_status = task.task_status
        if new_status != old_status:
            task.completed_at = timezone.now() if new_status == Task.STATUS_DONE else None
            TaskComment.objects.create(
                task=task,
                user=user,
                content=f'Status changed from "{old_status}" to "{new_status}"',
                comment_type=TaskComment.TYPE_STATUS_CHANGE,
            )
        task.save()

    if new_status != old_status:
        log_action(
            request, 'task_status_changed', 'task', task.pk, task.title,
            old_values={'task_status': old_status},
            new_values={'task_status': new_status},
        )

    task = _tasks_queryset().get(pk=task.pk)
    return Response({
        'success': True,
        'task': TaskSerializer(task).data,
        'message': 'Task updated',
    })


@api_view(['POST'])
@require_active_user
def task_delegate(request, task_id):
    """
    POST /hr/tasks/{id}/delegate/
    - Request body: { "assignee_id": 5, "due_date": "...", "notes": "..." }
    """
    user = request.user
    assignee_id = request.data.get('assignee_id')
    if not assignee_id:
        return error_response('Assignee is required')

    task = get_object_or_404(Task, pk=task_id)
    if user.pk != task.created_by_id and user.role not in DELEGATE_ROLES:
        return _denied()

    assignee = User.objects.filter(pk=assignee_id).first()
    if assignee is None or assignee.status != UserStatus.ACTIVE:
        return error_response('Invalid assignee')
    if user.role == Roles.TEAMLEAD and assignee.team_lead_id != user.pk:
        return _denied('Team Lead can only delegate to their own juniors')

    old_assignee_id = task.assignee_id
    with transaction.atomic():
        task.assignee = assignee
        task.team_lead_id = assignee.team_lead_id if assignee.role == Roles.JUNIOR else None
        if request.data.get('due_date'):
            task.due_date = request.data['due_date']
        if task.task_status == Task.STATUS_BACKLOG:
            task.task_status = Task.STATUS_TODO
        task.save()

        notes = (request.data.get('notes') or '').strip()
        if notes:
            TaskComment.objects.create(
                task=task,
                user=user,
                content=f'Task delegated: {notes}',
                comment_type=TaskComment.TYPE_DELEGATION,
            )

    notify_task_assigned(task, sender=user)
    log_action(
        request, 'task_delegated', 'task', task.pk, task.title,
        old_values={'assignee_id': old_assignee_id},
        new_values={'assignee_id': assignee.pk},
    )

    task = _tasks_queryset().get(pk=task.pk)
    return Response({
        'success': True,
        'task': TaskSerializer(task).data,
        'message': f'Task delegated to {assignee.first_name or assignee.email}',
    })


@api_view(['GET'])
@require_active_user
def task_checklist(request, task_id):
    """GET /hr/tasks/{id}/checklist/ - items ordered by order_index"""
    task = get_object_or_404(Task, pk=task_id)
    if not services.can_view_checklist(request.user, task):
        return _denied()
    return Response({
        'success': True,
        'checklist': TaskChecklistItemSerializer(task.checklist_items.all(), many=True).data,
    })


@api_view(['PATCH'])
@require_active_user
def checklist_item_detail(request, item_id):
    """
    PATCH /hr/tasks/checklist/{id}/
    - Request body: { "is_completed": true }
    """
    item = get_object_or_404(TaskChecklistItem.objects.select_related('task'), pk=item_id)
    if not services.can_update_checklist(request.user, item.task):
        return _denied()
    if item.task.task_status == Task.STATUS_DONE:
        return error_response('Cannot modify checklist of completed tasks')

    is_completed = request.data.get('is_completed')
    if not isinstance(is_completed, bool):
        return error_response('is_completed must be true or false')

    item.is_completed = is_completed
    item.save(update_fields=['is_completed', 'updated_at'])
    return Response({
        'success': True,
        'item': TaskChecklistItemSerializer(item).data,
        'message': 'Checklist item updated',
    })


@api_view(['GET'])
@require_roles(Roles.ADMIN, Roles.MANAGER, Roles.CFO)
def task_trends(request):
    """
    GET /hr/analytics/trends/
    - Query: time_range = 1month | 3months | 6months | 1year
    """
    time_range = request.query_params.get('time_range')
    if time_range not in services.TIME_RANGES:
        time_range = services.DEFAULT_TIME_RANGE
    return Response({
        'success': True,
        'time_range': time_range,
        'trends': services.monthly_trends(time_range),
    })


@api_view(['GET', 'POST'])
@require_roles(*TEMPLATE_ROLES)
@auto_paginate
def task_templates_handler(request):
    """
    GET /hr/task-templates/
    - Active templates only; query: category, role

    POST /hr/task-templates/
    - Request body: { "title", "category", "description", "target_role",
                      "estimated_hours", "default_priority",
                      "checklist_items": ["step", ...], "tags", "auto_assign" }
    """
    if request.method == 'GET':
        queryset = TaskTemplate.objects.select_related('created_by').filter(is_active=True)
        category = request.query_params.get('category') or 'all'
        role = request.query_params.get('role') or 'all'
        if category != 'all':
            queryset = queryset.filter(category=category)
        if role != 'all':
            queryset = queryset.filter(target_role=role)
        return Response(TaskTemplateSerializer(queryset, many=True).data)

    if not (request.data.get('title') or '').strip() or not request.data.get('category'):
        return error_response('Title and category are required')

    serializer = TaskTemplateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save(created_by=request.user)

    log_action(
        request, 'task_template_created', 'task_template', template.pk, template.title,
        new_values={'category': template.category},
    )
    return Response(
        {
            'success': True,
            'template': TaskTemplateSerializer(template).data,
            'message': 'Task template created',
        },
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH'])
@require_active_user
def task_template_detail(request, template_id):
    """
    GET /hr/task-templates/{id}/
    PATCH /hr/task-templates/{id}/
    - Creator or admin; any template field, including is_active
    """
    template = get_object_or_404(TaskTemplate.objects.select_related('created_by'), pk=template_id)
    user = request.user

    if request.method == 'GET':
        if user.role not in TEMPLATE_ROLES:
            return _denied()
        return Response({'success': True, 'template': TaskTemplateSerializer(template).data})

    if user.pk != template.created_by_id and user.role != Roles.ADMIN:
        return _denied('Only the creator or an admin can edit a template')

    serializer = TaskTemplateSerializer(template, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save()

    log_action(
        request, 'task_template_updated', 'task_template', template.pk, template.title,
        new_values={'is_active': template.is_active},
    )
    return Response({
        'success': True,
        'template': TaskTemplateSerializer(template).data,
        'message': 'Task template updated',
    })


@api_view(['POST'])
@require_roles(*TASK_CREATE_ROLES)
def task_from_template(request, template_id):
    """
    POST /hr/task-templates/{id}/create-task/
    - Request body: { "assignee_id", "due_date", "custom_title",
                      "custom_description", "custom_priority", "additional_tags" }
    - Template checklist items become the task checklist
    """
    template = get_object_or_404(TaskTemplate, pk=template_id, is_active=True)
    serializer = TaskFromTemplateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    assignee = None
    if data.get('assignee_id'):
        assignee = User.objects.filter(pk=data['assignee_id'], status=UserStatus.ACTIVE).first()
        if assignee is None:
            return error_response('Invalid assignee')

    task = services.create_task(
        request.user,
        (data.get('custom_title') or '').strip() or template.title,
        assignee=assignee,
        checklist=template.checklist_items,
        description=data.get('custom_description') or template.description,
        priority=data.get('custom_priority') or template.default_priority,
        estimated_hours=template.estimated_hours,
        due_date=data.get('due_date'),
        tags=list(template.tags or []) + list(data.get('additional_tags') or []),
        template=template,
    )

    notify_task_assigned(task, sender=request.user)
    log_action(
        request, 'task_created_from_template', 'task', task.pk, task.title,
        new_values={'template_id': template.pk, 'assignee_id': task.assignee_id},
    )

    task = _tasks_queryset().get(pk=task.pk)
    return Response(
        {
            'success': True,
            'task': TaskSerializer(task).data,
            'message': f'Task created from template "{template.title}"',
        },
        status=status.HTTP_201_CREATED
    )
