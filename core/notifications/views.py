"""
Notification endpoints.
Every user reads and acknowledges their own notifications; management roles
and team leads may send new ones.
"""
import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_method_roles
from erp_project.response_formatter import error_response
from .models import Notification
from .serializers import NotificationSerializer, NotificationCreateSerializer
from .services import send_notification, mark_as_read

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


def _int_param(value, default):
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default


@api_view(['GET', 'POST', 'PATCH'])
@require_method_roles({
    'GET': None,
    'POST': [Roles.ADMIN, Roles.HR, Roles.MANAGER, Roles.TEAMLEAD],
    'PATCH': None,
})
def notifications_handler(request):
    """
    GET /core/notifications/
    - Query: limit (20), offset (0), unread_only, type
    - Returns own non-expired notifications, newest first

    POST /core/notifications/
    - Request body: { "user_ids": [...], "type", "title", "message",
                      "priority", "metadata", "action_url" }

    PATCH /core/notifications/
    - Request body: { "mark_all": true } or { "notification_ids": [...] }
    """
    if request.method == 'GET':
        limit = _int_param(request.query_params.get('limit'), DEFAULT_LIMIT) or DEFAULT_LIMIT
        offset = _int_param(request.query_params.get('offset'), 0)

        queryset = Notification.objects.for_user(request.user).not_expired().select_related('sender')
        if request.query_params.get('unread_only') in ('true', '1'):
            queryset = queryset.unread()
        notification_type = request.query_params.get('type')
        if notification_type:
            queryset = queryset.filter(type=notification_type)

        total = queryset.count()
        page = queryset.order_by('-created_at', '-id')[offset:offset + limit]
        unread_count = Notification.objects.for_user(request.user).not_expired().unread().count()

        return Response({
            'success': True,
            'notifications': NotificationSerializer(page, many=True).data,
            'unread_count': unread_count,
            'pagination': {
                'limit': limit,
                'offset': offset,
                'has_more': offset + limit < total,
            }
        })

    if request.method == 'POST':
        serializer = NotificationCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        created = send_notification(
            data['user_ids'],
            type=data['type'],
            title=data['title'],
            message=data['message'],
            sender=request.user,
            priority=data['priority'],
            metadata=data.get('metadata'),
            action_url=data.get('action_url') or None,
        )
        if created == 0:
            return error_response('No active recipients found')

        return Response({
            'success': True,
            'created_count': created,
            'message': f'{created} notification(s) sent'
        }, status=status.HTTP_201_CREATED)

    if request.data.get('mark_all'):
        updated = mark_as_read(request.user)
    elif request.data.get('notification_ids'):
        ids = request.data.get('notification_ids')
        if not isinstance(ids, list):
            return error_response('notification_ids must be a list')
        updated = mark_as_read(request.user, ids)
    else:
        return error_response('Provide mark_all or notification_ids')

    return Response({'success': True, 'updated_count': updated})
