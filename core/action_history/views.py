"""
Global action history endpoint.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_roles
from .models import ActionHistory
from .serializers import ActionHistorySerializer

HISTORY_LIMIT = 100


@api_view(['GET'])
@require_roles(Roles.CFO, Roles.ADMIN)
def global_history(request):
    """
    Latest audited operations across the system.

    GET /core/history/
    - Filters: entity_type, action_type, performed_by (user id), entity_id
    - Returns at most 100 entries, newest first
    """
    entries = ActionHistory.objects.select_related('performed_by')

    entity_type = request.query_params.get('entity_type')
    if entity_type:
        entries = entries.filter(entity_type=entity_type)

    action_type = request.query_params.get('action_type')
    if action_type:
        entries = entries.filter(action_type=action_type)

    performed_by = request.query_params.get('performed_by')
    if performed_by:
        entries = entries.filter(performed_by_id=performed_by)

    entity_id = request.query_params.get('entity_id')
    if entity_id:
        entries = entries.filter(entity_id=entity_id)

    entries = entries.order_by('-created_at', '-id')[:HISTORY_LIMIT]
    data = ActionHistorySerializer(entries, many=True).data
    return Response({'success': True, 'history': data, 'count': len(data)})
