"""
Teams, their members and their recurring calls.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status

from core.action_history.services import log_action
from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_roles, require_method_roles
from erp_project.response_formatter import error_response
from .models import Team, TeamMember, TeamCall, CallAgendaItem
from .serializers import (
    TeamSerializer,
    TeamMemberSerializer,
    TeamCallSerializer,
    TeamCallCreateSerializer,
)
from .services import remove_member, sync_teams

logger = logging.getLogger(__name__)
User = get_user_model()

TEAM_READ_ROLES = [Roles.HR, Roles.ADMIN, Roles.MANAGER]
TEAM_WRITE_ROLES = [Roles.HR, Roles.ADMIN]


def _teams_queryset():
    return Team.objects.select_related('team_lead').prefetch_related(
        Prefetch('members', queryset=TeamMember.objects.select_related('user'))
    )


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': TEAM_READ_ROLES,
    'POST': TEAM_WRITE_ROLES,
})
def teams_handler(request):
    """
    GET /hr/teams/
    - Active teams with their active members

    POST /hr/teams/
    - Request body: { "name", "description", "chat_link", "team_lead" }
    """
    if request.method == 'GET':
        teams = _teams_queryset().active()
        data = TeamSerializer(teams, many=True).data
        return Response({'success': True, 'teams': data, 'count': len(data)})

    serializer = TeamSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        team = serializer.save(created_by=request.user, updated_by=request.user)
        if team.team_lead_id:
            TeamMember.objects.create(
                team=team, user_id=team.team_lead_id, role=TeamMember.ROLE_LEAD, added_by=request.user
            )

    log_action(request, 'team_created', 'team', team.pk, team.name)
    team = _teams_queryset().get(pk=team.pk)
    return Response(
        {'success': True, 'team': TeamSerializer(team).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_method_roles({
    'GET': TEAM_READ_ROLES,
    'PATCH': TEAM_WRITE_ROLES,
    'DELETE': TEAM_WRITE_ROLES,
})
def team_detail(request, team_id):
    """
    GET /hr/teams/{id}/
    PATCH /hr/teams/{id}/
    DELETE /hr/teams/{id}/ - deactivates the team
    """
    team = get_object_or_404(_teams_queryset(), pk=team_id)

    if request.method == 'GET':
        return Response({'success': True, 'team': TeamSerializer(team).data})

    if request.method == 'DELETE':
        team.deactivate(request.user)
        log_action(request, 'team_deleted', 'team', team.pk, team.name)
        return Response({'success': True, 'message': f'Team "{team.name}" deactivated'})

    serializer = TeamSerializer(team, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    team = serializer.save(updated_by=request.user)
    log_action(
        request, 'team_updated', 'team', team.pk, team.name,
        new_values={key: value for key, value in request.data.items() if key in serializer.fields},
    )
    team = _teams_queryset().get(pk=team.pk)
    return Response({'success': True, 'team': TeamSerializer(team).data})


@api_view(['POST', 'DELETE'])
@require_roles(*TEAM_WRITE_ROLES)
def team_members(request, team_id):
    """
    POST /hr/teams/{id}/members/
    - Request body: { "user_id": 5, "role": "member" | "lead" }

    DELETE /hr/teams/{id}/members/?user_id=5
    """
    team = get_object_or_404(Team, pk=team_id)

    if request.method == 'DELETE':
        user_id = request.query_params.get('user_id')
        if not user_id:
            return error_response('user_id is required')
        membership = team.members.filter(user_id=user_id, is_active=True).first()
        if membership is None:
            return error_response('User is not an active member of this team', status_code=status.HTTP_404_NOT_FOUND)
        remove_member(membership, request.user)
        log_action(request, 'team_member_removed', 'team', team.pk, team.name, new_values={'user_id': user_id})
        return Response({'success': True, 'message': 'Member removed'})

    user_id = request.data.get('user_id')
    if not user_id:
        return error_response('user_id is required')
    role = request.data.get('role') or TeamMember.ROLE_MEMBER
    if role not in dict(TeamMember.ROLE_CHOICES):
        return error_response('role must be lead or member')

    member_user = get_object_or_404(User, pk=user_id)
    if team.members.filter(user=member_user, is_active=True).exists():
        return error_response('User is already a member of this team', status_code=status.HTTP_409_CONFLICT)

    membership = TeamMember.objects.create(team=team, user=member_user, role=role, added_by=request.user)
    log_action(
        request, 'team_member_added', 'team', team.pk, team.name,
        new_values={'user_id': member_user.pk, 'role': role},
    )
    return Response(
        {'success': True, 'member': TeamMemberSerializer(membership).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'POST'])
@require_method_roles({
    'GET': TEAM_READ_ROLES,
    'POST': TEAM_WRITE_ROLES,
})
def team_calls(request, team_id):
    """
    GET /hr/teams/{id}/calls/
    POST /hr/teams/{id}/calls/
    - Request body: { "name", "description", "duration_minutes", "schedule_time",
                      "schedule_days", "agenda_items": [{"title", "order_number", ...}] }
    """
    team = get_object_or_404(Team, pk=team_id)

    if request.method == 'GET':
        calls = team.calls.filter(is_active=True).prefetch_related('agenda_items')
        return Response({'success': True, 'calls': TeamCallSerializer(calls, many=True).data})

    serializer = TeamCallCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    with transaction.atomic():
        call = TeamCall.objects.create(
            team=team,
            name=data['name'],
            description=data['description'],
            duration_minutes=data['duration_minutes'],
            schedule_time=data.get('schedule_time'),
            schedule_days=data['schedule_days'],
            created_by=request.user,
        )
        CallAgendaItem.objects.bulk_create([
            CallAgendaItem(
                call=call,
                order_number=item.get('order_number') or index,
                title=item.get('title') or f'Item {index}',
                description=item.get('description') or '',
                duration_minutes=item.get('duration_minutes') or 1,
                speaker_role=item.get('speaker_role'),
                speaker_user_id=item.get('speaker_user_id'),
            )
            for index, item in enumerate(data['agenda_items'], start=1)
        ])

    log_action(request, 'team_call_created', 'team', team.pk, team.name, new_values={'call': call.name})
    call = team.calls.prefetch_related('agenda_items').get(pk=call.pk)
    return Response(
        {'success': True, 'call': TeamCallSerializer(call).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@require_roles(*TEAM_WRITE_ROLES)
def teams_sync(request):
    """POST /hr/teams/sync/ - rebuild team lead teams from the junior hierarchy"""
    result = sync_teams(request.user)
    log_action(
        request, 'teams_synced', 'team',
        change_description='Teams synchronised with team lead hierarchy',
        new_values=result,
    )
    return Response({'success': True, 'message': 'Teams synchronised', 'result': result})
