"""
Team membership rules and the team lead sync.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.job_roles.core_config import Roles, UserStatus
from .models import Team, TeamMember

logger = logging.getLogger(__name__)


def remove_member(membership, removed_by):
    membership.is_active = False
    membership.left_at = timezone.now()
    membership.removed_by = removed_by
    membership.save(update_fields=['is_active', 'left_at', 'removed_by'])


@transaction.atomic
def sync_teams(performed_by):
    """
    Make every active team lead own a team whose active members are exactly
    the lead and the lead's active juniors.

    Returns:
        dict of counts: teams_synced, teams_created, members_added, members_removed
    """
    User = get_user_model()
    result = {'teams_synced': 0, 'teams_created': 0, 'members_added': 0, 'members_removed': 0}

    leads = User.objects.filter(role=Roles.TEAMLEAD, status=UserStatus.ACTIVE)
    for lead in leads:
        team = Team.objects.active().filter(team_lead=lead).order_by('id').first()
        if team is None:
            team = Team.objects.create(
                name=f'Team {lead.display_name}',
                team_lead=lead,
                created_by=performed_by,
            )
            result['teams_created'] += 1

        expected = {lead.pk: TeamMember.ROLE_LEAD}
        for junior in lead.get_active_juniors():
            expected[junior.pk] = TeamMember.ROLE_MEMBER

        current = {m.user_id: m for m in team.members.filter(is_active=True)}
        for user_id, membership in current.items():
            if user_id not in expected:
                remove_member(membership, performed_by)
                result['members_removed'] += 1
            elif membership.role != expected[user_id]:
                membership.role = expected[user_id]
                membership.save(update_fields=['role'])

        for user_id, role in expected.items():
            if user_id not in current:
                TeamMember.objects.create(team=team, user_id=user_id, role=role, added_by=performed_by)
                result['members_added'] += 1

        result['teams_synced'] += 1

    logger.info("Team sync by %s: %s", getattr(performed_by, 'email', None), result)
    return result
