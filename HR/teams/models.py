from django.conf import settings
from django.db import models

from core.base.managers import ActiveManager
from core.base.models import AuditMixin, ActiveFlagMixin


class Team(AuditMixin, ActiveFlagMixin):
    """A team led by a team lead; deleting a team only deactivates it."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    chat_link = models.URLField(max_length=500, blank=True, null=True)
    team_lead = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='led_teams'
    )

    objects = ActiveManager()

    class Meta:
        db_table = 'teams'
        ordering = ['name', 'id']

    def __str__(self):
        return self.name

    def active_members(self):
        return self.members.filter(is_active=True).select_related('user')


class TeamMember(models.Model):
    ROLE_LEAD = 'lead'
    ROLE_MEMBER = 'member'

    ROLE_CHOICES = [
        (ROLE_LEAD, 'Lead'),
        (ROLE_MEMBER, 'Member'),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(auto_now_add=True)
    left_at = models.DateTimeField(null=True, blank=True)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_members_added'
    )
    removed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_members_removed'
    )

    class Meta:
        db_table = 'team_members'
        ordering = ['joined_at', 'id']

    def __str__(self):
        return f"{self.user_id} in {self.team_id} ({self.role})"


class TeamCall(models.Model):
    """Recurring team call with an agenda."""

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='calls')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    duration_minutes = models.PositiveIntegerField(default=20)
    schedule_time = models.TimeField(null=True, blank=True)
    schedule_days = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='team_calls_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'team_calls'
        ordering = ['-created_at', '-id']


class CallAgendaItem(models.Model):
    call = models.ForeignKey(TeamCall, on_delete=models.CASCADE, related_name='agenda_items')
    order_number = models.PositiveIntegerField()
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    duration_minutes = models.PositiveIntegerField(default=1)
    speaker_role = models.CharField(max_length=20, blank=True, null=True)
    speaker_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='call_agenda_items'
    )

    class Meta:
        db_table = 'call_agenda_items'
        ordering = ['order_number', 'id']
