"""
Team Serializers
"""
from rest_framework import serializers

from .models import Team, TeamMember, TeamCall, CallAgendaItem


class TeamMemberSerializer(serializers.ModelSerializer):
    email = serializers.CharField(source='user.email', read_only=True)
    name = serializers.CharField(source='user.display_name', read_only=True)
    user_role = serializers.CharField(source='user.role', read_only=True)

    class Meta:
        model = TeamMember
        fields = [
            'id', 'user', 'email', 'name', 'user_role', 'role', 'is_active',
            'joined_at', 'left_at', 'added_by', 'removed_by',
        ]
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    team_lead_name = serializers.SerializerMethodField()
    members = serializers.SerializerMethodField()
    members_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'description', 'chat_link', 'team_lead', 'team_lead_name',
            'is_active', 'members', 'members_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']

    def get_team_lead_name(self, obj):
        return obj.team_lead.display_name if obj.team_lead else None

    def _active(self, obj):
        return [member for member in obj.members.all() if member.is_active]

    def get_members(self, obj):
        return TeamMemberSerializer(self._active(obj), many=True).data

    def get_members_count(self, obj):
        return len(self._active(obj))

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Team name is required')
        return value.strip()


class CallAgendaItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CallAgendaItem
        fields = [
            'id', 'order_number', 'title', 'description', 'duration_minutes',
            'speaker_role', 'speaker_user',
        ]
        read_only_fields = ['id']


class TeamCallSerializer(serializers.ModelSerializer):
    agenda_items = CallAgendaItemSerializer(many=True, read_only=True)

    class Meta:
        model = TeamCall
        fields = [
            'id', 'team', 'name', 'description', 'duration_minutes', 'schedule_time',
            'schedule_days', 'is_active', 'agenda_items', 'created_by', 'created_at',
        ]
        read_only_fields = ['id', 'team', 'is_active', 'created_by', 'created_at']


class TeamCallCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    duration_minutes = serializers.IntegerField(required=False, min_value=1, default=20)
    schedule_time = serializers.TimeField(required=False, allow_null=True)
    schedule_days = serializers.ListField(required=False, default=list)
    agenda_items = serializers.ListField(child=serializers.DictField(), required=False, default=list)
