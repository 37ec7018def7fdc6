"""
Task Serializers
"""
from rest_framework import serializers

from .models import Task, TaskComment, TaskChecklistItem, TaskTemplate


def _user_brief(user):
    if user is None:
        return None
    return {
        'id': user.id,
        'email': user.email,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'role': user.role,
    }


class TaskCommentSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()

    class Meta:
        model = TaskComment
        fields = ['id', 'content', 'comment_type', 'user', 'created_at']
        read_only_fields = fields

    def get_user(self, obj):
        return _user_brief(obj.user)


class TaskChecklistItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskChecklistItem
        fields = ['id', 'task', 'title', 'is_completed', 'order_index', 'created_at', 'updated_at']
        read_only_fields = ['id', 'task', 'created_at', 'updated_at']


class TaskSerializer(serializers.ModelSerializer):
    """Task with people, overdue flag, comment count and checklist progress."""
    assignee = serializers.SerializerMethodField()
    created_by = serializers.SerializerMethodField()
    team_lead = serializers.SerializerMethodField()
    parent_task = serializers.SerializerMethodField()
    is_overdue = serializers.BooleanField(read_only=True)
    comments_count = serializers.SerializerMethodField()
    checklist_progress = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'assignee', 'created_by', 'team_lead',
            'parent_task', 'template', 'task_status', 'priority', 'due_date', 'estimated_hours',
            'actual_hours', 'tags', 'completed_at', 'created_at', 'updated_at',
            'is_overdue', 'comments_count', 'checklist_progress',
        ]
        read_only_fields = fields

    def get_assignee(self, obj):
        return _user_brief(obj.assignee)

    def get_created_by(self, obj):
        return _user_brief(obj.created_by)

    def get_team_lead(self, obj):
        return _user_brief(obj.team_lead)

    def get_parent_task(self, obj):
        if obj.parent_task is None:
            return None
        return {'id': obj.parent_task.id, 'title': obj.parent_task.title}

    def get_comments_count(self, obj):
        return len(obj.comments.all())

    def get_checklist_progress(self, obj):
        return obj.checklist_progress()


class TaskCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    assignee_id = serializers.IntegerField(required=False, allow_null=True)
    priority = serializers.ChoiceField(choices=Task.PRIORITY_CHOICES, default=Task.PRIORITY_MEDIUM)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    estimated_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)
    parent_task_id = serializers.IntegerField(required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)
    checklist = serializers.ListField(required=False, allow_null=True)

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Title is required')
        return value.strip()


class TaskUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    task_status = serializers.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    estimated_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)
    actual_hours = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(), required=False)


class TaskTemplateSerializer(serializers.ModelSerializer):
    """Template read and write shape; ``created_by`` is set by the view."""
    created_by_user = serializers.SerializerMethodField()
    checklist_items = serializers.ListField(child=serializers.CharField(), required=False)
    tags = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = TaskTemplate
        fields = [
            'id', 'title', 'description', 'category', 'target_role', 'estimated_hours',
            'default_priority', 'checklist_items', 'tags', 'auto_assign', 'is_active',
            'created_by', 'created_by_user', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']

    def get_created_by_user(self, obj):
        return _user_brief(obj.created_by)

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Title is required')
        return value.strip()


class TaskFromTemplateSerializer(serializers.Serializer):
    assignee_id = serializers.IntegerField(required=False, allow_null=True)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    custom_title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    custom_description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    custom_priority = serializers.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    additional_tags = serializers.ListField(child=serializers.CharField(), required=False)
