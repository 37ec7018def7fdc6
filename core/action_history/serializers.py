from rest_framework import serializers

from .models import ActionHistory


class ActionHistorySerializer(serializers.ModelSerializer):
    """History entry with the performer flattened for display"""
    performed_by_name = serializers.SerializerMethodField()
    performed_by_email = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = ActionHistory
        fields = [
            'id', 'action_type', 'entity_type', 'entity_id', 'entity_name',
            'old_values', 'new_values', 'change_description',
            'performed_by', 'performed_by_name', 'performed_by_email', 'role',
            'ip_address', 'user_agent', 'created_at',
        ]
        read_only_fields = fields

    def get_performed_by_name(self, obj):
        return obj.performed_by.display_name if obj.performed_by else None

    def get_performed_by_email(self, obj):
        return obj.performed_by.email if obj.performed_by else None

    def get_role(self, obj):
        return obj.performed_by.role if obj.performed_by else None
