from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    sender_name = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'priority', 'title', 'message', 'metadata', 'action_url',
            'is_read', 'read_at', 'show_sound', 'show_popup', 'sender', 'sender_name',
            'created_at', 'expires_at',
        ]
        read_only_fields = fields

    def get_sender_name(self, obj):
        if obj.sender is None:
            return None
        return obj.sender.display_name


class NotificationCreateSerializer(serializers.Serializer):
    """Payload for sending notifications to a list of users"""
    user_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    type = serializers.CharField(max_length=50)
    title = serializers.CharField(max_length=255)
    message = serializers.CharField()
    priority = serializers.ChoiceField(
        choices=[code for code, _ in Notification.PRIORITY_CHOICES],
        default=Notification.PRIORITY_NORMAL
    )
    metadata = serializers.DictField(required=False, default=dict)
    action_url = serializers.CharField(required=False, allow_null=True, allow_blank=True)
