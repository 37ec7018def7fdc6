import re

from rest_framework import serializers
from django.core.validators import EmailValidator

from core.job_roles.core_config import ALL_ROLES, ASSIGNABLE_ROLES, USER_STATUS_CHOICES, Roles
from .models import CustomUser


TELEGRAM_USERNAME_RE = re.compile(r'^[a-zA-Z0-9_]{5,32}$')
BEP20_WALLET_RE = re.compile(r'^0x[a-fA-F0-9]{40}$')


class UserBriefSerializer(serializers.ModelSerializer):
    """Nested representation used inside other payloads"""
    class Meta:
        model = CustomUser
        fields = ['id', 'email', 'first_name', 'last_name', 'role']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Full user representation"""
    team_lead_name = serializers.SerializerMethodField()

    class Meta:
        model = CustomUser
        fields = [
            'id', 'email', 'first_name', 'last_name', 'phone', 'role', 'status',
            'telegram_username', 'usdt_wallet', 'salary_percentage', 'salary_bonus',
            'team_lead', 'team_lead_name', 'nda_signed', 'nda_signed_date',
            'last_login', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_team_lead_name(self, obj):
        if obj.team_lead is None:
            return None
        return obj.team_lead.display_name


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer for manager/hr/admin creating accounts"""
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    role = serializers.CharField()

    class Meta:
        model = CustomUser
        fields = [
            'email', 'password', 'first_name', 'last_name', 'role',
            'telegram_username', 'usdt_wallet', 'salary_percentage', 'salary_bonus',
            'team_lead',
        ]
        extra_kwargs = {
            'salary_percentage': {'required': False},
            'salary_bonus': {'required': False},
            'team_lead': {'required': False},
        }

    def validate_email(self, value):
        """Validate email format and uniqueness"""
        validator = EmailValidator(message="Enter a valid email address")
        validator(value)

        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")

        return value

    def validate_role(self, value):
        if value not in ALL_ROLES:
            raise serializers.ValidationError("Invalid role")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        email = validated_data.pop('email')
        role = validated_data.pop('role')
        for field in ('salary_percentage', 'salary_bonus'):
            if validated_data.get(field) is None:
                validated_data[field] = 0
        return CustomUser.objects.create_user(email=email, password=password, role=role, **validated_data)


class UserUpdateSerializer(serializers.ModelSerializer):
    """Serializer for hr/admin editing accounts"""
    role = serializers.ChoiceField(choices=ASSIGNABLE_ROLES, required=False)
    status = serializers.ChoiceField(choices=[code for code, _ in USER_STATUS_CHOICES], required=False)
    team_lead_id = serializers.PrimaryKeyRelatedField(
        source='team_lead',
        queryset=CustomUser.objects.filter(role=Roles.TEAMLEAD),
        required=False,
        allow_null=True
    )

    class Meta:
        model = CustomUser
        fields = [
            'first_name', 'last_name', 'role', 'status', 'telegram_username',
            'usdt_wallet', 'salary_percentage', 'salary_bonus', 'team_lead_id', 'phone',
        ]


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Self-service profile update.
    Blank values clear the field; telegram usernames lose a leading '@'.
    """
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    surname = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    telegram_username = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    usdt_wallet = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_telegram_username(self, value):
        cleaned = (value or '').strip().replace('@', '')
        if not cleaned:
            return None
        if not TELEGRAM_USERNAME_RE.match(cleaned):
            raise serializers.ValidationError("Invalid Telegram username format")
        return cleaned

    def validate_usdt_wallet(self, value):
        cleaned = (value or '').strip()
        if not cleaned:
            return None
        if not BEP20_WALLET_RE.match(cleaned):
            raise serializers.ValidationError(
                "Invalid USDT wallet address. Only BEP20 format (0x...) is supported"
            )
        return cleaned

    def update(self, instance, validated_data):
        field_map = {
            'name': 'first_name',
            'surname': 'last_name',
            'telegram_username': 'telegram_username',
            'usdt_wallet': 'usdt_wallet',
            'phone': 'phone',
        }
        for key, attr in field_map.items():
            if key not in validated_data:
                continue
            value = validated_data[key]
            if isinstance(value, str):
                value = value.strip()
            if attr in ('first_name', 'last_name', 'phone'):
                value = value or ''
            else:
                value = value or None
            setattr(instance, attr, value)
        instance.save()
        return instance


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for changing own password"""
    currentPassword = serializers.CharField(write_only=True)
    newPassword = serializers.CharField(write_only=True)

    def validate_newPassword(self, value):
        if len(value) < 6:
            raise serializers.ValidationError("New password must be at least 6 characters long")
        return value
