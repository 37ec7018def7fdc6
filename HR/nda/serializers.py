"""
NDA Serializers
"""
from rest_framework import serializers

from .models import NDATemplate, NDAAgreement, NDAFile


class NDATemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = NDATemplate
        fields = ['id', 'name', 'content', 'version', 'is_active', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['id', 'is_active', 'created_by', 'created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Template name is required')
        return value.strip()


class NDAFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = NDAFile
        fields = ['id', 'file_type', 'file', 'original_filename', 'uploaded_at']
        read_only_fields = fields


class NDAAgreementSerializer(serializers.ModelSerializer):
    template_name = serializers.CharField(source='template.name', read_only=True)
    files = NDAFileSerializer(many=True, read_only=True)

    class Meta:
        model = NDAAgreement
        fields = [
            'id', 'template', 'template_name', 'user', 'full_name', 'email', 'status',
            'expires_at', 'signed_date', 'date_of_birth', 'document_number',
            'issuance_address', 'issuance_date', 'residential_address',
            'files', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class NDAPublicAgreementSerializer(serializers.ModelSerializer):
    """What the signer sees on the public page; no token, no files."""

    class Meta:
        model = NDAAgreement
        fields = ['id', 'full_name', 'email', 'status', 'expires_at']
        read_only_fields = fields


class NDAGenerateSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    expires_in_days = serializers.IntegerField(required=False, min_value=1)


class NDASignSerializer(serializers.Serializer):
    """Multipart form posted by the public signing page (camelCase keys)."""
    agreementId = serializers.IntegerField()
    token = serializers.CharField()
    fullName = serializers.CharField(max_length=255)
    dateOfBirth = serializers.DateField()
    email = serializers.EmailField()
    documentNumber = serializers.CharField(max_length=100)
    issuanceAddress = serializers.CharField()
    issuanceDate = serializers.DateField()
    residentialAddress = serializers.CharField()
    signature = serializers.CharField()
    passportPhoto = serializers.FileField()
    selfieWithPassport = serializers.FileField()
