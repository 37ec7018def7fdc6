"""
NDA templates, generation of signing links and the public signing flow.
"""
import logging

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes, authentication_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

from core.action_history.services import log_action
from core.job_roles.core_config import Roles
from core.job_roles.decorators import require_roles
from erp_project.pagination import auto_paginate
from erp_project.response_formatter import error_response
from . import services
from .models import NDATemplate, NDAAgreement
from .serializers import (
    NDATemplateSerializer,
    NDAAgreementSerializer,
    NDAPublicAgreementSerializer,
    NDAGenerateSerializer,
    NDASignSerializer,
)

logger = logging.getLogger(__name__)

NDA_ADMIN_ROLES = [Roles.HR, Roles.ADMIN]

# form key -> agreement field
SIGNER_FIELDS = {
    'fullName': 'full_name',
    'dateOfBirth': 'date_of_birth',
    'email': 'email',
    'documentNumber': 'document_number',
    'issuanceAddress': 'issuance_address',
    'issuanceDate': 'issuance_date',
    'residentialAddress': 'residential_address',
}


@api_view(['GET', 'POST'])
@require_roles(*NDA_ADMIN_ROLES)
def templates_handler(request):
    """
    GET /hr/nda/templates/
    - Active templates

    POST /hr/nda/templates/
    - Request body: { "name", "content", "version" }
    """
    if request.method == 'GET':
        templates = NDATemplate.objects.active()
        return Response({'success': True, 'templates': NDATemplateSerializer(templates, many=True).data})

    if not request.data.get('name') or not request.data.get('content'):
        return error_response('name and content are required')
    serializer = NDATemplateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save(created_by=request.user, updated_by=request.user)
    log_action(request, 'nda_template_created', 'nda_template', template.pk, template.name)
    return Response(
        {'success': True, 'template': NDATemplateSerializer(template).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@require_roles(*NDA_ADMIN_ROLES)
def template_detail(request, template_id):
    """
    GET /hr/nda/templates/{id}/
    PATCH /hr/nda/templates/{id}/
    DELETE /hr/nda/templates/{id}/ - deactivates the template
    """
    template = get_object_or_404(NDATemplate, pk=template_id)

    if request.method == 'GET':
        return Response({'success': True, 'template': NDATemplateSerializer(template).data})

    if request.method == 'DELETE':
        template.deactivate(request.user)
        log_action(request, 'nda_template_deactivated', 'nda_template', template.pk, template.name)
        return Response({'success': True, 'message': 'Template deactivated'})

    serializer = NDATemplateSerializer(template, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save(updated_by=request.user)
    log_action(request, 'nda_template_updated', 'nda_template', template.pk, template.name)
    return Response({'success': True, 'template': NDATemplateSerializer(template).data})


@api_view(['POST'])
@require_roles(*NDA_ADMIN_ROLES)
def generate_agreement(request):
    """
    POST /hr/nda/generate/
    - Request body: { "template_id", "full_name", "email", "expires_in_days" }
    - Returns the public signing URL
    """
    serializer = NDAGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    template = get_object_or_404(NDATemplate.objects.active(), pk=data['template_id'])
    agreement = services.create_agreement(
        template, data['full_name'], data['email'], request.user, data.get('expires_in_days')
    )
    log_action(
        request, 'nda_generated', 'nda_agreement', agreement.pk, agreement.full_name,
        new_values={'email': agreement.email, 'template_id': template.pk, 'user_id': agreement.user_id},
    )
    return Response(
        {
            'success': True,
            'agreement': NDAAgreementSerializer(agreement).data,
            'sign_url': services.build_sign_url(agreement),
        },
        status=status.HTTP_201_CREATED
    )


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def sign_check(request, agreement_id):
    """
    GET /hr/nda/sign/{id}/?token=...
    Public: validates the link before the signing form is shown.
    """
    token = request.query_params.get('token')
    if not token:
        return error_response('Token is required')

    agreement = get_object_or_404(NDAAgreement.objects.select_related('template'), pk=agreement_id)
    if not services.token_matches(agreement, token):
        return error_response('Invalid token', status_code=status.HTTP_403_FORBIDDEN)
    if agreement.status != NDAAgreement.STATUS_PENDING:
        return error_response(f'Agreement is already {agreement.status}')
    if services.expire_if_needed(agreement):
        return error_response('Agreement has expired', status_code=status.HTTP_410_GONE)

    return Response({
        'success': True,
        'agreement': NDAPublicAgreementSerializer(agreement).data,
        'template': {
            'id': agreement.template.id,
            'name': agreement.template.name,
            'content': agreement.template.content,
            'version': agreement.template.version,
        },
    })


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@parser_classes([MultiPartParser, FormParser])
def sign_agreement(request):
    """
    POST /hr/nda/sign/
    Public multipart form: agreementId, token, fullName, dateOfBirth, email,
    documentNumber, issuanceAddress, issuanceDate, residentialAddress,
    signature (base64 data URL), passportPhoto, selfieWithPassport
    """
    serializer = NDASignSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('All fields are required', details=serializer.errors)
    data = serializer.validated_data

    agreement = get_object_or_404(NDAAgreement, pk=data['agreementId'])
    if not services.token_matches(agreement, data['token']):
        return error_response('Invalid token', status_code=status.HTTP_403_FORBIDDEN)
    if agreement.status != NDAAgreement.STATUS_PENDING:
        return error_response('Agreement is already signed or cancelled')
    if services.expire_if_needed(agreement):
        return error_response('Agreement has expired', status_code=status.HTTP_410_GONE)

    signer = {field: data[key] for key, field in SIGNER_FIELDS.items()}
    try:
        services.sign_agreement(
            agreement, signer, data['signature'], data['passportPhoto'], data['selfieWithPassport']
        )
    except ValidationError as e:
        return error_response(e.messages[0])

    log_action(
        request, 'nda_signed', 'nda_agreement', agreement.pk, agreement.full_name,
        change_description=f'NDA signed by {agreement.email}',
        performed_by=agreement.user,
    )
    return Response({'success': True, 'message': 'NDA signed', 'agreementId': agreement.pk})


@api_view(['GET'])
@require_roles(Roles.HR, Roles.ADMIN, Roles.CEO)
@auto_paginate
def agreements_list(request):
    """
    GET /hr/nda/agreements/
    - Query: status, user_id
    """
    queryset = NDAAgreement.objects.select_related('template').prefetch_related('files')
    if request.query_params.get('status'):
        queryset = queryset.filter(status=request.query_params['status'])
    if request.query_params.get('user_id'):
        queryset = queryset.filter(user_id=request.query_params['user_id'])
    return Response(NDAAgreementSerializer(queryset, many=True).data)
