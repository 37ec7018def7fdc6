"""
API Views for User Account management and authentication.
Provides REST API endpoints for login, logout, password changes, own profile
and user administration.
"""
import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from django.contrib.auth import authenticate
from django.shortcuts import get_object_or_404

from core.action_history.services import log_action
from core.job_roles.core_config import Roles, UserStatus, PROTECTED_ROLES
from core.job_roles.decorators import require_roles, require_method_roles, check_roles
from erp_project.response_formatter import error_response
from .models import CustomUser
from .serializers import (
    UserSerializer,
    UserCreateSerializer,
    UserUpdateSerializer,
    ProfileUpdateSerializer,
    ChangePasswordSerializer,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Public Authentication Views
# ============================================================================

@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    Public endpoint for user login.
    Authenticates user and returns JWT tokens.

    POST /auth/login/
    - Request body: { "email": "...", "password": "..." }
    - Returns: User data and JWT tokens
    """
    email = request.data.get('email')
    password = request.data.get('password')

    if not email or not password:
        return error_response('Please provide both email and password')

    # Authenticate user
    user = authenticate(request, username=email, password=password)

    if user is None:
        logger.warning("Failed login attempt for %s", email)
        return error_response('Invalid credentials', status_code=status.HTTP_401_UNAUTHORIZED)

    if user.status != UserStatus.ACTIVE:
        return error_response(
            'Account not active',
            details=f"User status is '{user.status}', must be 'active'",
            status_code=status.HTTP_403_FORBIDDEN
        )

    # Generate JWT tokens
    refresh = RefreshToken.for_user(user)
    logger.info("User %s logged in", user.email)

    return Response({
        'success': True,
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token)
        }
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """
    Authenticated endpoint for logout.
    Blacklists the refresh token.

    POST /auth/logout/
    - Request body: { "refresh": "..." }
    """
    refresh_token = request.data.get('refresh')
    if not refresh_token:
        return error_response('Refresh token is required')

    try:
        token = RefreshToken(refresh_token)
        token.blacklist()
    except TokenError as e:
        return error_response('Invalid refresh token', details=str(e))

    return Response({
        'success': True,
        'message': 'Logout successful'
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """
    Authenticated endpoint for changing own password.

    POST /auth/change-password/
    - Request body: { "currentPassword", "newPassword" }
    """
    serializer = ChangePasswordSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = request.user

    # Check current password
    if not user.check_password(serializer.validated_data['currentPassword']):
        return error_response('Current password is incorrect')

    # Set new password
    user.set_password(serializer.validated_data['newPassword'])
    user.save(update_fields=['password'])
    logger.info("User %s changed password", user.email)

    return Response({
        'success': True,
        'message': 'Password changed successfully'
    }, status=status.HTTP_200_OK)


# ============================================================================
# Own Profile
# ============================================================================

@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def me(request):
    """
    Current user's record.

    GET /core/users/me/
    PATCH /core/users/me/
    - Request body: { "name", "surname", "telegram_username", "usdt_wallet", "phone" }
    """
    user = request.user

    if request.method == 'GET':
        return Response({'success': True, 'user': UserSerializer(user).data})

    serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    serializer.save()
    return Response({
        'success': True,
        'user': UserSerializer(user).data,
        'message': 'Profile updated successfully'
    })


# ============================================================================
# User Management Views
# ============================================================================

@api_view(['GET', 'POST'])
@require_roles(Roles.MANAGER, Roles.HR, Roles.ADMIN)
def users_handler(request):
    """
    List and create users.

    GET /core/users/
    - Returns: All users, newest first, with team_lead_name

    POST /core/users/
    - Request body: { "email", "password", "role", "first_name", "last_name",
                      "telegram_username", "usdt_wallet", "salary_percentage",
                      "salary_bonus" }
    - Only Admin may create ceo/admin accounts
    """
    if request.method == 'GET':
        users = CustomUser.objects.select_related('team_lead').order_by('-created_at')
        return Response({'success': True, 'users': UserSerializer(users, many=True).data})

    email = request.data.get('email')
    password = request.data.get('password')
    role = request.data.get('role')
    if not email or not password or not role:
        return error_response('Email, password and role are required')

    if role in PROTECTED_ROLES and not request.user.is_admin():
        return error_response(
            'Only Admin can create users with the CEO or Admin role',
            details=f"Current role '{request.user.role}' cannot create role '{role}'",
            status_code=status.HTTP_403_FORBIDDEN
        )

    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = serializer.save()
    log_action(
        request,
        action_type='user_created',
        entity_type='user',
        entity_id=user.pk,
        entity_name=user.email,
        change_description=f"Created user {user.email} with role {user.role}",
        new_values={'email': user.email, 'role': user.role},
    )
    logger.info("User %s created by %s", user.email, request.user.email)

    return Response({
        'success': True,
        'user': UserSerializer(user).data,
        'message': f'User {user.email} created successfully'
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@require_method_roles({
    'GET': None,
    'PATCH': [Roles.HR, Roles.ADMIN],
    'DELETE': [Roles.ADMIN],
}, require_active=False)
def user_detail(request, user_id):
    """
    Retrieve, update or delete a user.

    GET /core/users/{id}/     - self, hr or admin
    PATCH /core/users/{id}/   - hr or admin
    DELETE /core/users/{id}/  - admin only
    """
    if request.method == 'GET' and str(request.user.pk) != str(user_id):
        denied = check_roles(request, Roles.HR, Roles.ADMIN, require_active=False)
        if denied:
            return denied

    target = get_object_or_404(CustomUser, pk=user_id)

    if request.method == 'GET':
        return Response({'success': True, 'user': UserSerializer(target).data})

    if request.method == 'PATCH':
        old_values = {'role': target.role, 'status': target.status}
        serializer = UserUpdateSerializer(target, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        log_action(
            request,
            action_type='user_updated',
            entity_type='user',
            entity_id=target.pk,
            entity_name=target.email,
            old_values=old_values,
            new_values={'role': target.role, 'status': target.status},
        )
        return Response({
            'success': True,
            'user': UserSerializer(target).data,
            'message': 'User updated successfully'
        })

    email = target.email
    target_id = target.pk
    target.delete()
    log_action(
        request,
        action_type='user_deleted',
        entity_type='user',
        entity_id=target_id,
        entity_name=email,
        change_description=f"Deleted user {email}",
    )
    logger.info("User %s deleted by %s", email, request.user.email)
    return Response({
        'success': True,
        'message': f'User {email} deleted successfully'
    })
