"""
Tests for the role-gating decorators and helpers.
"""
from django.test import TestCase
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.test import APIRequestFactory, force_authenticate
from rest_framework import status

from core.base.test_utils import create_user
from core.job_roles.core_config import Roles, UserStatus
from core.job_roles.decorators import require_roles, require_active_user, require_method_roles, check_roles
from core.job_roles.services import user_has_role, is_active_user, get_client_ip


@api_view(['GET'])
@require_roles(Roles.CFO, Roles.ADMIN)
def finance_view(request):
    return Response({'success': True})


@api_view(['GET'])
@require_active_user
def any_active_view(request):
    return Response({'success': True})


@api_view(['GET', 'POST'])
@require_method_roles({'GET': None, 'POST': [Roles.ADMIN]})
def mixed_view(request):
    return Response({'success': True})


@api_view(['GET'])
def inline_view(request):
    denied = check_roles(request, Roles.HR)
    if denied:
        return denied
    return Response({'success': True})


class RequireRolesTest(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()

    def _get(self, view, user=None, method='get'):
        request = getattr(self.factory, method)('/dummy/')
        if user is not None:
            force_authenticate(request, user=user)
        return view(request)

    def test_allowed_role(self):
        response = self._get(finance_view, create_user(Roles.CFO))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_disallowed_role(self):
        response = self._get(finance_view, create_user(Roles.JUNIOR))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Access denied')
        self.assertIn('junior', response.data['details'])

    def test_inactive_user_with_allowed_role(self):
        response = self._get(finance_view, create_user(Roles.ADMIN, status=UserStatus.TERMINATED))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated(self):
        response = self._get(finance_view)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_require_active_user(self):
        self.assertEqual(self._get(any_active_view, create_user(Roles.TESTER)).status_code, 200)
        inactive = create_user(Roles.TESTER, status=UserStatus.INACTIVE)
        self.assertEqual(self._get(any_active_view, inactive).status_code, 403)

    def test_method_roles(self):
        junior = create_user(Roles.JUNIOR)
        self.assertEqual(self._get(mixed_view, junior).status_code, 200)
        self.assertEqual(self._get(mixed_view, junior, method='post').status_code, 403)
        self.assertEqual(self._get(mixed_view, create_user(Roles.ADMIN), method='post').status_code, 200)

    def test_check_roles_inline(self):
        self.assertEqual(self._get(inline_view, create_user(Roles.HR)).status_code, 200)
        self.assertEqual(self._get(inline_view, create_user(Roles.CFO)).status_code, 403)


class RoleServicesTest(TestCase):

    def test_user_has_role(self):
        user = create_user(Roles.MANAGER)
        self.assertTrue(user_has_role(user, Roles.MANAGER, Roles.ADMIN))
        self.assertFalse(user_has_role(user, Roles.CFO))

    def test_is_active_user(self):
        self.assertTrue(is_active_user(create_user(Roles.JUNIOR)))
        self.assertFalse(is_active_user(create_user(Roles.JUNIOR, status=UserStatus.INACTIVE)))

    def test_get_client_ip(self):
        factory = APIRequestFactory()
        request = factory.get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2', REMOTE_ADDR='192.168.1.1')
        self.assertEqual(get_client_ip(request), '10.0.0.1')
        request = factory.get('/', REMOTE_ADDR='192.168.1.1')
        self.assertEqual(get_client_ip(request), '192.168.1.1')
        request = factory.get('/')
        request.META.pop('REMOTE_ADDR', None)
        self.assertEqual(get_client_ip(request), '127.0.0.1')
