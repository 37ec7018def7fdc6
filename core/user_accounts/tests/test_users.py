"""
Tests for user management and the own-profile endpoint.
"""
from rest_framework.test import APITestCase, APIClient
from rest_framework import status
from django.contrib.auth import get_user_model

from core.action_history.models import ActionHistory
from core.base.test_utils import create_user, setup_roles
from core.job_roles.core_config import Roles, UserStatus

User = get_user_model()


class UserListCreateAPITest(APITestCase):
    """GET/POST /core/users/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/core/users/'
        self.users = setup_roles()

    def test_list_users_as_manager(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['users']), User.objects.count())
        junior = next(u for u in response.data['users'] if u['role'] == Roles.JUNIOR)
        self.assertEqual(junior['team_lead_name'], self.users[Roles.TEAMLEAD].display_name)

    def test_list_users_denied_for_junior(self):
        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Access denied')

    def test_list_users_unauthenticated(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_manager_is_denied(self):
        manager = create_user(Roles.MANAGER, status=UserStatus.INACTIVE)
        self.client.force_authenticate(user=manager)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_user(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        data = {'email': 'new@example.com', 'password': 'Secret123', 'role': Roles.JUNIOR}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='new@example.com')
        self.assertEqual(user.status, UserStatus.ACTIVE)
        self.assertEqual(user.salary_percentage, 0)
        self.assertTrue(ActionHistory.objects.filter(action_type='user_created', entity_id=str(user.pk)).exists())

    def test_create_user_missing_role(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        data = {'email': 'new@example.com', 'password': 'Secret123'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_user_unknown_role(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        data = {'email': 'new@example.com', 'password': 'Secret123', 'role': 'wizard'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admin_creates_protected_roles(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        data = {'email': 'boss@example.com', 'password': 'Secret123', 'role': Roles.CEO}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_create_duplicate_email(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        data = {'email': self.users[Roles.JUNIOR].email, 'password': 'Secret123', 'role': Roles.JUNIOR}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class UserDetailAPITest(APITestCase):
    """GET/PATCH/DELETE /core/users/{id}/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.url = f'/core/users/{self.junior.pk}/'

    def test_get_self(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['email'], self.junior.email)

    def test_get_other_user_denied(self):
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_get_unknown_user(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.get('/core/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_patch_role_and_status(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.patch(self.url, {'role': Roles.TESTER, 'status': UserStatus.INACTIVE}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.junior.refresh_from_db()
        self.assertEqual(self.junior.role, Roles.TESTER)
        self.assertEqual(self.junior.status, UserStatus.INACTIVE)

    def test_patch_rejects_ceo_role(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.patch(self.url, {'role': Roles.CEO}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_rejects_unknown_status(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.patch(self.url, {'status': 'sleeping'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_denied_for_manager(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.patch(self.url, {'first_name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_admin_only(self):
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.junior.pk).exists())

    def test_delete_unknown_user(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.delete('/core/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ProfileAPITest(APITestCase):
    """GET/PATCH /core/users/me/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/core/users/me/'
        self.user = create_user(Roles.JUNIOR, telegram_username='old_name')
        self.client.force_authenticate(user=self.user)

    def test_get_profile(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], self.user.pk)

    def test_update_profile(self):
        data = {
            'name': 'Jane',
            'surname': 'Doe',
            'telegram_username': '@jane_doe',
            'usdt_wallet': '0x' + 'a' * 40,
        }
        response = self.client.patch(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Jane')
        self.assertEqual(self.user.telegram_username, 'jane_doe')
        self.assertEqual(self.user.usdt_wallet, '0x' + 'a' * 40)

    def test_blank_value_clears_field(self):
        response = self.client.patch(self.url, {'telegram_username': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertIsNone(self.user.telegram_username)

    def test_invalid_telegram_username(self):
        response = self.client.patch(self.url, {'telegram_username': 'ab'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_wallet(self):
        response = self.client.patch(self.url, {'usdt_wallet': 'TXYZ123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
