"""
Tests for notification delivery and the notifications endpoint.
"""
from datetime import timedelta

from django.utils import timezone
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.base.test_utils import create_user, setup_roles
from core.job_roles.core_config import Roles, UserStatus
from core.notifications.models import Notification
from core.notifications.services import send_notification, mark_as_read


class SendNotificationTest(APITestCase):

    def test_only_active_recipients(self):
        active = create_user(Roles.JUNIOR)
        inactive = create_user(Roles.JUNIOR, status=UserStatus.INACTIVE)
        created = send_notification([active.pk, inactive.pk, None], 'info', 'Hello', 'World')
        self.assertEqual(created, 1)
        self.assertTrue(Notification.objects.filter(user=active).exists())
        self.assertFalse(Notification.objects.filter(user=inactive).exists())

    def test_default_expiry(self):
        user = create_user(Roles.JUNIOR)
        send_notification([user.pk], 'info', 'Hello', 'World')
        notification = Notification.objects.get(user=user)
        self.assertGreater(notification.expires_at, timezone.now() + timedelta(days=29))
        self.assertEqual(notification.priority, Notification.PRIORITY_NORMAL)

    def test_mark_as_read(self):
        user = create_user(Roles.JUNIOR)
        send_notification([user.pk], 'info', 'One', 'x')
        send_notification([user.pk], 'info', 'Two', 'x')
        first = Notification.objects.filter(user=user).last()
        self.assertEqual(mark_as_read(user, [first.pk]), 1)
        self.assertEqual(mark_as_read(user), 1)
        self.assertFalse(Notification.objects.filter(user=user, is_read=False).exists())


class NotificationsAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/core/notifications/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        for i in range(3):
            send_notification([self.junior.pk], 'task', f'Task {i}', 'body')
        send_notification([self.junior.pk], 'withdrawal', 'Withdrawal', 'body')
        expired = Notification.objects.create(
            user=self.junior, type='task', title='Old', message='old',
            expires_at=timezone.now() - timedelta(days=1)
        )
        self.expired_id = expired.pk

    def test_list_own_notifications(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url, {'limit': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['notifications']), 2)
        self.assertEqual(response.data['unread_count'], 4)
        self.assertTrue(response.data['pagination']['has_more'])
        ids = [n['id'] for n in response.data['notifications']]
        self.assertNotIn(self.expired_id, ids)

    def test_filter_by_type(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url, {'type': 'withdrawal'})
        self.assertEqual(len(response.data['notifications']), 1)
        self.assertFalse(response.data['pagination']['has_more'])

    def test_send_as_teamlead(self):
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        data = {'user_ids': [self.junior.pk], 'type': 'call', 'title': 'Standup', 'message': 'Now'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_count'], 1)
        notification = Notification.objects.get(type='call')
        self.assertEqual(notification.sender, self.users[Roles.TEAMLEAD])

    def test_send_requires_fields(self):
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.post(self.url, {'user_ids': [], 'type': 'x', 'title': 't', 'message': 'm'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'user_ids': [self.junior.pk], 'type': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_without_active_recipients(self):
        inactive = create_user(Roles.JUNIOR, status=UserStatus.INACTIVE)
        self.client.force_authenticate(user=self.users[Roles.HR])
        data = {'user_ids': [inactive.pk], 'type': 'x', 'title': 't', 'message': 'm'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_send_denied_for_junior(self):
        self.client.force_authenticate(user=self.junior)
        data = {'user_ids': [self.junior.pk], 'type': 'x', 'title': 't', 'message': 'm'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_mark_all_read(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(self.url, {'mark_all': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated_count'], 5)

    def test_mark_selected_read(self):
        self.client.force_authenticate(user=self.junior)
        ids = list(Notification.objects.filter(user=self.junior, type='task').values_list('pk', flat=True)[:2])
        response = self.client.patch(self.url, {'notification_ids': ids}, format='json')
        self.assertEqual(response.data['updated_count'], 2)

    def test_patch_requires_target(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(self.url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
