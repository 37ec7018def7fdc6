"""
Tests for casinos, tester test works and the manager review of test withdrawals.
"""
from decimal import Decimal

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from Casino.casinos import models
from Casino.casinos.models import Casino, CasinoTest, CardCasinoAssignment, JuniorCasinoAssignment
from core.action_history.models import ActionHistory
from core.base.test_utils import setup_roles, create_user, create_card, create_casino
from core.job_roles.core_config import Roles


class CasinoAPITest(APITestCase):
    """/casino/casinos/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/casino/casinos/'
        self.users = setup_roles()

    def test_create_casino_guesses_currency(self):
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        data = {'name': 'Virgin Games', 'url': 'https://virgingames.example.com'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        casino = Casino.objects.get(name='Virgin Games')
        self.assertEqual(casino.currency, 'GBP')
        self.assertEqual(casino.status, Casino.STATUS_NEW)
        self.assertTrue(ActionHistory.objects.filter(action_type='casino_created').exists())

    def test_create_requires_name_and_url(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(self.url, {'name': 'No url'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'name and url are required')

    def test_junior_cannot_create(self):
        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        response = self.client.post(self.url, {'name': 'X', 'url': 'https://x.example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters_by_status(self):
        create_casino(status='approved')
        create_casino(status='new')
        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        response = self.client.get(self.url, {'status': 'approved'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['status'], 'approved')

    def test_only_admin_deletes(self):
        casino = create_casino()
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.delete(f'{self.url}{casino.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.delete(f'{self.url}{casino.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Casino.objects.filter(pk=casino.pk).exists())

    def test_missing_casino(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.get(f'{self.url}99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CasinoAssignJuniorAPITest(APITestCase):
    """POST /casino/casinos/{id}/assign-junior/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.casino = create_casino()
        self.url = f'/casino/casinos/{self.casino.pk}/assign-junior/'

    def test_teamlead_assigns_own_junior(self):
        junior = self.users[Roles.JUNIOR]
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        response = self.client.post(self.url, {'junior_id': junior.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(JuniorCasinoAssignment.objects.filter(junior=junior, casino=self.casino).exists())

        response = self.client.post(self.url, {'junior_id': junior.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_teamlead_cannot_assign_other_junior(self):
        outsider = create_user(Roles.JUNIOR)
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        response = self.client.post(self.url, {'junior_id': outsider.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CasinoTestAPITest(APITestCase):
    """/casino/casino-tests/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.casino = create_casino(status='new')

    def test_start_test_moves_casino_to_testing(self):
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.post('/casino/casino-tests/', {'casino_id': self.casino.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.casino.refresh_from_db()
        self.assertEqual(self.casino.status, Casino.STATUS_TESTING)

        response = self.client.post('/casino/casino-tests/', {'casino_id': self.casino.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Casino already has an active test')

    def test_complete_test_sets_casino_result(self):
        test = CasinoTest.objects.create(casino=self.casino, tester=self.users[Roles.TESTER])
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.patch(
            f'/casino/casino-tests/{test.pk}/',
            {'status': 'completed', 'test_result': 'rejected', 'rating': 3},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.casino.refresh_from_db()
        self.assertEqual(self.casino.status, Casino.STATUS_REJECTED)

    def test_other_tester_cannot_update(self):
        test = CasinoTest.objects.create(casino=self.casino, tester=self.users[Roles.TESTER])
        self.client.force_authenticate(user=create_user(Roles.TESTER))
        response = self.client.patch(f'/casino/casino-tests/{test.pk}/', {'rating': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_tester_lists_own_tests(self):
        CasinoTest.objects.create(casino=self.casino, tester=self.users[Roles.TESTER])
        CasinoTest.objects.create(casino=create_casino(), tester=create_user(Roles.TESTER))
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.get('/casino/casino-tests/')
        self.assertEqual(len(response.data['tests']), 1)


class TestWorkFlowAPITest(APITestCase):
    """Tester work, its withdrawal and the manager decision."""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.tester = self.users[Roles.TESTER]
        self.casino = create_casino(status='testing')
        self.card = create_card()
        CardCasinoAssignment.objects.create(card=self.card, casino=self.casino, assigned_by=self.tester)

    def _create_work(self):
        self.client.force_authenticate(user=self.tester)
        data = {
            'casino_id': self.casino.pk,
            'card_id': self.card.pk,
            'login': 'player1',
            'password': 'secret',
            'deposit_amount': '20.00',
        }
        return self.client.post('/casino/test-works/', data, format='json')

    def test_create_work_requires_casino_assignment(self):
        CardCasinoAssignment.objects.all().delete()
        response = self._create_work()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Card is not assigned to this casino')

    def test_create_work_missing_fields(self):
        self.client.force_authenticate(user=self.tester)
        response = self.client.post('/casino/test-works/', {'casino_id': self.casino.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('details', response.data)

    def test_withdrawal_approved_by_manager(self):
        response = self._create_work()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        work_id = response.data['work']['id']

        response = self.client.post(
            '/casino/test-works/withdrawal/', {'work_id': work_id, 'withdrawal_amount': '35.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        withdrawal_id = response.data['withdrawal']['id']

        response = self.client.patch(
            f'/casino/test-works/{work_id}/withdrawal/', {'withdrawal_status': 'waiting'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        url = f'/casino/manager/test-withdrawals/{withdrawal_id}/'
        response = self.client.patch(url, {'action': 'approve', 'comment': 'Paid out'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        withdrawal = models.TestWithdrawal.objects.get(pk=withdrawal_id)
        self.assertEqual(withdrawal.withdrawal_status, 'approved')
        self.assertEqual(withdrawal.checked_by, self.users[Roles.MANAGER])
        self.casino.refresh_from_db()
        self.assertEqual(self.casino.status, Casino.STATUS_APPROVED)

        response = self.client.patch(url, {'action': 'reject'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['current_status'], 'approved')

    def test_manager_detail_has_tester_stats(self):
        test = CasinoTest.objects.create(casino=self.casino, tester=self.tester, card=self.card)
        withdrawal = models.TestWithdrawal.objects.create(
            test=test, withdrawal_amount=Decimal('40.00'), withdrawal_status='received'
        )
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.get(f'/casino/manager/test-withdrawals/{withdrawal.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['tester_stats']['total_tests'], 1)
        self.assertEqual(response.data['tester_stats']['total_withdrawn'], Decimal('40.00'))

    def test_invalid_tester_status(self):
        test = CasinoTest.objects.create(casino=self.casino, tester=self.tester, card=self.card)
        models.TestWithdrawal.objects.create(test=test, withdrawal_amount=Decimal('10.00'))
        self.client.force_authenticate(user=self.tester)
        response = self.client.patch(
            f'/casino/test-works/{test.pk}/withdrawal/', {'withdrawal_status': 'approved'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
