"""
Tests for junior works and their withdrawals.
"""
from decimal import Decimal

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from Casino.works.models import Work, WorkWithdrawal, WorkStatusHistory
from core.action_history.models import ActionHistory
from core.base.test_utils import setup_roles, create_user, create_bank_account, create_card, create_casino
from core.job_roles.core_config import Roles
from core.notifications.models import Notification


class WorkAPITest(APITestCase):
    """/casino/works/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/casino/works/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.casino = create_casino(status='approved')
        self.card = create_card(assigned_to=self.junior)
        self.data = {'casino_id': self.casino.pk, 'card_id': self.card.pk, 'deposit_amount': '50.00'}

    def test_create_work(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        work = Work.objects.get(pk=response.data['work']['id'])
        self.assertEqual(work.status, Work.STATUS_ACTIVE)
        self.assertEqual(work.junior, self.junior)
        self.assertTrue(WorkStatusHistory.objects.filter(work=work, new_status=Work.STATUS_ACTIVE).exists())
        self.assertTrue(ActionHistory.objects.filter(action_type='work_created').exists())

    def test_casino_must_be_approved(self):
        self.casino.status = 'testing'
        self.casino.save()
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_card_must_be_own(self):
        self.card.assign_to(create_user(Roles.JUNIOR))
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_low_balance_account_refused(self):
        account = create_bank_account(balance='5.00')
        card = create_card(account, assigned_to=self.junior, status='active')
        self.data['card_id'] = card.pk
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Account balance is too low for new works')

    def test_manager_cannot_create(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_scoped_by_role(self):
        Work.objects.create(junior=self.junior, casino=self.casino, card=self.card, deposit_amount=Decimal('10'))
        outsider = create_user(Roles.JUNIOR)
        Work.objects.create(
            junior=outsider, casino=self.casino, card=create_card(assigned_to=outsider), deposit_amount=Decimal('10')
        )

        self.client.force_authenticate(user=self.junior)
        self.assertEqual(self.client.get(self.url).data['count'], 1)
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        self.assertEqual(self.client.get(self.url).data['count'], 1)
        self.client.force_authenticate(user=self.users[Roles.HR])
        self.assertEqual(self.client.get(self.url).data['count'], 2)


class WorkDetailAPITest(APITestCase):
    """/casino/works/{id}/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.work = Work.objects.create(
            junior=self.junior,
            casino=create_casino(),
            card=create_card(assigned_to=self.junior),
            deposit_amount=Decimal('20.00'),
        )
        self.url = f'/casino/works/{self.work.pk}/'

    def test_complete_needs_received_withdrawal(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.patch(self.url, {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        WorkWithdrawal.objects.create(work=self.work, withdrawal_amount=Decimal('80.00'), status='received')
        response = self.client.patch(self.url, {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['work']['total_profit'], '60.00')
        self.assertTrue(
            WorkStatusHistory.objects.filter(work=self.work, new_status=Work.STATUS_COMPLETED).exists()
        )

    def test_delete_refused_with_waiting_withdrawal(self):
        WorkWithdrawal.objects.create(work=self.work, withdrawal_amount=Decimal('30.00'), status='waiting')
        self.client.force_authenticate(user=self.junior)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Work.objects.filter(pk=self.work.pk).exists())

    def test_delete_own_work(self):
        WorkWithdrawal.objects.create(work=self.work, withdrawal_amount=Decimal('30.00'), status='problem')
        self.client.force_authenticate(user=self.junior)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Work.objects.filter(pk=self.work.pk).exists())

    def test_other_junior_denied(self):
        self.client.force_authenticate(user=create_user(Roles.JUNIOR))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class WorkWithdrawalAPITest(APITestCase):
    """Junior requests, manager checks, HR and CFO comment."""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.work = Work.objects.create(
            junior=self.junior,
            casino=create_casino(),
            card=create_card(assigned_to=self.junior),
            deposit_amount=Decimal('20.00'),
        )

    def _request(self, amount='100.00'):
        self.client.force_authenticate(user=self.junior)
        return self.client.post(
            '/casino/work-withdrawals/', {'work_id': self.work.pk, 'withdrawal_amount': amount}, format='json'
        )

    def test_request_notifies_reviewers(self):
        response = self._request()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        withdrawal = WorkWithdrawal.objects.get(pk=response.data['withdrawal']['id'])
        self.assertEqual(withdrawal.status, WorkWithdrawal.STATUS_NEW)
        self.assertEqual(withdrawal.status_history.count(), 1)
        self.assertTrue(Notification.objects.filter(user=self.users[Roles.MANAGER], type='withdrawal').exists())
        self.assertTrue(Notification.objects.filter(user=self.users[Roles.TEAMLEAD], type='withdrawal').exists())

    def test_one_pending_withdrawal_per_work(self):
        self._request()
        response = self._request()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'This work already has a pending withdrawal')

    def test_manager_check(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(
            f'/casino/withdrawals/{withdrawal_id}/check/', {'action': 'received', 'comment': 'OK'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        withdrawal = WorkWithdrawal.objects.get(pk=withdrawal_id)
        self.assertEqual(withdrawal.status, WorkWithdrawal.STATUS_RECEIVED)
        self.assertEqual(withdrawal.checked_by, self.users[Roles.MANAGER])
        self.assertEqual(withdrawal.manager_comment, 'OK')

        response = self.client.post(f'/casino/withdrawals/{withdrawal_id}/check/', {'action': 'block'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_has_history(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        response = self.client.get(f'/casino/withdrawals/{withdrawal_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['history']), 1)

    def test_hr_comment_can_be_cleared(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        self.client.force_authenticate(user=self.users[Roles.HR])
        url = f'/casino/withdrawals/{withdrawal_id}/hr-comment/'
        self.client.patch(url, {'hr_comment': 'Check documents'}, format='json')
        self.assertEqual(WorkWithdrawal.objects.get(pk=withdrawal_id).hr_comment, 'Check documents')

        response = self.client.patch(url, {'hr_comment': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(WorkWithdrawal.objects.get(pk=withdrawal_id).hr_comment)

    def test_cfo_block(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        self.client.force_authenticate(user=self.users[Roles.CFO])
        url = f'/casino/withdrawals/{withdrawal_id}/cfo-comment/'
        response = self.client.post(url, {'action': 'block'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'action': 'block', 'comment': 'Fraud'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        withdrawal = WorkWithdrawal.objects.get(pk=withdrawal_id)
        self.assertEqual(withdrawal.status, WorkWithdrawal.STATUS_BLOCKED)
        self.assertEqual(withdrawal.cfo_comment, 'Fraud')

    def test_list_for_junior(self):
        self._request()
        self.client.force_authenticate(user=create_user(Roles.JUNIOR))
        response = self.client.get('/casino/withdrawals/')
        self.assertEqual(response.data['count'], 0)

    def test_junior_edits_new_withdrawal(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        url = f'/casino/work-withdrawals/{withdrawal_id}/'
        response = self.client.patch(url, {'withdrawal_amount': '80.00', 'comment': 'Partial'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        withdrawal = WorkWithdrawal.objects.get(pk=withdrawal_id)
        self.assertEqual(withdrawal.withdrawal_amount, Decimal('80.00'))
        self.assertEqual(withdrawal.comment, 'Partial')
        self.assertTrue(ActionHistory.objects.filter(action_type='withdrawal_updated').exists())

        response = self.client.patch(url, {'withdrawal_amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_junior_deletes_new_withdrawal(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        response = self.client.delete(f'/casino/work-withdrawals/{withdrawal_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(WorkWithdrawal.objects.filter(pk=withdrawal_id).exists())

    def test_reviewed_withdrawal_is_locked(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        WorkWithdrawal.objects.filter(pk=withdrawal_id).update(status=WorkWithdrawal.STATUS_WAITING)
        url = f'/casino/work-withdrawals/{withdrawal_id}/'

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only new withdrawals can be changed')
        response = self.client.patch(url, {'withdrawal_amount': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(WorkWithdrawal.objects.get(pk=withdrawal_id).withdrawal_amount, Decimal('100.00'))

    def test_other_junior_cannot_change_withdrawal(self):
        withdrawal_id = self._request().data['withdrawal']['id']
        url = f'/casino/work-withdrawals/{withdrawal_id}/'
        self.client.force_authenticate(user=create_user(Roles.JUNIOR))
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(WorkWithdrawal.objects.filter(pk=withdrawal_id).exists())
