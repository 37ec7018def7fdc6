"""
Tests for handing banks to team leads.
"""
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.action_history.models import ActionHistory
from core.base.test_utils import setup_roles, create_user
from core.job_roles.core_config import Roles, UserStatus
from core.notifications.models import Notification
from Finance.cash_management.models import Bank, BankTeamleadAssignment


class BankAssignmentAPITest(APITestCase):
    """/finance/bank-assignments/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/bank-assignments/'
        self.users = setup_roles()
        self.teamlead = self.users[Roles.TEAMLEAD]
        self.bank = Bank.objects.create(name='Revolut', currency='EUR')

    def _assign(self, user, **data):
        self.client.force_authenticate(user=user)
        payload = {'bank_id': self.bank.pk, 'teamlead_id': self.teamlead.pk}
        payload.update(data)
        return self.client.post(self.url, payload, format='json')

    def test_assign_bank(self):
        response = self._assign(self.users[Roles.CFO], notes='  For new juniors  ')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['assignment']['bank_name'], 'Revolut')
        self.assertEqual(response.data['assignment']['teamlead_email'], self.teamlead.email)

        assignment = BankTeamleadAssignment.objects.get(bank=self.bank)
        self.assertEqual(assignment.notes, 'For new juniors')
        self.assertEqual(assignment.assigned_by, self.users[Roles.CFO])
        self.assertTrue(
            Notification.objects.filter(user=self.teamlead, type='bank_assignment').exists()
        )
        self.assertTrue(ActionHistory.objects.filter(action_type='bank_assigned').exists())

    def test_blank_notes_stored_as_null(self):
        self._assign(self.users[Roles.MANAGER], notes='   ')
        self.assertIsNone(BankTeamleadAssignment.objects.get(bank=self.bank).notes)

    def test_ids_required(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post(self.url, {'bank_id': self.bank.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'bank_id and teamlead_id are required')

    def test_bank_assigned_once(self):
        self._assign(self.users[Roles.MANAGER])
        other_lead = create_user(Roles.TEAMLEAD)
        response = self._assign(self.users[Roles.MANAGER], teamlead_id=other_lead.pk)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Bank is already assigned to a Team Lead')

    def test_assignee_must_be_active_teamlead(self):
        response = self._assign(self.users[Roles.ADMIN], teamlead_id=self.users[Roles.JUNIOR].pk)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        inactive_lead = create_user(Roles.TEAMLEAD, status=UserStatus.INACTIVE)
        response = self._assign(self.users[Roles.ADMIN], teamlead_id=inactive_lead.pk)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_bank(self):
        self.bank.deactivate()
        response = self._assign(self.users[Roles.TESTER])
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(BankTeamleadAssignment.objects.exists())

    def test_hr_can_list_but_not_assign(self):
        BankTeamleadAssignment.objects.create(bank=self.bank, teamlead=self.teamlead)
        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self._assign(self.users[Roles.HR])
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_hides_inactive_assignments(self):
        BankTeamleadAssignment.objects.create(bank=self.bank, teamlead=self.teamlead, is_active=False)
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        self.assertEqual(self.client.get(self.url).data['count'], 0)

    def test_teamlead_denied(self):
        self.client.force_authenticate(user=self.teamlead)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
