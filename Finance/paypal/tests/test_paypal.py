"""
Tests for PayPal accounts, works and withdrawals.
"""
from decimal import Decimal

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from Casino.casinos.models import JuniorCasinoAssignment
from core.base.test_utils import setup_roles, create_user, create_casino
from core.job_roles.core_config import Roles
from core.notifications.models import Notification
from Finance.paypal.models import PayPalAccount, PayPalWork, PayPalWithdrawal, PayPalOperation

ACCOUNT_DATA = {
    'name': 'Main PayPal',
    'email': 'paypal@example.com',
    'password': 'secret',
    'phone_number': '+447000000000',
    'authenticator_url': 'otpauth://totp/paypal',
}


class PayPalAccountAPITest(APITestCase):
    """/finance/paypal/accounts/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/paypal/accounts/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]

    def test_create_account_defaults(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {**ACCOUNT_DATA, 'currency': 'USD'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        account = PayPalAccount.objects.get(pk=response.data['account']['id'])
        self.assertEqual(account.user, self.junior)
        self.assertEqual(account.currency, 'GBP')
        self.assertEqual(account.status, PayPalAccount.STATUS_ACTIVE)

    def test_missing_fields(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {'name': 'Only name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required fields')
        self.assertIn('authenticator_url', response.data['details'])

    def test_list_scoped_for_teamlead(self):
        PayPalAccount.objects.create(user=self.junior, **ACCOUNT_DATA)
        PayPalAccount.objects.create(user=create_user(Roles.JUNIOR), **ACCOUNT_DATA)
        self.client.force_authenticate(user=self.users[Roles.TEAMLEAD])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        self.client.force_authenticate(user=self.users[Roles.CFO])
        self.assertEqual(self.client.get(self.url).data['count'], 2)

    def test_update_own_account(self):
        account = PayPalAccount.objects.create(user=self.junior, **ACCOUNT_DATA)
        self.client.force_authenticate(user=self.junior)
        url = f'{self.url}{account.pk}/'

        response = self.client.patch(url, {'balance': '42.50', 'info': 'Verified'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        account.refresh_from_db()
        self.assertEqual(account.balance, Decimal('42.50'))
        self.assertEqual(account.info, 'Verified')

        response = self.client.put(url, {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required fields')

        response = self.client.put(url, {**ACCOUNT_DATA, 'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        account.refresh_from_db()
        self.assertEqual(account.name, 'Renamed')

    def test_delete_blocks_account(self):
        account = PayPalAccount.objects.create(user=self.junior, **ACCOUNT_DATA)
        self.client.force_authenticate(user=self.junior)
        response = self.client.delete(f'{self.url}{account.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        account.refresh_from_db()
        self.assertEqual(account.status, PayPalAccount.STATUS_BLOCKED)

    def test_foreign_account_untouchable(self):
        account = PayPalAccount.objects.create(user=create_user(Roles.JUNIOR), **ACCOUNT_DATA)
        url = f'{self.url}{account.pk}/'
        self.client.force_authenticate(user=self.junior)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(url, {'balance': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        account.refresh_from_db()
        self.assertEqual(account.status, PayPalAccount.STATUS_ACTIVE)
        self.assertEqual(self.client.delete(f'{self.url}99999/').status_code, status.HTTP_403_FORBIDDEN)


class PayPalWorkAPITest(APITestCase):
    """/finance/paypal/works/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/paypal/works/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.account = PayPalAccount.objects.create(user=self.junior, **ACCOUNT_DATA)
        self.casino = create_casino()
        self.data = {
            'paypal_account_id': self.account.pk,
            'casino_id': self.casino.pk,
            'casino_email': 'player@example.com',
            'casino_password': 'secret',
            'deposit_amount': '20.00',
        }
        self.client.force_authenticate(user=self.junior)

    def test_casino_must_be_assigned(self):
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Casino is not assigned to you')

        JuniorCasinoAssignment.objects.create(junior=self.junior, casino=self.casino)
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PayPalWork.objects.filter(junior=self.junior).count(), 1)

    def test_blocked_account(self):
        self.account.status = PayPalAccount.STATUS_BLOCKED
        self.account.save()
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_account_not_found(self):
        other = PayPalAccount.objects.create(user=create_user(Roles.JUNIOR), **ACCOUNT_DATA)
        self.data['paypal_account_id'] = other.pk
        response = self.client.post(self.url, self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PayPalWithdrawalAPITest(APITestCase):
    """/finance/paypal/withdrawals/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/paypal/withdrawals/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        account = PayPalAccount.objects.create(user=self.junior, **ACCOUNT_DATA)
        self.work = PayPalWork.objects.create(
            junior=self.junior,
            paypal_account=account,
            casino=create_casino(),
            casino_email='player@example.com',
            casino_password='secret',
            deposit_amount=Decimal('10.00'),
        )

    def test_create_withdrawal(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {'work_id': self.work.pk, 'withdrawal_amount': '75.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['withdrawal']['profit'], '65.00')
        withdrawal = PayPalWithdrawal.objects.get(pk=response.data['withdrawal']['id'])
        self.assertEqual(withdrawal.status, PayPalWithdrawal.STATUS_NEW)
        self.assertEqual(withdrawal.casino, self.work.casino)
        notification = Notification.objects.get(user=self.users[Roles.MANAGER])
        self.assertEqual(notification.metadata['source_type'], 'paypal')

    def test_amount_limited_to_ten_times_deposit(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {'work_id': self.work.pk, 'withdrawal_amount': '100.01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'work_id': self.work.pk, 'withdrawal_amount': '100.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_for_reviewers(self):
        PayPalWithdrawal.objects.create(
            work=self.work, user=self.junior, paypal_account=self.work.paypal_account,
            casino=self.work.casino, withdrawal_amount=Decimal('30.00'),
        )
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.get(self.url, {'user_id': self.junior.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cfo_block(self):
        withdrawal = PayPalWithdrawal.objects.create(
            work=self.work, user=self.junior, paypal_account=self.work.paypal_account,
            casino=self.work.casino, withdrawal_amount=Decimal('30.00'),
        )
        url = f'/finance/paypal/withdrawals/{withdrawal.pk}/cfo-comment/'
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.post(url, {'action': 'block'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'comment': 'Chargeback risk', 'action': 'block'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        withdrawal.refresh_from_db()
        self.assertEqual(withdrawal.status, PayPalWithdrawal.STATUS_BLOCKED)
        self.assertEqual(withdrawal.cfo_comment, 'Chargeback risk')
        self.assertEqual(withdrawal.checked_by_cfo, self.users[Roles.CFO])


class PayPalOperationAPITest(APITestCase):
    """/finance/paypal/operations/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/paypal/operations/'
        self.users = setup_roles()
        self.junior = self.users[Roles.JUNIOR]
        self.account = PayPalAccount.objects.create(user=self.junior, balance=Decimal('50.00'), **ACCOUNT_DATA)

    def _operation(self, **extra):
        values = {
            'paypal_account': self.account,
            'junior': self.junior,
            'operation_type': PayPalOperation.TYPE_RECEIVE_MONEY,
            'amount': Decimal('20.00'),
        }
        values.update(extra)
        return PayPalOperation.objects.create(**values)

    def test_create_operation(self):
        self.client.force_authenticate(user=self.junior)
        response = self.client.post(self.url, {
            'paypal_account_id': self.account.pk,
            'operation_type': PayPalOperation.TYPE_CASINO_DEPOSIT,
            'amount': '30.00',
            'casino_name': 'Lucky Star',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        operation = PayPalOperation.objects.get(pk=response.data['operation']['id'])
        self.assertEqual(operation.junior, self.junior)
        self.assertEqual(operation.status, PayPalOperation.STATUS_PENDING)
        self.assertEqual(operation.currency, self.account.currency)

    def test_debit_needs_balance(self):
        self.client.force_authenticate(user=self.junior)
        data = {
            'paypal_account_id': self.account.pk,
            'operation_type': PayPalOperation.TYPE_SEND_MONEY,
            'amount': '50.01',
        }
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient balance')

        data['operation_type'] = PayPalOperation.TYPE_RECEIVE_MONEY
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_create_on_foreign_account(self):
        other = PayPalAccount.objects.create(user=create_user(Roles.JUNIOR), **ACCOUNT_DATA)
        self.client.force_authenticate(user=self.junior)
        data = {'paypal_account_id': other.pk, 'operation_type': 'receive_money', 'amount': '5.00'}
        self.assertEqual(self.client.post(self.url, data, format='json').status_code, status.HTTP_403_FORBIDDEN)
        data['paypal_account_id'] = 99999
        self.assertEqual(self.client.post(self.url, data, format='json').status_code, status.HTTP_404_NOT_FOUND)
        data['operation_type'] = 'teleport'
        self.assertEqual(self.client.post(self.url, data, format='json').status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_scope_and_stats(self):
        self._operation(status=PayPalOperation.STATUS_COMPLETED, amount=Decimal('15.00'))
        self._operation(operation_type=PayPalOperation.TYPE_SEND_MONEY)
        other = create_user(Roles.JUNIOR)
        other_account = PayPalAccount.objects.create(user=other, **ACCOUNT_DATA)
        self._operation(paypal_account=other_account, junior=other)

        self.client.force_authenticate(user=self.junior)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        stats = self.client.get(f'{self.url}stats/').data['stats']
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['pending'], 1)
        self.assertEqual(stats['completed'], 1)
        self.assertEqual(Decimal(stats['totalAmount']), Decimal('15.00'))
        self.assertEqual(stats['byType'], {'receive_money': 1, 'send_money': 1})

        self.client.force_authenticate(user=self.users[Roles.CFO])
        self.assertEqual(self.client.get(self.url).data['count'], 3)
        response = self.client.get(self.url, {'operation_type': 'send_money'})
        self.assertEqual(response.data['count'], 1)

    def test_junior_can_only_cancel_pending(self):
        operation = self._operation()
        url = f'{self.url}{operation.pk}/'
        self.client.force_authenticate(user=self.junior)

        response = self.client.patch(url, {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['details'], 'Junior can only cancel pending operations')

        response = self.client.patch(url, {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        operation.refresh_from_db()
        self.assertEqual(operation.status, PayPalOperation.STATUS_CANCELLED)

        response = self.client.patch(url, {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reviewer_completes_operation(self):
        operation = self._operation()
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.patch(f'{self.url}{operation.pk}/', {
            'status': 'completed', 'transaction_id': 'TX-1', 'fee_amount': '0.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        operation.refresh_from_db()
        self.assertEqual(operation.status, PayPalOperation.STATUS_COMPLETED)
        self.assertEqual(operation.fee_amount, Decimal('0.50'))
        self.assertIsNotNone(operation.completed_at)

        response = self.client.patch(f'{self.url}{operation.pk}/', {'status': 'settled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_hidden_from_other_junior(self):
        operation = self._operation()
        self.client.force_authenticate(user=create_user(Roles.JUNIOR))
        response = self.client.get(f'{self.url}{operation.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.get(f'{self.url}{operation.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(f'{self.url}{operation.pk}/', {'status': 'failed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_rules(self):
        pending = self._operation()
        completed = self._operation(status=PayPalOperation.STATUS_COMPLETED)

        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        self.assertEqual(self.client.delete(f'{self.url}{pending.pk}/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.delete(f'{self.url}{completed.pk}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete completed operation')
        self.assertEqual(self.client.delete(f'{self.url}{pending.pk}/').status_code, status.HTTP_200_OK)
        self.assertFalse(PayPalOperation.objects.filter(pk=pending.pk).exists())
