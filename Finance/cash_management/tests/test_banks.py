"""
Tests for banks, bank accounts and balance changes.
"""
from decimal import Decimal
from unittest.mock import patch

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from core.action_history.models import ActionHistory
from core.base.test_utils import setup_roles, create_bank_account, create_card
from core.job_roles.core_config import Roles
from Finance.cash_management.models import Bank, BankAccount, BankBalanceHistory, Card
from Finance.currency.services import STATIC_RATES

FALLBACK_RATES = {
    'rates': dict(STATIC_RATES),
    'source': 'fallback',
    'coefficient': 0.95,
    'cached': False,
}


@patch('Finance.cash_management.views.get_currency_rates', return_value=FALLBACK_RATES)
class BankListAPITest(APITestCase):
    """GET /finance/banks/"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/finance/banks/'
        self.users = setup_roles()
        self.account = create_bank_account(balance='100.00')
        self.low_account = create_bank_account(balance='5.00', bank=self.account.bank)
        create_card(self.account)
        create_card(self.low_account)

    def test_list_with_statistics(self, mock_rates):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['statistics']
        self.assertEqual(stats['total_banks'], 1)
        self.assertEqual(stats['total_accounts'], 2)
        self.assertEqual(stats['total_cards'], 2)
        self.assertEqual(stats['available_cards'], 1)
        self.assertEqual(stats['low_balance_accounts'], 1)
        self.assertEqual(response.data['exchange_rates']['source'], 'fallback')
        mock_rates.assert_called_once()

    def test_balance_converted_to_usd(self, mock_rates):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.get(self.url)
        expected = (Decimal('105.00') * Decimal(str(STATIC_RATES['USD']))).quantize(Decimal('0.01'))
        self.assertEqual(response.data['statistics']['total_balance_usd'], expected)

    def test_junior_denied(self, mock_rates):
        self.client.force_authenticate(user=self.users[Roles.JUNIOR])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        mock_rates.assert_not_called()


class BankWriteAPITest(APITestCase):
    """POST/PATCH/DELETE /finance/banks/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()

    def test_create_bank_as_cfo(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.post('/finance/banks/', {'name': 'Monzo', 'currency': 'GBP'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        bank = Bank.objects.get(name='Monzo')
        self.assertEqual(bank.created_by, self.users[Roles.CFO])
        self.assertTrue(ActionHistory.objects.filter(action_type='bank_created', entity_id=str(bank.pk)).exists())

    def test_create_bank_denied_for_manager(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.post('/finance/banks/', {'name': 'Monzo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_bank_name(self):
        Bank.objects.create(name='Monzo')
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.post('/finance/banks/', {'name': 'Monzo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deactivate_bank_cascades(self):
        account = create_bank_account()
        card = create_card(account)
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.patch(f'/finance/banks/{account.bank_id}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deactivation']['accounts_deactivated'], 1)
        self.assertEqual(response.data['deactivation']['cards_blocked'], 1)
        account.refresh_from_db()
        card.refresh_from_db()
        self.assertFalse(account.is_active)
        self.assertEqual(card.status, Card.STATUS_BLOCKED)

    def test_delete_active_bank_refused(self):
        account = create_bank_account()
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.delete(f'/finance/banks/{account.bank_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Deactivate the bank before deleting it')

    def test_delete_inactive_bank(self):
        account = create_bank_account()
        account.bank.deactivate()
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.delete(f'/finance/banks/{account.bank_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Bank.objects.filter(pk=account.bank_id).exists())
        self.assertFalse(BankAccount.objects.filter(pk=account.pk).exists())


class BankAccountAPITest(APITestCase):
    """/finance/bank-accounts/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.bank = Bank.objects.create(name='Starling', currency='GBP')

    def test_create_account_with_initial_balance(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        data = {'bank_id': self.bank.pk, 'holder_name': 'John Smith', 'currency': 'GBP', 'balance': '250.00'}
        response = self.client.post('/finance/bank-accounts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        account = BankAccount.objects.get(holder_name='John Smith')
        self.assertEqual(account.balance, Decimal('250.00'))
        self.assertEqual(account.balance_history.count(), 1)

    def test_create_account_requires_holder(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.post('/finance/bank-accounts/', {'bank_id': self.bank.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'bank_id and holder_name are required')

    def test_create_account_on_inactive_bank(self):
        self.bank.deactivate()
        self.client.force_authenticate(user=self.users[Roles.CFO])
        data = {'bank_id': self.bank.pk, 'holder_name': 'John Smith'}
        response = self.client.post('/finance/bank-accounts/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_search_and_active_filter(self):
        BankAccount.objects.create(bank=self.bank, holder_name='John Smith', account_number='12345678')
        BankAccount.objects.create(bank=self.bank, holder_name='Mary Jones', is_active=False)
        self.client.force_authenticate(user=self.users[Roles.MANAGER])

        response = self.client.get('/finance/bank-accounts/', {'search': 'smith'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(self.client.get('/finance/bank-accounts/', {'search': 'starl'}).data['count'], 2)
        self.assertEqual(self.client.get('/finance/bank-accounts/', {'is_active': 'false'}).data['count'], 1)

    def test_block_account_blocks_cards(self):
        account = create_bank_account(bank=self.bank)
        card = create_card(account)
        self.client.force_authenticate(user=self.users[Roles.ADMIN])
        response = self.client.patch(f'/finance/bank-accounts/{account.pk}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        card.refresh_from_db()
        self.assertEqual(card.status, Card.STATUS_BLOCKED)
        self.assertTrue(ActionHistory.objects.filter(action_type='account_blocked').exists())


class BalanceAPITest(APITestCase):
    """GET/PATCH /finance/bank-accounts/{id}/balance/"""

    def setUp(self):
        self.client = APIClient()
        self.users = setup_roles()
        self.account = create_bank_account(balance='50.00')
        self.card = create_card(self.account)
        self.url = f'/finance/bank-accounts/{self.account.pk}/balance/'

    def test_low_balance_hides_cards(self):
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.patch(self.url, {'balance': '9.99', 'comment': 'Spent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['account']['cards_available'])
        self.assertEqual(response.data['account']['change_amount'], Decimal('-40.01'))
        self.assertEqual(response.data['cards_status'], {'available': 0, 'hidden': 1})
        self.card.refresh_from_db()
        self.assertEqual(self.card.status, Card.STATUS_LOW_BALANCE)

        entry = BankBalanceHistory.objects.get(bank_account=self.account)
        self.assertEqual(entry.old_balance, Decimal('50.00'))
        self.assertEqual(entry.change_reason, 'Spent')
        self.assertEqual(entry.changed_by, self.users[Roles.MANAGER])

    def test_top_up_restores_cards(self):
        self.account.set_balance('1.00')
        self.card.refresh_from_db()
        self.assertEqual(self.card.status, Card.STATUS_LOW_BALANCE)

        self.client.force_authenticate(user=self.users[Roles.HR])
        response = self.client.patch(self.url, {'balance': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cards_status'], {'available': 1, 'hidden': 0})
        self.card.refresh_from_db()
        self.assertEqual(self.card.status, Card.STATUS_ACTIVE)

    def test_blocked_card_stays_blocked(self):
        self.card.status = Card.STATUS_BLOCKED
        self.card.save()
        self.client.force_authenticate(user=self.users[Roles.CFO])
        self.client.patch(self.url, {'balance': '1.00'}, format='json')
        self.client.patch(self.url, {'balance': '500.00'}, format='json')
        self.card.refresh_from_db()
        self.assertEqual(self.card.status, Card.STATUS_BLOCKED)

    def test_negative_balance_rejected(self):
        self.client.force_authenticate(user=self.users[Roles.CFO])
        response = self.client.patch(self.url, {'balance': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_history(self):
        self.account.set_balance('70.00', user=self.users[Roles.CFO], reason='Top up')
        self.client.force_authenticate(user=self.users[Roles.MANAGER])
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['history']), 1)
        self.assertEqual(response.data['history'][0]['changed_by_user']['role'], Roles.CFO)

    def test_tester_cannot_change_balance(self):
        self.client.force_authenticate(user=self.users[Roles.TESTER])
        response = self.client.patch(self.url, {'balance': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
