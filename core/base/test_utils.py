from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from core.job_roles.core_config import Roles, UserStatus

DEFAULT_PASSWORD = 'TestPass123'

_counter = {'value': 0}


def create_user(role=Roles.JUNIOR, status=UserStatus.ACTIVE, email=None, **extra):
    """Create a user with the given role; emails are unique per call"""
    User = get_user_model()
    if email is None:
        _counter['value'] += 1
        email = f"{role}{_counter['value']}@example.com"
    extra.setdefault('first_name', role.title())
    extra.setdefault('last_name', 'User')
    return User.objects.create_user(
        email=email,
        password=DEFAULT_PASSWORD,
        role=role,
        status=status,
        **extra
    )


def setup_roles():
    """One active user per common role, keyed by role string"""
    users = {
        role: create_user(role)
        for role in (
            Roles.ADMIN, Roles.MANAGER, Roles.HR, Roles.CFO,
            Roles.TESTER, Roles.TEAMLEAD, Roles.CEO,
        )
    }
    users[Roles.JUNIOR] = create_user(Roles.JUNIOR, team_lead=users[Roles.TEAMLEAD])
    return users


def create_bank_account(balance='500.00', currency='USD', bank=None, **extra):
    """Active bank account (and bank) with the given balance"""
    from Finance.cash_management.models import Bank, BankAccount

    _counter['value'] += 1
    if bank is None:
        bank = Bank.objects.create(name=f"Bank {_counter['value']}", currency=currency)
    extra.setdefault('holder_name', f"Holder {_counter['value']}")
    return BankAccount.objects.create(bank=bank, currency=currency, balance=Decimal(balance), **extra)


def create_card(bank_account=None, assigned_to=None, status=None, cvv='123', **extra):
    """Card with its secret; the number is unique per call"""
    from Finance.cash_management.models import Card, CardSecret

    _counter['value'] += 1
    if bank_account is None:
        bank_account = create_bank_account()
    number = f"4111{_counter['value']:012d}"
    card = Card.objects.create(
        bank_account=bank_account,
        card_number_mask=Card.mask_number(number),
        card_bin=Card.bin_of(number),
        exp_month=extra.pop('exp_month', 12),
        exp_year=extra.pop('exp_year', timezone.now().year + 2),
        status=status or Card.initial_status_for(bank_account),
        assigned_to=assigned_to,
        **extra
    )
    CardSecret.objects.create(card=card, pan=number, cvv=cvv)
    return card


def create_casino(status='approved', **extra):
    from Casino.casinos.models import Casino

    _counter['value'] += 1
    extra.setdefault('name', f"Casino {_counter['value']}")
    extra.setdefault('url', f"https://casino{_counter['value']}.example.com")
    return Casino.objects.create(status=status, **extra)
