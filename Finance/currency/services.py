"""
Currency Services
=================

Single source of USD conversion rates for the whole project.

Every rate already carries the gross coefficient (-5%), so converting is a
plain multiplication:

    convert_to_usd(Decimal('100'), 'GBP')  # 100 * 1.27 * 0.95

Live rates come from exchangerate-api.com and are cached for an hour. When
the fetch fails the static table below is used.
"""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal, InvalidOperation

import requests
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

GROSS_COEFFICIENT = 0.95

SUPPORTED_CURRENCIES = ['USD', 'GBP', 'EUR', 'CAD']

# Multipliers to USD, coefficient included
STATIC_RATES = {
    'USD': GROSS_COEFFICIENT,
    'GBP': 1.27 * GROSS_COEFFICIENT,
    'EUR': 1.09 * GROSS_COEFFICIENT,
    'CAD': 0.74 * GROSS_COEFFICIENT,
}

CURRENCY_SYMBOLS = {
    'USD': '$',
    'GBP': '£',
    'EUR': '€',
    'CAD': 'C$',
}

CURRENCY_CHOICES = [(code, code) for code in SUPPORTED_CURRENCIES]

CACHE_KEY = 'currency_rates'
SOURCE_LIVE = 'exchangerate-api.com'
SOURCE_FALLBACK = 'fallback'


def _cache_seconds():
    return getattr(settings, 'CURRENCY_CACHE_SECONDS', 3600)


def fetch_live_rates():
    """
    Fetch USD rates from the external API.

    The API returns rates FROM USD (USD->GBP = 0.78); the multiplier we need
    is TO USD, so each rate is inverted before the coefficient is applied.

    Raises:
        requests.RequestException: network or HTTP failure
        KeyError / ValueError: unexpected payload
    """
    response = requests.get(
        settings.CURRENCY_RATES_URL,
        headers={'User-Agent': 'Mozilla/5.0 (compatible; ERP/1.0)'},
        timeout=getattr(settings, 'CURRENCY_FETCH_TIMEOUT', 10),
    )
    response.raise_for_status()
    data = response.json()

    rates = {'USD': GROSS_COEFFICIENT}
    for code in SUPPORTED_CURRENCIES:
        if code == 'USD':
            continue
        rates[code] = (1 / float(data['rates'][code])) * GROSS_COEFFICIENT
    return rates


def _build_entry():
    now = timezone.now()
    try:
        rates = fetch_live_rates()
        entry = {'rates': rates, 'source': SOURCE_LIVE}
    except (requests.RequestException, KeyError, ValueError, TypeError, ZeroDivisionError) as exc:
        logger.warning("Exchange rate fetch failed, using fallback rates: %s", exc)
        entry = {
            'rates': dict(STATIC_RATES),
            'source': SOURCE_FALLBACK,
            'error': 'Rate service unavailable, fallback rates in use',
        }
    entry['coefficient'] = GROSS_COEFFICIENT
    entry['last_updated'] = now.isoformat()
    entry['fetched_at'] = now.timestamp()
    return entry


def get_currency_rates(force_refresh=False):
    """
    Current rates with cache metadata.

    Returns:
        dict with rates, source, coefficient, last_updated, cached,
        cache_expires_in (milliseconds) and next_update
    """
    ttl = _cache_seconds()
    entry = None if force_refresh else cache.get(CACHE_KEY)
    cached = entry is not None

    if entry is None:
        entry = _build_entry()
        cache.set(CACHE_KEY, entry, ttl)
        logger.info("Currency rates refreshed from %s", entry['source'])

    now = timezone.now().timestamp()
    fetched_at = entry['fetched_at']
    expires_in = max(0.0, ttl - (now - fetched_at))

    result = {key: value for key, value in entry.items() if key != 'fetched_at'}
    result['cached'] = cached
    result['cache_expires_in'] = int(expires_in * 1000)
    result['next_update'] = (
        datetime.fromtimestamp(fetched_at, tz=dt_timezone.utc) + timedelta(seconds=ttl)
    ).isoformat()
    return result


def convert_to_usd(amount, currency, rates=None):
    """
    Convert ``amount`` in ``currency`` to USD.

    Unknown currencies convert at 1; empty or zero amounts give 0.

    Args:
        amount: Decimal, number or numeric string
        currency: ISO code
        rates: Optional rate table; STATIC_RATES when omitted

    Returns:
        Decimal
    """
    if not amount:
        return Decimal('0')
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return Decimal('0')
    if value == 0:
        return Decimal('0')

    table = rates if rates is not None else STATIC_RATES
    rate = table.get(currency) or STATIC_RATES.get(currency) or 1
    return value * Decimal(str(rate))


def get_currency_symbol(currency):
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_currency(amount, currency='USD'):
    """'£12.50' style display string."""
    return f"{get_currency_symbol(currency)}{Decimal(str(amount or 0)):.2f}"


def guess_casino_currency(name):
    """Currency implied by a casino's name when none is stored."""
    lowered = (name or '').lower()
    if 'uk' in lowered or 'british' in lowered or 'virgin' in lowered:
        return 'GBP'
    if 'euro' in lowered:
        return 'EUR'
    return 'USD'
