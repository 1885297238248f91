"""Display helpers: currency, phone links, condition labels.

Prices are stored in USD cents and shown in Indian rupees. The
conversion is lossy and only ever used for display or for reading a
rupee amount the user typed.
"""
from decimal import Decimal, ROUND_HALF_UP
import re

from bargen.config import Config

RUPEE_SIGN = '₹'


def _group_indian(digits):
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def usd_cents_to_inr(price_in_usd_cents, rate=None):
    rate = Config.USD_TO_INR_RATE if rate is None else rate
    return Decimal(int(price_in_usd_cents)) / 100 * Decimal(str(rate))


def format_currency(price_in_usd_cents, rate=None):
    """USD cents as whole rupees, e.g. 10000 -> '₹9,180'."""
    amount = usd_cents_to_inr(price_in_usd_cents, rate)
    rupees = int(abs(amount).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    sign = '-' if amount < 0 and rupees else ''
    return f'{sign}{RUPEE_SIGN}{_group_indian(str(rupees))}'


def convert_inr_to_usd_cents(inr_rupees, rate=None):
    rate = Config.USD_TO_INR_RATE if rate is None else rate
    cents = Decimal(str(inr_rupees)) / Decimal(str(rate)) * 100
    return int(cents.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_phone_for_whatsapp(phone):
    return 'https://wa.me/' + re.sub(r'\D', '', phone or '')


def format_phone_for_tel(phone):
    return 'tel:' + re.sub(r'[^\d+]', '', phone or '')


def condition_label(condition):
    return 'New' if condition == 'new' else 'Used'
