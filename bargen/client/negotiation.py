"""Client side of the bargain protocol.

A bargain is submitted pending and only the shopkeeper moves it to
accepted. Every helper re-reads from the store after a mutation and never
patches a local list in place.
"""
from datetime import datetime
import logging

from bargen.errors import ValidationError

logger = logging.getLogger(__name__)

BEST_DEAL_PRICE = 0
BEST_DEAL_NOTE = 'Best deal request'


def validate_desired_price(desired_price):
    if isinstance(desired_price, bool) or not isinstance(desired_price, int):
        raise ValidationError('desired_price must be an integer')
    if desired_price < 0:
        raise ValidationError('desired_price must be at least 0')
    return desired_price


def submit_offer(client, product_id, desired_price, note=None):
    validate_desired_price(desired_price)
    bargain_id = client.send_bargain_request(product_id, desired_price, note)
    logger.info(
        "Offer %s on product %s submitted by %s",
        bargain_id, product_id, client.session.principal)
    return bargain_id


def request_best_deal(client, product_id):
    """Ask the shopkeeper to propose the price."""
    return submit_offer(client, product_id, BEST_DEAL_PRICE, BEST_DEAL_NOTE)


def _timestamp_key(bargain):
    try:
        return datetime.fromisoformat(bargain.timestamp)
    except (TypeError, ValueError):
        return datetime.min


def sort_for_display(bargains):
    """Newest first; equal timestamps keep the store's order."""
    return sorted(bargains, key=_timestamp_key, reverse=True)


def refresh_bargains(client, product_id):
    return sort_for_display(client.bargains_by_product(product_id))


def accept_and_refresh(client, bargain_id, product_id):
    """Accept, then re-read the product's bargains from the store."""
    client.accept_bargain(bargain_id)
    return refresh_bargains(client, product_id)


def pending_bargains(bargains):
    return [b for b in bargains if b.status == 'pending']


def delivery_available(bargains, principal):
    """Advisory preview only. The store enforces the real gate."""
    return any(
        b.mutually_accepted and b.customer == principal for b in bargains)
