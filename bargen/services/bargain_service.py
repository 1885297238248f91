"""Bargain lifecycle.

    pending ── accept() by the shopkeeper ──► accepted (terminal)

A pending bargain never expires and is never deduplicated. Accepting an
already accepted bargain is a no-op that returns the stored record.
"""
from datetime import datetime
import logging

from bargen.errors import AuthorizationDenied, NotFound
from bargen.extensions import db
from bargen.models import BargainRequest, BargainStatus, UserRole
from bargen.services.audit_service import log_audit
from bargen.services.catalog_service import live_product, require_product
from bargen.utils import optional_text, require_int

logger = logging.getLogger(__name__)

TRANSITIONS = {
    BargainStatus.PENDING: {BargainStatus.ACCEPTED},
    BargainStatus.ACCEPTED: set(),
}


def submit_bargain(customer, product_id, data):
    product = require_product(product_id)
    desired_price = require_int(data, 'desired_price', minimum=0)
    bargain = BargainRequest(
        product_id=product.id,
        shop_id=product.shop_id,
        customer_id=customer.id,
        shopkeeper_id=product.shop.owner_id,
        desired_price=desired_price,
        note=optional_text(data, 'note'),
        status=BargainStatus.PENDING,
        mutually_accepted=False,
    )
    db.session.add(bargain)
    db.session.flush()
    log_audit(
        actor=customer,
        action='BARGAIN_SUBMIT',
        target_type='BARGAIN',
        target_id=bargain.id,
        payload={
            'product_id': product.id,
            'desired_price': desired_price,
            'best_deal': desired_price == 0,
        })
    db.session.commit()
    return bargain


def accept_bargain(shopkeeper, bargain_id):
    bargain = db.session.get(BargainRequest, bargain_id)
    if bargain is None:
        raise NotFound(f'Bargain {bargain_id} not found')
    if bargain.shopkeeper_id != shopkeeper.id:
        logger.warning(
            "User %s attempted to accept bargain %s owned by %s",
            shopkeeper.principal,
            bargain.id,
            bargain.shopkeeper.principal,
        )
        raise AuthorizationDenied(
            'You do not have permission: only the shopkeeper can accept '
            'this bargain')

    if BargainStatus.ACCEPTED not in TRANSITIONS[bargain.status]:
        logger.info("Bargain %s already accepted", bargain.id)
        return bargain

    bargain.status = BargainStatus.ACCEPTED
    bargain.mutually_accepted = True
    bargain.accepted_at = datetime.utcnow()
    log_audit(
        actor=shopkeeper,
        action='BARGAIN_ACCEPT',
        target_type='BARGAIN',
        target_id=bargain.id,
        payload={
            'product_id': bargain.product_id,
            'desired_price': bargain.desired_price,
        })
    db.session.commit()
    return bargain


def bargains_for_product(viewer, product_id):
    """Newest first. Shopkeepers and admins see all, others their own."""
    query = BargainRequest.query.filter_by(product_id=product_id)
    product = live_product(product_id)
    sees_all = (
        viewer.role == UserRole.ADMIN
        or (product is not None and product.shop.owner_id == viewer.id)
        or query.filter_by(shopkeeper_id=viewer.id).first() is not None
    )
    if not sees_all:
        query = query.filter_by(customer_id=viewer.id)
    return query.order_by(
        BargainRequest.created_at.desc(),
        BargainRequest.id.desc(),
    ).all()


def has_accepted_bargain(customer, shop_id):
    return BargainRequest.query.filter_by(
        customer_id=customer.id,
        shop_id=shop_id,
        mutually_accepted=True,
    ).first() is not None
