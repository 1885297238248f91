"""Delivery partners, fees and the delivery order lifecycle.

Delivery orders:

    driver_pending_assignment -> driver_assigned -> picking_up
        -> in_transit -> delivered -> completed

Pickup orders:

    pending -> completed

Any order that is not completed or failed may move to failed.
"""
from flask import current_app
import logging
import secrets

from sqlalchemy import or_

from bargen.errors import AuthorizationDenied, NotFound, ValidationError
from bargen.extensions import db
from bargen.models import (
    DeliveryOption,
    DeliveryOrder,
    DeliveryPartner,
    DeliveryStatus,
    ShopProfile,
)
from bargen.pricing import delivery_fee
from bargen.services.audit_service import log_audit
from bargen.services.bargain_service import has_accepted_bargain
from bargen.services.catalog_service import require_shop
from bargen.utils import optional_text, require_bool, require_text

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (DeliveryStatus.COMPLETED, DeliveryStatus.FAILED)

# Moves made by the assigned partner through advance_order.
PARTNER_TRANSITIONS = {
    DeliveryStatus.DRIVER_ASSIGNED: DeliveryStatus.PICKING_UP,
    DeliveryStatus.PICKING_UP: DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.IN_TRANSIT: DeliveryStatus.DELIVERED,
}


def _completion_code():
    return f'{secrets.randbelow(1000000):06d}'


def _require_partner(partner_id):
    partner = db.session.get(DeliveryPartner, partner_id)
    if partner is None:
        raise NotFound(f'Delivery partner {partner_id} not found')
    return partner


def _require_order(order_id):
    order = db.session.get(DeliveryOrder, order_id)
    if order is None:
        raise NotFound(f'Delivery order {order_id} not found')
    return order


def partners_for_user(user):
    return DeliveryPartner.query.filter_by(user_id=user.id).all()


def register_partner(user, data):
    partner = DeliveryPartner(
        user_id=user.id,
        name=require_text(data, 'name', max_length=100),
        vehicle_type=require_text(data, 'vehicle_type', max_length=50),
        location=require_text(data, 'location', allow_empty=True),
        is_available=True,
    )
    db.session.add(partner)
    db.session.flush()
    log_audit(
        actor=user,
        action='DELIVERY_PARTNER_REGISTER',
        target_type='DELIVERY_PARTNER',
        target_id=partner.id,
        payload={'vehicle_type': partner.vehicle_type})
    db.session.commit()
    return partner


def set_partner_availability(user, partner_id, data):
    partner = _require_partner(partner_id)
    if partner.user_id != user.id:
        raise AuthorizationDenied(
            'You do not have permission: not your delivery partner profile')
    partner.is_available = require_bool(data, 'is_available')
    log_audit(
        actor=user,
        action='DELIVERY_PARTNER_AVAILABILITY',
        target_type='DELIVERY_PARTNER',
        target_id=partner.id,
        payload={'is_available': partner.is_available})
    db.session.commit()
    return partner


def rate_per_km():
    return current_app.config['DELIVERY_RATE_PER_KM']


def calculate_fee(shop_id, distance_km):
    require_shop(shop_id)
    try:
        return delivery_fee(distance_km, rate_per_km())
    except ValueError as e:
        raise ValidationError(str(e))


def create_order(customer, data):
    shop_id = data.get('shop_id')
    if isinstance(shop_id, bool) or not isinstance(shop_id, int):
        raise ValidationError('shop_id must be an integer')
    shop = require_shop(shop_id)
    try:
        option = DeliveryOption(data.get('delivery_option'))
    except ValueError:
        raise ValidationError('delivery_option must be one of: pickup, delivery')

    if not has_accepted_bargain(customer, shop.id):
        logger.warning(
            "Delivery order refused for %s at shop %s: no accepted bargain",
            customer.principal, shop.id)
        raise AuthorizationDenied(
            'You do not have permission: a bargain must be accepted by the '
            'shopkeeper before arranging delivery')

    if option == DeliveryOption.DELIVERY:
        dropoff = require_text(data, 'dropoff_location', max_length=255)
        status = DeliveryStatus.DRIVER_PENDING_ASSIGNMENT
        fee = delivery_fee(shop.distance_km, rate_per_km())
    else:
        dropoff = optional_text(data, 'dropoff_location') or ''
        status = DeliveryStatus.PENDING
        fee = 0

    order = DeliveryOrder(
        shop_id=shop.id,
        customer_id=customer.id,
        status=status,
        delivery_option=option,
        pickup_location=shop.address,
        dropoff_location=dropoff,
        delivery_fee=fee,
        completion_code=_completion_code(),
    )
    db.session.add(order)
    db.session.flush()
    log_audit(
        actor=customer,
        action='DELIVERY_ORDER_CREATE',
        target_type='DELIVERY_ORDER',
        target_id=order.id,
        payload={
            'shop_id': shop.id,
            'option': option.value,
            'delivery_fee': fee,
        })
    db.session.commit()
    return order


def assign_order(user, order_id):
    order = _require_order(order_id)
    partner = DeliveryPartner.query.filter_by(
        user_id=user.id, is_available=True).first()
    if partner is None:
        raise AuthorizationDenied(
            'You do not have permission: only an available delivery partner '
            'can take orders')
    if order.status != DeliveryStatus.DRIVER_PENDING_ASSIGNMENT:
        raise ValidationError(
            f'Order cannot be assigned while {order.status.value}')

    order.driver_id = partner.id
    order.status = DeliveryStatus.DRIVER_ASSIGNED
    log_audit(
        actor=user,
        action='DELIVERY_ORDER_ASSIGN',
        target_type='DELIVERY_ORDER',
        target_id=order.id,
        payload={'partner_id': partner.id})
    db.session.commit()
    return order


def _is_assigned_partner(order, user):
    return order.driver is not None and order.driver.user_id == user.id


def advance_order(user, order_id, data):
    order = _require_order(order_id)
    try:
        target = DeliveryStatus(data.get('status'))
    except ValueError:
        raise ValidationError(f"Invalid delivery status: {data.get('status')}")

    if order.status in TERMINAL_STATUSES:
        raise ValidationError(f'Order is already {order.status.value}')

    if target == DeliveryStatus.FAILED:
        involved = (
            _is_assigned_partner(order, user)
            or order.customer_id == user.id
            or order.shop.owner_id == user.id
        )
        if not involved:
            raise AuthorizationDenied(
                'You do not have permission: not involved in this order')
    else:
        if not _is_assigned_partner(order, user):
            raise AuthorizationDenied(
                'You do not have permission: only the assigned partner can '
                'update this order')
        if PARTNER_TRANSITIONS.get(order.status) != target:
            raise ValidationError(
                f'Cannot move order from {order.status.value} to '
                f'{target.value}')

    previous = order.status
    order.status = target
    log_audit(
        actor=user,
        action='DELIVERY_ORDER_STATUS',
        target_type='DELIVERY_ORDER',
        target_id=order.id,
        payload={'from': previous.value, 'to': target.value})
    db.session.commit()
    return order


def complete_order(user, order_id, data):
    order = _require_order(order_id)
    code = require_text(data, 'completion_code')

    if order.status == DeliveryStatus.DELIVERED:
        if not _is_assigned_partner(order, user):
            raise AuthorizationDenied(
                'You do not have permission: only the assigned partner can '
                'complete this delivery')
    elif (order.status == DeliveryStatus.PENDING
          and order.delivery_option == DeliveryOption.PICKUP):
        if order.shop.owner_id != user.id:
            raise AuthorizationDenied(
                'You do not have permission: only the shop owner can '
                'complete a pickup')
    else:
        raise ValidationError(
            f'Order cannot be completed while {order.status.value}')

    if not secrets.compare_digest(code, order.completion_code):
        logger.warning(
            "Wrong completion code for delivery order %s by %s",
            order.id, user.principal)
        raise ValidationError('Invalid completion code')

    order.status = DeliveryStatus.COMPLETED
    log_audit(
        actor=user,
        action='DELIVERY_ORDER_COMPLETE',
        target_type='DELIVERY_ORDER',
        target_id=order.id)
    db.session.commit()
    return order


def orders_for_user(user):
    """Orders the caller takes part in, plus open ones for free partners."""
    partners = partners_for_user(user)
    partner_ids = [p.id for p in partners]
    available = any(p.is_available for p in partners)
    owned_shop_ids = [
        s.id for s in ShopProfile.query.filter_by(owner_id=user.id).all()]

    clauses = [DeliveryOrder.customer_id == user.id]
    if partner_ids:
        clauses.append(DeliveryOrder.driver_id.in_(partner_ids))
    if owned_shop_ids:
        clauses.append(DeliveryOrder.shop_id.in_(owned_shop_ids))
    if available:
        clauses.append(
            DeliveryOrder.status == DeliveryStatus.DRIVER_PENDING_ASSIGNMENT)

    return (
        DeliveryOrder.query.filter(or_(*clauses))
        .order_by(DeliveryOrder.created_at.desc(), DeliveryOrder.id.desc())
        .all()
    )


def order_view(order, user):
    """Serialize an order; only the customer sees the completion code."""
    return order.to_dict(include_code=order.customer_id == user.id)
