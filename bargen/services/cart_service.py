"""Cart lines, deal protection and the authoritative cart total."""
from flask import current_app
import logging

from bargen.errors import ValidationError
from bargen.extensions import db
from bargen.models import Cart, CartItem, Product, ShopkeeperAction
from bargen.services.audit_service import log_audit
from bargen.services.catalog_service import require_product
from bargen.services.notification_service import notify_shopkeeper
from bargen.utils import require_int

logger = logging.getLogger(__name__)


def get_or_create_cart(user):
    cart = Cart.query.filter_by(user_id=user.id).first()
    if cart is None:
        cart = Cart(user_id=user.id)
        db.session.add(cart)
        db.session.flush()
    return cart


def add_to_cart(user, data):
    product = require_product(require_int(data, 'product_id'))
    quantity = require_int(data, 'quantity', minimum=1)

    cart = get_or_create_cart(user)
    item = CartItem.query.filter_by(
        cart_id=cart.id, product_id=product.id).first()
    if item is None:
        item = CartItem(cart_id=cart.id, product_id=product.id,
                        quantity=quantity)
        db.session.add(item)
    else:
        item.quantity += quantity

    if product.shop.owner_id != user.id:
        notify_shopkeeper(product, user, ShopkeeperAction.IN_CART)

    log_audit(
        actor=user,
        action='CART_ADD',
        target_type='PRODUCT',
        target_id=product.id,
        payload={'quantity': quantity, 'line_quantity': item.quantity})
    db.session.commit()
    return item


def cart_items(user):
    """Raw lines, including ones whose product has since been deleted."""
    cart = Cart.query.filter_by(user_id=user.id).first()
    if cart is None:
        return []
    return cart.items.order_by(CartItem.product_id.asc()).all()


def insurance_options():
    return [dict(option)
            for option in current_app.config['INSURANCE_OPTIONS']]


def selected_insurance(user):
    cart = Cart.query.filter_by(user_id=user.id).first()
    if cart is None:
        return None
    return cart.selected_insurance()


def select_insurance(user, insurance):
    """Set the plan by name, or clear it with None."""
    cart = get_or_create_cart(user)
    if insurance is None:
        cart.insurance_name = None
        cart.insurance_details = None
        cart.insurance_premium = None
        cart.insurance_coverage = None
        log_audit(actor=user, action='INSURANCE_CLEAR', target_type='CART',
                  target_id=cart.id)
        db.session.commit()
        return None

    if not isinstance(insurance, dict):
        raise ValidationError('insurance must be an object or null')
    name = insurance.get('name')
    plan = next(
        (o for o in insurance_options() if o['name'] == name), None)
    if plan is None:
        raise ValidationError(f'Invalid insurance option: {name}')

    cart.insurance_name = plan['name']
    cart.insurance_details = plan['details']
    cart.insurance_premium = plan['premium']
    cart.insurance_coverage = plan['coverage_amount']
    log_audit(actor=user, action='INSURANCE_SELECT', target_type='CART',
              target_id=cart.id, payload={'name': plan['name']})
    db.session.commit()
    return cart.selected_insurance()


def cart_total(user):
    """Authoritative total. Lines with a deleted product are excluded."""
    items = cart_items(user)
    product_ids = [item.product_id for item in items]
    products = {}
    if product_ids:
        products = {
            p.id: p
            for p in Product.query.filter(
                Product.id.in_(product_ids),
                Product.is_deleted.is_(False),
            ).all()
        }

    subtotal = 0
    unavailable = []
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            unavailable.append(item.product_id)
            continue
        subtotal += product.price * item.quantity

    if unavailable:
        logger.info(
            "Cart for %s has unavailable products %s",
            user.principal, unavailable)

    insurance = selected_insurance(user)
    premium = insurance['premium'] if insurance else 0
    return {
        'cart_items': [item.to_dict() for item in items],
        'subtotal': subtotal,
        'insurance': insurance,
        'insurance_premium': premium,
        'total': subtotal + premium,
        'unavailable_items': unavailable,
    }


def recommend_insurance(total):
    """Cheapest plan covering the total, else the widest cover."""
    if total <= 0:
        return None
    options = insurance_options()
    covering = [o for o in options if o['coverage_amount'] >= total]
    if covering:
        return min(covering, key=lambda o: o['premium'])
    return max(options, key=lambda o: o['coverage_amount'])
